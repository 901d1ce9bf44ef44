"""
Prompt Directives Core - Parser, cache, validation, auto-resolution, triggers.

Everything here is synchronous and works on plain prompt lists. Only the
cache keeps state between calls.
"""

from prompt_directives.core.cache import CacheStats, DirectiveCache
from prompt_directives.core.issues import Issue, IssueType, Severity, dedupe_issues
from prompt_directives.core.parser import parse
from prompt_directives.core.resolution import (
    AutoResolutionError,
    ResolutionPlan,
    apply_auto_resolution,
    can_auto_resolve,
)
from prompt_directives.core.triggers import TriggerEvent, TriggerResult, TriggerRule, evaluate_triggers
from prompt_directives.core.validation import validate

__all__ = [
    "CacheStats",
    "DirectiveCache",
    "Issue",
    "IssueType",
    "Severity",
    "dedupe_issues",
    "parse",
    "AutoResolutionError",
    "ResolutionPlan",
    "apply_auto_resolution",
    "can_auto_resolve",
    "TriggerEvent",
    "TriggerResult",
    "TriggerRule",
    "evaluate_triggers",
    "validate",
]
