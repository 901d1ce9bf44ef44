"""
Prompt Directives - Auto-resolution.

A prompt can fix its own blocking issues when it declares how:
- @auto-disable lists prompts it may switch off to clear exclusive,
  category-limit and mutual-exclusive-group conflicts
- @auto-enable-dependencies lets it switch on the prompts it @requires

Resolution is all-or-nothing. If any error cannot be fixed this way the
caller falls back to asking the user. Warnings never block and are never
acted on.
"""

import logging
from dataclasses import dataclass, field

from prompt_directives.core.issues import CONFLICT_TYPES, Issue, IssueType
from prompt_directives.host.base import ToggleSink
from prompt_directives.models import DirectiveSet

logger = logging.getLogger(__name__)


class AutoResolutionError(ValueError):
    """Raised when asked to apply a resolution the directives do not allow."""


@dataclass
class ResolutionPlan:
    """Toggles that clear a set of issues, applied before the activating toggle."""

    to_disable: list[str] = field(default_factory=list)
    to_enable: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_disable and not self.to_enable

    def to_dict(self) -> dict:
        return {"to_disable": list(self.to_disable), "to_enable": list(self.to_enable)}


def _resolvable(issue: Issue, directives: DirectiveSet) -> bool:
    if issue.type in CONFLICT_TYPES:
        return all(identifier in directives.auto_disable for identifier in issue.conflicting_ids)
    if issue.type is IssueType.MISSING_DEPENDENCY:
        return directives.auto_enable_dependencies and issue.required_prompt is not None
    return False


def can_auto_resolve(issues: list[Issue], directives: DirectiveSet) -> bool:
    """
    Check whether every error issue can be fixed by the activating prompt.

    Args:
        issues: Issues from validate()
        directives: DirectiveSet of the prompt being enabled

    Returns:
        True when each error is covered by @auto-disable or, for missing
        dependencies, by @auto-enable-dependencies with an existing target
    """
    return all(_resolvable(issue, directives) for issue in issues if issue.is_error)


def plan_auto_resolution(issues: list[Issue], directives: DirectiveSet) -> ResolutionPlan:
    """Collect the toggles that clear the error issues, without applying them."""
    if not can_auto_resolve(issues, directives):
        raise AutoResolutionError("Issues cannot be resolved from the prompt's own directives")

    plan = ResolutionPlan()
    for issue in issues:
        if not issue.is_error:
            continue
        if issue.type in CONFLICT_TYPES:
            for identifier in issue.conflicting_ids:
                if identifier not in plan.to_disable:
                    plan.to_disable.append(identifier)
        elif issue.type is IssueType.MISSING_DEPENDENCY:
            identifier = issue.required_prompt.identifier
            if identifier not in plan.to_enable:
                plan.to_enable.append(identifier)
    return plan


def apply_auto_resolution(
    issues: list[Issue],
    directives: DirectiveSet,
    toggle_sink: ToggleSink,
) -> ResolutionPlan:
    """
    Disable conflicting prompts and enable required ones through the sink.

    The activating prompt itself is not toggled here; the caller commits it
    after this returns.

    Raises:
        AutoResolutionError: If can_auto_resolve() is False for these issues
    """
    plan = plan_auto_resolution(issues, directives)
    for identifier in plan.to_disable:
        toggle_sink.set_enabled(identifier, False)
        logger.info(f"Auto-disabled conflicting prompt: {identifier}")
    for identifier in plan.to_enable:
        toggle_sink.set_enabled(identifier, True)
        logger.info(f"Auto-enabled required prompt: {identifier}")
    return plan
