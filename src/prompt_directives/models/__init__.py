"""
Prompt Directives - Data models.

Prompt is owned by the host and only read here. DirectiveSet is derived
from a prompt's content by the parser and never mutated afterwards.
"""

from prompt_directives.models.directives import DirectiveSet, MessageRange
from prompt_directives.models.prompts import Prompt, PromptRole

__all__ = [
    "DirectiveSet",
    "MessageRange",
    "Prompt",
    "PromptRole",
]
