"""
Prompt Directives - Host integration.

Interfaces the engine calls into, plus two ready-made hosts: an in-memory
store and a preset file adapter.
"""

from prompt_directives.host.base import (
    MessageCounter,
    PromptNotFoundError,
    PromptSetAccessor,
    ResolutionPrompt,
    ToggleSink,
)
from prompt_directives.host.memory import InMemoryPromptStore
from prompt_directives.host.preset import PresetFormatError, PresetPromptStore

__all__ = [
    "MessageCounter",
    "PromptNotFoundError",
    "PromptSetAccessor",
    "ResolutionPrompt",
    "ToggleSink",
    "InMemoryPromptStore",
    "PresetFormatError",
    "PresetPromptStore",
]
