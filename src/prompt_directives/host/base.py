"""
Host Integration Protocol.

The directive engine never owns prompt state. It reads prompts and writes
toggles through the interfaces below, which each host (a preset file, a
chat frontend, a test fixture) implements.

Key concepts:
- PromptSetAccessor: live view of every prompt with its enabled flag
- ToggleSink: applies and persists an enable/disable
- ResolutionPrompt: asks a human whether to proceed despite issues
- MessageCounter: current conversation length
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prompt_directives.core.issues import Issue
    from prompt_directives.models import Prompt


class PromptNotFoundError(KeyError):
    """Raised by hosts when an identifier is not in the prompt set."""


class PromptSetAccessor(ABC):
    """Read access to the host's prompt set."""

    @abstractmethod
    def list_prompts(self) -> list[Prompt]:
        """
        Every prompt with its current enabled state.

        Returns:
            Fresh list reflecting live state; callers may not mutate it
        """
        ...


class ToggleSink(ABC):
    """Write access to prompt enabled state."""

    @abstractmethod
    def set_enabled(self, identifier: str, enabled: bool) -> None:
        """
        Apply and persist a toggle.

        Raises:
            PromptNotFoundError: If the identifier is unknown
        """
        ...


class ResolutionPrompt(ABC):
    """Interactive fallback when issues cannot be resolved automatically."""

    @abstractmethod
    def confirm(self, prompt_id: str, issues: list[Issue]) -> bool:
        """Show the issues and return True to enable anyway."""
        ...


class MessageCounter(ABC):
    """Conversation length source for trigger evaluation."""

    @abstractmethod
    def current_message_count(self) -> int:
        ...
