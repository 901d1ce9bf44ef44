"""
In-memory prompt store.

Implements both PromptSetAccessor and ToggleSink over a plain list. Used by
tests and as the base of the preset file adapter.
"""

import logging

from prompt_directives.host.base import PromptNotFoundError, PromptSetAccessor, ToggleSink
from prompt_directives.models import Prompt

logger = logging.getLogger(__name__)


class InMemoryPromptStore(PromptSetAccessor, ToggleSink):
    """Prompt set held in memory; toggles replace the stored Prompt."""

    def __init__(self, prompts: list[Prompt] | None = None):
        self._prompts: list[Prompt] = list(prompts or [])
        self.toggle_log: list[tuple[str, bool]] = []

    def list_prompts(self) -> list[Prompt]:
        return list(self._prompts)

    def get(self, identifier: str) -> Prompt:
        for prompt in self._prompts:
            if prompt.identifier == identifier:
                return prompt
        raise PromptNotFoundError(identifier)

    def is_enabled(self, identifier: str) -> bool:
        return self.get(identifier).enabled

    def set_enabled(self, identifier: str, enabled: bool) -> None:
        for index, prompt in enumerate(self._prompts):
            if prompt.identifier == identifier:
                self._prompts[index] = prompt.model_copy(update={"enabled": enabled})
                self.toggle_log.append((identifier, enabled))
                logger.debug(f"Toggled prompt {identifier} to {'enabled' if enabled else 'disabled'}")
                self._persist(identifier, enabled)
                return
        raise PromptNotFoundError(identifier)

    def _persist(self, identifier: str, enabled: bool) -> None:
        """Hook for subclasses that write state somewhere."""
