"""
Pytest configuration and fixtures for Prompt Directives tests.
"""

import os

import pytest

# Set test environment before importing prompt_directives modules
os.environ["PROMPT_DIRECTIVES_ENV"] = "development"
os.environ["PROMPT_DIRECTIVES_AUDIT_LOG_ENABLED"] = "false"

from prompt_directives.host.memory import InMemoryPromptStore
from prompt_directives.models import Prompt


def build_prompt(
    identifier: str,
    *directives: str,
    enabled: bool = False,
    name: str = "",
    body: str = "Prompt body.",
) -> Prompt:
    """Prompt whose content is one {{// ... }} block per directive plus a body."""
    blocks = [f"{{{{// {directive} }}}}" for directive in directives]
    return Prompt(
        identifier=identifier,
        name=name,
        content="\n".join([*blocks, body]),
        enabled=enabled,
    )


@pytest.fixture
def make_prompt():
    """Factory fixture: make_prompt("id", "@tags a", enabled=True)."""
    return build_prompt


@pytest.fixture
def make_store():
    """Factory fixture for an in-memory host over the given prompts."""
    def _make(*prompts: Prompt) -> InMemoryPromptStore:
        return InMemoryPromptStore(list(prompts))
    return _make


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
