"""
Prompt Directives - Host prompt model.

Mirrors the fields the engine reads from a host prompt set. Extra keys
carried by preset files (system_prompt, marker, injection_position, ...)
are ignored.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PromptRole(str, Enum):
    """Chat role a prompt is injected as."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Prompt(BaseModel):
    """
    A single prompt unit in a preset.

    identifier is unique and stable; name is for display only.
    """

    model_config = ConfigDict(extra="ignore")

    identifier: str
    name: str = ""
    content: str = ""
    enabled: bool = False
    role: PromptRole = PromptRole.SYSTEM

    @property
    def display_name(self) -> str:
        return self.name or self.identifier
