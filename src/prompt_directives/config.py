"""
Prompt Directives - Configuration and settings.

DirectiveSettings holds what the engine needs: cache sizing, log level and
the optional audit log. Values come from the environment (PROMPT_DIRECTIVES_*)
or a local .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DirectiveSettings(BaseSettings):
    """
    Settings shared by the engine, the cache and the CLI.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROMPT_DIRECTIVES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Directive cache
    cache_max_size: int = Field(default=500, ge=1)
    cache_ttl_seconds: float = Field(default=300.0, gt=0)

    # Audit logging
    # PROMPT_DIRECTIVES_AUDIT_LOG_ENABLED=1 - write JSONL decisions to audit_log_dir
    audit_log_enabled: bool = False
    audit_log_dir: Path = Path("directive_logs")

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        return self.env == "production"


@lru_cache
def get_settings() -> DirectiveSettings:
    """Get cached DirectiveSettings instance."""
    return DirectiveSettings()
