"""
Tests for DirectiveSettings.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from prompt_directives.config import DirectiveSettings, get_settings


class TestDirectiveSettings:
    """Defaults, environment overrides and validation."""

    def test_defaults(self):
        settings = DirectiveSettings()
        assert settings.cache_max_size == 500
        assert settings.cache_ttl_seconds == 300.0
        assert settings.audit_log_enabled is False
        assert settings.audit_log_dir == Path("directive_logs")
        assert settings.is_development

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PROMPT_DIRECTIVES_CACHE_MAX_SIZE", "25")
        monkeypatch.setenv("PROMPT_DIRECTIVES_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("PROMPT_DIRECTIVES_ENV", "production")

        settings = DirectiveSettings()

        assert settings.cache_max_size == 25
        assert settings.log_level == "DEBUG"
        assert settings.is_production

    @pytest.mark.parametrize("kwargs", [
        {"cache_max_size": 0},
        {"cache_ttl_seconds": 0},
        {"log_level": "LOUD"},
        {"env": "qa"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            DirectiveSettings(**kwargs)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
