"""
Tests for the prompt-directives CLI.
"""

import json

import pytest
from typer.testing import CliRunner

from prompt_directives import __version__
from prompt_directives.main import app

runner = CliRunner()


def _write_preset(path, prompts: list[dict], enabled: list[str]) -> None:
    path.write_text(json.dumps({
        "prompts": prompts,
        "prompt_order": [{
            "character_id": 100001,
            "order": [{"identifier": p["identifier"], "enabled": p["identifier"] in enabled} for p in prompts],
        }],
    }), encoding="utf-8")


def _enabled(path) -> dict[str, bool]:
    order = json.loads(path.read_text(encoding="utf-8"))["prompt_order"][0]["order"]
    return {entry["identifier"]: entry["enabled"] for entry in order}


@pytest.fixture
def preset(tmp_path):
    path = tmp_path / "preset.json"
    _write_preset(path, [
        {"identifier": "fast", "name": "Fast", "content": "{{// @exclusive-with slow }}\n{{// @auto-disable slow }}\nGo."},
        {"identifier": "slow", "name": "Slow", "content": "Take your time."},
        {"identifier": "strict", "name": "Strict", "content": "{{// @exclusive-with slow }}\nNo overlap."},
        {"identifier": "late", "name": "Late", "content": "{{// @enable-at-message 10 }}\nTwist."},
    ], enabled=["slow"])
    return path


class TestParseCommand:
    def test_shows_declared_directives(self, tmp_path):
        prompt = tmp_path / "prompt.txt"
        prompt.write_text("{{// @tooltip Hello }}\n{{// @tags a, b }}\n{{// @message-range 5- }}\nBody", encoding="utf-8")

        result = runner.invoke(app, ["parse", str(prompt)])

        assert result.exit_code == 0
        assert "tooltip" in result.output
        assert "Hello" in result.output
        assert "a, b" in result.output
        assert "5-" in result.output

    def test_no_directives(self, tmp_path):
        prompt = tmp_path / "prompt.txt"
        prompt.write_text("Just text.", encoding="utf-8")

        result = runner.invoke(app, ["parse", str(prompt)])

        assert result.exit_code == 0
        assert "No directives found" in result.output


class TestValidateCommand:
    def test_errors_exit_nonzero(self, preset):
        result = runner.invoke(app, ["validate", str(preset), "strict"])

        assert result.exit_code == 1
        assert "exclusive" in result.output

    def test_auto_resolvable_is_reported(self, preset):
        result = runner.invoke(app, ["validate", str(preset), "fast"])
        assert "auto-resolved" in result.output

    def test_clean_prompt(self, preset):
        result = runner.invoke(app, ["validate", str(preset), "late"])

        assert result.exit_code == 0
        assert "can be enabled" in result.output

    def test_unknown_prompt(self, preset):
        result = runner.invoke(app, ["validate", str(preset), "ghost"])

        assert result.exit_code == 1
        assert "Unknown prompt" in result.output

    def test_bad_preset(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path), "a"])

        assert result.exit_code == 1


class TestEnableDisableCommands:
    def test_auto_resolution_writes_preset(self, preset):
        result = runner.invoke(app, ["enable", str(preset), "fast"])

        assert result.exit_code == 0
        assert "disabled slow" in result.output
        assert _enabled(preset) == {"fast": True, "slow": False, "strict": False, "late": False}

    def test_declined(self, preset):
        result = runner.invoke(app, ["enable", str(preset), "strict"], input="n\n")

        assert result.exit_code == 1
        assert _enabled(preset)["strict"] is False

    def test_yes_overrides(self, preset):
        result = runner.invoke(app, ["enable", str(preset), "strict", "--yes"])

        assert result.exit_code == 0
        assert _enabled(preset)["strict"] is True
        assert _enabled(preset)["slow"] is True

    def test_disable(self, preset):
        result = runner.invoke(app, ["disable", str(preset), "slow"])

        assert result.exit_code == 0
        assert _enabled(preset)["slow"] is False

    def test_audit_log_closed_after_command(self, preset, tmp_path, monkeypatch):
        from prompt_directives import config
        from prompt_directives.config import DirectiveSettings

        log_dir = tmp_path / "logs"
        settings = DirectiveSettings(audit_log_enabled=True, audit_log_dir=log_dir)
        monkeypatch.setattr(config, "get_settings", lambda: settings)

        result = runner.invoke(app, ["disable", str(preset), "slow"])

        assert result.exit_code == 0
        (log_path,) = log_dir.glob("*.jsonl")
        events = [json.loads(line)["event"] for line in log_path.read_text(encoding="utf-8").splitlines()]
        assert events[-1] == "session_end"
        assert "toggle" in events


class TestTriggersCommand:
    def test_preview_does_not_write(self, preset):
        result = runner.invoke(app, ["triggers", str(preset), "--count", "10"])

        assert result.exit_code == 0
        assert "Late" in result.output
        assert _enabled(preset)["late"] is False

    def test_apply(self, preset):
        result = runner.invoke(app, ["triggers", str(preset), "--count", "10", "--apply"])

        assert result.exit_code == 0
        assert _enabled(preset)["late"] is True

    def test_nothing_due(self, preset):
        result = runner.invoke(app, ["triggers", str(preset), "--count", "2"])

        assert result.exit_code == 0
        assert "No triggers" in result.output


class TestInfoCommands:
    def test_health(self):
        result = runner.invoke(app, ["health"])

        assert result.exit_code == 0
        assert "Configuration loaded" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
