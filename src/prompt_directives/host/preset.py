"""
Preset file adapter.

Loads a prompt preset from JSON or YAML and writes toggles back to it.

Expected shape (extra keys are preserved untouched):

    {
      "prompts": [
        {"identifier": "main", "name": "Main Prompt", "content": "...", "role": "system"}
      ],
      "prompt_order": [
        {"character_id": 100001, "order": [{"identifier": "main", "enabled": true}]}
      ]
    }

Enabled state comes from the selected prompt_order entry. Prompts missing
from it, or presets without prompt_order, fall back to a per-prompt
"enabled" key.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prompt_directives.host.memory import InMemoryPromptStore
from prompt_directives.models import Prompt

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class PresetFormatError(ValueError):
    """Raised when a preset file cannot be read as a prompt preset."""


def _read(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PresetFormatError(f"Cannot read preset {path}: {e}") from e
    try:
        data = yaml.safe_load(text) if path.suffix.lower() in YAML_SUFFIXES else json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise PresetFormatError(f"Preset {path} is not valid {path.suffix.lstrip('.') or 'json'}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("prompts"), list):
        raise PresetFormatError(f"Preset {path} has no 'prompts' list")
    return data


class PresetPromptStore(InMemoryPromptStore):
    """
    Prompt store backed by a preset file.

    Every toggle is written straight back to disk in the file's own format.
    """

    def __init__(self, path: str | Path, character_id: int | None = None, autosave: bool = True):
        self.path = Path(path)
        self.autosave = autosave
        self._data = _read(self.path)
        self._order = self._select_order(character_id)
        super().__init__(self._load_prompts())
        logger.info(f"Loaded preset {self.path.name}: {len(self._prompts)} prompts")

    def _select_order(self, character_id: int | None) -> list[dict] | None:
        orders = self._data.get("prompt_order")
        if not isinstance(orders, list) or not orders:
            return None
        if character_id is not None:
            for entry in orders:
                if entry.get("character_id") == character_id:
                    return entry.setdefault("order", [])
            raise PresetFormatError(f"No prompt_order entry for character {character_id}")
        return orders[-1].setdefault("order", [])

    def _order_entry(self, identifier: str) -> dict | None:
        if self._order is None:
            return None
        for entry in self._order:
            if entry.get("identifier") == identifier:
                return entry
        return None

    def _load_prompts(self) -> list[Prompt]:
        prompts = []
        for raw in self._data["prompts"]:
            if not isinstance(raw, dict) or not raw.get("identifier"):
                logger.warning(f"Skipping preset entry without identifier in {self.path.name}")
                continue
            fields = {key: value for key, value in raw.items() if value is not None}
            order_entry = self._order_entry(raw["identifier"])
            if order_entry is not None:
                fields["enabled"] = bool(order_entry.get("enabled", False))
            try:
                prompts.append(Prompt(**fields))
            except ValidationError as e:
                raise PresetFormatError(f"Invalid prompt {raw['identifier']!r} in {self.path}: {e}") from e
        return prompts

    def _persist(self, identifier: str, enabled: bool) -> None:
        order_entry = self._order_entry(identifier)
        if order_entry is not None:
            order_entry["enabled"] = enabled
        elif self._order is not None:
            self._order.append({"identifier": identifier, "enabled": enabled})
        else:
            for raw in self._data["prompts"]:
                if isinstance(raw, dict) and raw.get("identifier") == identifier:
                    raw["enabled"] = enabled
        if self.autosave:
            self.save()

    def save(self) -> None:
        """Write the preset back in its original format."""
        if self.path.suffix.lower() in YAML_SUFFIXES:
            text = yaml.safe_dump(self._data, sort_keys=False, allow_unicode=True)
        else:
            text = json.dumps(self._data, indent=4, ensure_ascii=False)
        self.path.write_text(text, encoding="utf-8")
