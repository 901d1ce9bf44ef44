"""
Prompt Directives - Audit Log.

Append-only record of what the engine decided and why.

Features:
- One JSONL file per session (easy to parse, tail -f friendly)
- Validation results, auto-resolution plans, toggles, trigger firings
- Smart truncation of long messages and large prompt lists

Usage:
    from prompt_directives.observability.audit_log import AuditLogger

    audit = AuditLogger(log_dir=Path("directive_logs"))
    audit.validation("pacing-fast", issues)
    audit.close()

Log format (JSONL):
    {"ts": "2026-01-01T17:30:00", "event": "validate", "prompt": "pacing-fast", ...}
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any


# =============================================================================
# Configuration
# =============================================================================

# Max string length before truncation
MAX_STRING_LEN = 200

# Max list items to show
MAX_LIST_ITEMS = 10

# Max dict keys to show
MAX_DICT_KEYS = 20


# =============================================================================
# Smart Truncation
# =============================================================================


def _truncate_value(value: Any, depth: int = 0) -> Any:
    """
    Smart truncation of values for logging.

    - Strings > MAX_STRING_LEN get truncated with "..."
    - Lists > MAX_LIST_ITEMS show first N + count
    - Dicts > MAX_DICT_KEYS show first N keys + count
    - Objects with to_dict()/model_dump() are serialized first
    """
    if depth > 3:
        return "<nested>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > MAX_STRING_LEN:
            return value[:MAX_STRING_LEN] + f"... ({len(value)} chars)"
        return value

    if isinstance(value, (list, tuple)):
        items = [_truncate_value(v, depth + 1) for v in value[:MAX_LIST_ITEMS]]
        if len(value) > MAX_LIST_ITEMS:
            items.append(f"... +{len(value) - MAX_LIST_ITEMS} more")
        return items

    if isinstance(value, dict):
        result = {}
        for key in list(value.keys())[:MAX_DICT_KEYS]:
            result[key] = _truncate_value(value[key], depth + 1)
        if len(value) > MAX_DICT_KEYS:
            result["_truncated"] = f"+{len(value) - MAX_DICT_KEYS} keys"
        return result

    if hasattr(value, "to_dict"):
        return _truncate_value(value.to_dict(), depth)
    if hasattr(value, "model_dump"):
        return _truncate_value(value.model_dump(mode="json"), depth)

    return str(value)[:MAX_STRING_LEN]


# =============================================================================
# Audit Logger
# =============================================================================


class AuditLogger:
    """
    Per-session logger that writes engine decisions as JSONL.

    A disabled logger accepts every call and writes nothing.
    """

    def __init__(self, log_dir: Path | None = None, session_id: str | None = None, enabled: bool = True):
        self.enabled = enabled
        self.log_file = None
        self.log_path: Path | None = None

        if not enabled:
            return

        log_dir = Path(log_dir) if log_dir is not None else Path("directive_logs")
        log_dir.mkdir(parents=True, exist_ok=True)

        if session_id is None:
            session_id = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.session_id = session_id
        self.log_path = log_dir / f"directives_{session_id}.jsonl"
        self.log_file = open(self.log_path, "a", encoding="utf-8")
        self._write({"event": "session_start", "session_id": session_id})

    @classmethod
    def from_settings(cls, settings=None) -> "AuditLogger":
        if settings is None:
            from prompt_directives.config import get_settings
            settings = get_settings()
        return cls(log_dir=settings.audit_log_dir, enabled=settings.audit_log_enabled)

    def _write(self, data: dict) -> None:
        if not self.enabled or self.log_file is None:
            return
        entry = {"ts": datetime.now().isoformat(), **data}
        self.log_file.write(json.dumps(entry, default=str) + "\n")
        self.log_file.flush()

    # =========================================================================
    # Engine Events
    # =========================================================================

    def validation(self, prompt_id: str, issues: list) -> None:
        self._write({
            "event": "validate",
            "prompt": prompt_id,
            "issue_count": len(issues),
            "issues": _truncate_value(issues),
        })

    def auto_resolution(self, prompt_id: str, plan) -> None:
        self._write({"event": "auto_resolve", "prompt": prompt_id, **_truncate_value(plan)})

    def toggle(self, prompt_id: str, enabled: bool, source: str) -> None:
        self._write({"event": "toggle", "prompt": prompt_id, "enabled": enabled, "source": source})

    def triggers(self, result) -> None:
        if result.is_empty:
            return
        self._write({"event": "trigger", **_truncate_value(result)})

    def log(self, event_type: str, **kwargs) -> None:
        """Log custom event."""
        self._write({"event": event_type, **_truncate_value(kwargs)})

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> str | None:
        """Close the log file. Returns log path."""
        if self.log_file:
            self._write({"event": "session_end"})
            self.log_file.close()
            self.log_file = None
            return str(self.log_path)
        return None
