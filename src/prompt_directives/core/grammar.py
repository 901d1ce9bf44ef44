"""
Prompt Directives - Directive grammar.

Every directive lives in its own comment block inside a prompt body:

    {{// @keyword value1, value2 }}
    {{// @flag }}

The keyword table below maps each keyword to the DirectiveSet field it
writes and the strategy used to read its value:

- TEXT:  trimmed string, last write wins
- LIST:  comma-separated, appended to the field
- INT:   leading base-10 integer, last write wins
- FLAG:  bare keyword, sets the field to True
- RANGE: "start-end" or "start-" (open-ended)

A value that cannot be read leaves the field untouched.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from prompt_directives.models import MessageRange


COMMENT_BLOCK = re.compile(r"\{\{//(.*?)\}\}")
DIRECTIVE_LINE = re.compile(r"^@([A-Za-z][A-Za-z0-9-]*)(?:\s+(.*))?$", re.DOTALL)

_LEADING_INT = re.compile(r"^[+-]?\d+")
_RANGE = re.compile(r"^(\d+)\s*-\s*(\d*)$")


class ValueKind(Enum):
    TEXT = "text"
    LIST = "list"
    INT = "int"
    FLAG = "flag"
    RANGE = "range"


@dataclass(frozen=True)
class DirectiveSpec:
    """One row of the keyword table."""

    keyword: str
    field: str
    kind: ValueKind
    lowercase: bool = False
    allow_empty: bool = False  # TEXT only: bare keyword stores ""
    category: str = "metadata"

    @property
    def is_list(self) -> bool:
        return self.kind is ValueKind.LIST

    def read(self, raw: str) -> Any:
        """Convert the raw value text, or return None when it is unusable."""
        value = raw.strip()
        if self.kind is ValueKind.FLAG:
            return True
        if self.kind is ValueKind.TEXT:
            if not value and not self.allow_empty:
                return None
            return value.lower() if self.lowercase else value
        if self.kind is ValueKind.LIST:
            items = [item.strip() for item in value.split(",")]
            items = [item.lower() if self.lowercase else item for item in items if item]
            return items or None
        if self.kind is ValueKind.INT:
            return parse_int(value)
        if self.kind is ValueKind.RANGE:
            return parse_range(value)
        return None


def parse_int(value: str) -> int | None:
    """Read a leading base-10 integer ("10", "10 messages"); None otherwise."""
    match = _LEADING_INT.match(value.strip())
    if not match:
        return None
    return int(match.group(0))


def parse_range(value: str) -> MessageRange | None:
    """Read "start-end" or "start-". A reversed range is unusable."""
    match = _RANGE.match(value.strip())
    if not match:
        return None
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else None
    if end is not None and end < start:
        return None
    return MessageRange(start=start, end=end)


T, L, I, F, R = ValueKind.TEXT, ValueKind.LIST, ValueKind.INT, ValueKind.FLAG, ValueKind.RANGE

DIRECTIVES: tuple[DirectiveSpec, ...] = (
    # Documentation & help
    DirectiveSpec("tooltip", "tooltip", T, category="documentation"),
    DirectiveSpec("help", "help", T, category="documentation"),
    DirectiveSpec("documentation-url", "documentation_url", T, category="documentation"),
    DirectiveSpec("example", "example", T, category="documentation"),
    DirectiveSpec("changelog", "changelog", T, category="documentation"),
    DirectiveSpec("author", "author", T, category="documentation"),
    DirectiveSpec("version", "version", T, category="documentation"),
    # Conflicts & dependencies
    DirectiveSpec("exclusive-with", "exclusive_with", L, category="conflicts"),
    DirectiveSpec("exclusive-with-message", "exclusive_with_message", T, category="conflicts"),
    DirectiveSpec("requires", "requires", L, category="conflicts"),
    DirectiveSpec("requires-message", "requires_message", T, category="conflicts"),
    DirectiveSpec("conflicts-with", "conflicts_with", L, category="conflicts"),
    DirectiveSpec("conflicts-message", "conflicts_message", T, category="conflicts"),
    DirectiveSpec("category", "categories", L, category="conflicts"),
    DirectiveSpec("max-one-per-category", "max_one_per_category", T, category="conflicts"),
    DirectiveSpec("mutual-exclusive-group", "mutual_exclusive_group", T, category="conflicts"),
    DirectiveSpec("deprecated", "deprecated", T, allow_empty=True, category="conflicts"),
    DirectiveSpec("auto-disable", "auto_disable", L, category="conflicts"),
    DirectiveSpec("auto-enable-dependencies", "auto_enable_dependencies", F, category="conflicts"),
    # Organisation
    DirectiveSpec("tags", "tags", L, category="organization"),
    DirectiveSpec("group", "group", T, category="organization"),
    DirectiveSpec("group-description", "group_description", T, category="organization"),
    DirectiveSpec("priority", "priority", I, category="organization"),
    DirectiveSpec("load-order", "load_order", I, category="organization"),
    DirectiveSpec("icon", "icon", T, category="organization"),
    DirectiveSpec("color", "color", T, category="organization"),
    DirectiveSpec("badge", "badge", T, category="organization"),
    DirectiveSpec("highlight", "highlight", F, category="organization"),
    # Visibility & setup
    DirectiveSpec("if-enabled", "if_enabled", L, category="visibility"),
    DirectiveSpec("if-disabled", "if_disabled", L, category="visibility"),
    DirectiveSpec("if-api", "if_api", L, lowercase=True, category="visibility"),
    DirectiveSpec("hidden", "hidden", F, category="visibility"),
    DirectiveSpec("default-enabled", "default_enabled", F, category="visibility"),
    DirectiveSpec("recommended-for-beginners", "recommended_for_beginners", F, category="visibility"),
    DirectiveSpec("advanced", "advanced", F, category="visibility"),
    # Status & compatibility
    DirectiveSpec("warning", "warning", T, category="status"),
    DirectiveSpec("unstable", "unstable", T, category="status"),
    DirectiveSpec("experimental", "experimental", T, category="status"),
    DirectiveSpec("incompatible-api", "incompatible_apis", L, lowercase=True, category="status"),
    DirectiveSpec("recommended-with", "recommended_with", L, category="status"),
    DirectiveSpec("recommended-api", "recommended_api", L, lowercase=True, category="status"),
    DirectiveSpec("tested-with", "tested_with", L, category="status"),
    # Performance & models
    DirectiveSpec("token-cost", "token_cost", I, category="performance"),
    DirectiveSpec("token-cost-warn", "token_cost_warn", I, category="performance"),
    DirectiveSpec("performance-impact", "performance_impact", T, lowercase=True, category="performance"),
    DirectiveSpec("model-optimized", "model_optimized", L, category="performance"),
    DirectiveSpec("model-incompatible", "model_incompatible", L, category="performance"),
    # Profiles & presets
    DirectiveSpec("profile", "profiles", L, category="profiles"),
    DirectiveSpec("preset-name", "preset_name", T, category="profiles"),
    DirectiveSpec("preset-version", "preset_version", T, category="profiles"),
    DirectiveSpec("requires-preset-version", "requires_preset_version", T, category="profiles"),
    # Smart behaviour
    DirectiveSpec("auto-enable-with", "auto_enable_with", L, category="behavior"),
    DirectiveSpec("suggest-enable-with", "suggest_enable_with", L, category="behavior"),
    # Message triggers
    DirectiveSpec("enable-at-message", "enable_at_message", I, category="triggers"),
    DirectiveSpec("disable-at-message", "disable_at_message", I, category="triggers"),
    DirectiveSpec("message-range", "message_range", R, category="triggers"),
    DirectiveSpec("enable-after-message", "enable_after_message", I, category="triggers"),
    DirectiveSpec("disable-after-message", "disable_after_message", I, category="triggers"),
)

del T, L, I, F, R


def build_keyword_table(specs: tuple[DirectiveSpec, ...]) -> dict[str, DirectiveSpec]:
    """
    Index specs by keyword, rejecting ambiguous tables.

    A keyword is matched as a whole token (it ends at whitespace or end of
    line), so "@requires" never swallows "@requires-message". The table is
    still rejected if a keyword repeats or contains whitespace.

    Raises:
        ValueError: If the table is ambiguous.
    """
    table: dict[str, DirectiveSpec] = {}
    fields: dict[str, ValueKind] = {}
    for spec in specs:
        if not spec.keyword or any(ch.isspace() for ch in spec.keyword):
            raise ValueError(f"Directive keyword {spec.keyword!r} must be a single token")
        if spec.keyword in table:
            raise ValueError(f"Duplicate directive keyword: @{spec.keyword}")
        if spec.field in fields and fields[spec.field] is not spec.kind:
            raise ValueError(f"Field {spec.field!r} is written with two value kinds")
        table[spec.keyword] = spec
        fields[spec.field] = spec.kind
    return table


KEYWORDS: dict[str, DirectiveSpec] = build_keyword_table(DIRECTIVES)


def match_directive(line: str) -> tuple[DirectiveSpec, str] | None:
    """Split a trimmed comment into (spec, raw value), or None if unknown."""
    match = DIRECTIVE_LINE.match(line)
    if not match:
        return None
    spec = KEYWORDS.get(match.group(1))
    if spec is None:
        return None
    return spec, match.group(2) or ""
