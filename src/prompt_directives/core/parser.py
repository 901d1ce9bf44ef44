"""
Prompt Directives - Directive parser.

Turns one prompt's raw content into a DirectiveSet. Pure function: the same
content always yields an equal record, and nothing here raises on bad input.
Unknown or malformed directive lines are skipped.
"""

from typing import Any

from prompt_directives.core.grammar import COMMENT_BLOCK, match_directive
from prompt_directives.models import DirectiveSet


EMPTY_DIRECTIVES = DirectiveSet()


def iter_comment_blocks(content: str):
    """Yield the trimmed inner text of every {{// ... }} block."""
    for match in COMMENT_BLOCK.finditer(content):
        yield match.group(1).strip()


def parse(content: str | None) -> DirectiveSet:
    """
    Parse every directive found in a prompt body.

    Args:
        content: Raw prompt text (may be empty or None)

    Returns:
        DirectiveSet with list directives accumulated in order of appearance
        and scalar directives holding their last value
    """
    if not content:
        return EMPTY_DIRECTIVES

    values: dict[str, Any] = {}
    for line in iter_comment_blocks(content):
        matched = match_directive(line)
        if matched is None:
            continue
        spec, raw = matched
        value = spec.read(raw)
        if value is None:
            continue
        if spec.is_list:
            values.setdefault(spec.field, []).extend(value)
        else:
            values[spec.field] = value

    if not values:
        return EMPTY_DIRECTIVES
    return DirectiveSet(**{
        name: tuple(value) if isinstance(value, list) else value
        for name, value in values.items()
    })
