"""
Prompt Directives - Message-count triggers.

Prompts can switch themselves on or off as a conversation grows:

- @enable-at-message N / @disable-at-message N
    One-shot. Fire once the count reaches N while the prompt is in the
    opposite state, then stay quiet until re-armed. The caller passes the
    rules that already fired in `fired`; without that history the state
    guard alone keeps a single rule from repeating, but an enable-at +
    disable-at pair would keep flipping.
- @enable-after-message N / @disable-after-message N
    Persistent. Re-assert their state on every evaluation once the count
    reaches N, overriding a manual toggle made since. When a prompt
    declares both and both have passed, the later threshold holds (disable
    on a tie), so `enable-after 5` + `disable-after 20` stays off from 20.
- @message-range start-end (or start-)
    Continuous. Inside the window the prompt is enabled, outside it is
    disabled, re-checked on every call.

Evaluation is stateless and only reports transitions; the host applies them.
"""

import logging
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from enum import Enum

from prompt_directives.core.parser import parse
from prompt_directives.models import DirectiveSet, Prompt

logger = logging.getLogger(__name__)


class TriggerRule(str, Enum):
    ENABLE_AT = "enable-at-message"
    DISABLE_AT = "disable-at-message"
    MESSAGE_RANGE = "message-range"
    ENABLE_AFTER = "enable-after-message"
    DISABLE_AFTER = "disable-after-message"


ONE_SHOT_RULES = frozenset({TriggerRule.ENABLE_AT, TriggerRule.DISABLE_AT})

# (prompt identifier, rule) pairs that already fired
FiredKey = tuple[str, TriggerRule]


@dataclass
class TriggerEvent:
    """Audit record for one rule firing."""

    id: str
    name: str
    action: str  # "enable" | "disable"
    reason: str
    rule: TriggerRule
    threshold: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "action": self.action,
            "reason": self.reason,
            "rule": self.rule.value,
        }


@dataclass
class TriggerResult:
    """Transitions due at a message count."""

    message_count: int
    to_enable: list[str] = field(default_factory=list)
    to_disable: list[str] = field(default_factory=list)
    triggered: list[TriggerEvent] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_enable and not self.to_disable

    def add(self, prompt: Prompt, enable: bool, rule: TriggerRule, reason: str, threshold: int | None) -> None:
        target = self.to_enable if enable else self.to_disable
        if prompt.identifier not in target:
            target.append(prompt.identifier)
        self.triggered.append(TriggerEvent(
            id=prompt.identifier,
            name=prompt.display_name,
            action="enable" if enable else "disable",
            reason=reason,
            rule=rule,
            threshold=threshold,
        ))

    def to_dict(self) -> dict:
        return {
            "message_count": self.message_count,
            "to_enable": list(self.to_enable),
            "to_disable": list(self.to_disable),
            "triggered": [event.to_dict() for event in self.triggered],
        }


def _evaluate_prompt(
    result: TriggerResult,
    prompt: Prompt,
    directives: DirectiveSet,
    fired: Collection[FiredKey],
) -> None:
    count = result.message_count
    enabled = prompt.enabled

    threshold = directives.enable_at_message
    if (
        threshold is not None and not enabled and count >= threshold
        and (prompt.identifier, TriggerRule.ENABLE_AT) not in fired
    ):
        result.add(prompt, True, TriggerRule.ENABLE_AT,
                   f"Message count {count} reached {threshold}", threshold)

    threshold = directives.disable_at_message
    if (
        threshold is not None and enabled and count >= threshold
        and (prompt.identifier, TriggerRule.DISABLE_AT) not in fired
    ):
        result.add(prompt, False, TriggerRule.DISABLE_AT,
                   f"Message count {count} reached {threshold}", threshold)

    window = directives.message_range
    if window is not None:
        inside = window.contains(count)
        if inside and not enabled:
            result.add(prompt, True, TriggerRule.MESSAGE_RANGE,
                       f"Message count {count} entered range {window}", window.start)
        elif not inside and enabled:
            result.add(prompt, False, TriggerRule.MESSAGE_RANGE,
                       f"Message count {count} is outside range {window}", window.start)

    enable_after = directives.enable_after_message
    if enable_after is not None and count < enable_after:
        enable_after = None
    disable_after = directives.disable_after_message
    if disable_after is not None and count < disable_after:
        disable_after = None
    # once both have passed only the later threshold holds; disable wins a tie
    if enable_after is not None and disable_after is not None:
        if enable_after > disable_after:
            disable_after = None
        else:
            enable_after = None

    if enable_after is not None and not enabled:
        result.add(prompt, True, TriggerRule.ENABLE_AFTER,
                   f"Message count {count} is past {enable_after}", enable_after)
    if disable_after is not None and enabled:
        result.add(prompt, False, TriggerRule.DISABLE_AFTER,
                   f"Message count {count} is past {disable_after}", disable_after)


def evaluate_triggers(
    message_count: int,
    prompts: list[Prompt],
    directives_for: Callable[[str], DirectiveSet] = parse,
    fired: Collection[FiredKey] = (),
) -> TriggerResult:
    """
    Compute the prompts that must flip state at a message count.

    Args:
        message_count: Current conversation length
        prompts: Every prompt with its live enabled state
        directives_for: Content → DirectiveSet lookup
        fired: One-shot rules that already fired and must stay quiet

    Returns:
        TriggerResult with to_enable / to_disable identifiers and an audit
        entry per rule that fired
    """
    result = TriggerResult(message_count=message_count)
    for prompt in prompts:
        if not prompt.content:
            continue
        directives = directives_for(prompt.content)
        if directives.has_triggers:
            _evaluate_prompt(result, prompt, directives, fired)

    for event in result.triggered:
        logger.debug(f"Trigger {event.rule.value} → {event.action} {event.id}: {event.reason}")
    return result
