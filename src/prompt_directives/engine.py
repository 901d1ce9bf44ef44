"""
Prompt Directives - Engine facade.

DirectiveEngine ties the core to a host:
- reads the prompt set through a PromptSetAccessor
- writes toggles through a ToggleSink
- parses through one shared DirectiveCache

Host failures never escape a public entry point. If the accessor cannot
produce the prompt set, queries return empty results so the host can
render a "nothing to do" state. The enable flow lets the toggle through
when validation itself breaks.

Toggle flow (request_enable):
1. No issues → enable
2. Warnings only → ask the ResolutionPrompt (proceed when there is none)
3. Errors the prompt can fix itself → auto-resolve, then enable
4. Other errors → ask the ResolutionPrompt (blocked when there is none)
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass, field

from prompt_directives.core import catalog
from prompt_directives.core.cache import DirectiveCache
from prompt_directives.core.issues import Issue, has_errors
from prompt_directives.core.parser import EMPTY_DIRECTIVES, parse
from prompt_directives.core.resolution import ResolutionPlan, apply_auto_resolution, can_auto_resolve
from prompt_directives.core.triggers import ONE_SHOT_RULES, FiredKey, TriggerResult, evaluate_triggers
from prompt_directives.core.validation import index_prompts, validate
from prompt_directives.host.base import MessageCounter, PromptSetAccessor, ResolutionPrompt, ToggleSink
from prompt_directives.models import DirectiveSet, Prompt
from prompt_directives.observability.audit_log import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ToggleOutcome:
    """What happened to a toggle request."""

    prompt_id: str
    enabled: bool
    issues: list[Issue] = field(default_factory=list)
    auto_resolution: ResolutionPlan | None = None
    asked_user: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt_id,
            "enabled": self.enabled,
            "issues": [issue.to_dict() for issue in self.issues],
            "auto_resolution": self.auto_resolution.to_dict() if self.auto_resolution else None,
            "asked_user": self.asked_user,
            "error": self.error,
        }


class DirectiveEngine:
    """
    Public entry point to the directive system for one prompt set.
    """

    def __init__(
        self,
        accessor: PromptSetAccessor | None,
        sink: ToggleSink | None = None,
        cache: DirectiveCache | None = None,
        audit: AuditLogger | None = None,
    ):
        self.accessor = accessor
        if sink is None and isinstance(accessor, ToggleSink):
            sink = accessor
        self.sink = sink
        self.cache = cache if cache is not None else DirectiveCache()
        self.audit = audit if audit is not None else AuditLogger(enabled=False)

    @classmethod
    def from_settings(
        cls,
        accessor: PromptSetAccessor | None,
        sink: ToggleSink | None = None,
        settings=None,
    ) -> "DirectiveEngine":
        """Build an engine with cache and audit log configured from settings."""
        if settings is None:
            from prompt_directives.config import get_settings
            settings = get_settings()
        return cls(
            accessor,
            sink=sink,
            cache=DirectiveCache.from_settings(settings),
            audit=AuditLogger.from_settings(settings),
        )

    def close(self) -> str | None:
        """Close the audit log; returns its path when one was written."""
        return self.audit.close()

    def __enter__(self) -> "DirectiveEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # =========================================================================
    # Directives
    # =========================================================================

    @staticmethod
    def parse(content: str | None) -> DirectiveSet:
        """Uncached parse."""
        return parse(content)

    def get_directives(self, content: str | None) -> DirectiveSet:
        """Cached parse."""
        return self.cache.get(content)

    def clear_cache(self) -> None:
        """Forget every parsed prompt (call on preset switch)."""
        self.cache.clear()

    def directives_of(self, prompt_id: str, prompts: list[Prompt] | None = None) -> DirectiveSet:
        """Directives of a prompt by identifier; empty when unknown."""
        if prompts is None:
            prompts = self.list_prompts()
        prompt = index_prompts(prompts).get(prompt_id)
        if prompt is None:
            return EMPTY_DIRECTIVES
        return self.get_directives(prompt.content)

    # =========================================================================
    # Host access
    # =========================================================================

    def list_prompts(self) -> list[Prompt]:
        """Live prompt set, or [] when the host cannot provide it."""
        if self.accessor is None:
            logger.warning("Prompt set accessor not available")
            return []
        try:
            return list(self.accessor.list_prompts())
        except Exception as e:
            logger.error(f"Error getting prompts with state: {e}")
            return []

    def commit_toggle(self, prompt_id: str, enabled: bool, source: str = "user") -> bool:
        """Apply one toggle through the sink. Returns False when it could not be applied."""
        if self.sink is None:
            logger.warning(f"No toggle sink; cannot set {prompt_id} to {enabled}")
            return False
        try:
            self.sink.set_enabled(prompt_id, enabled)
        except Exception as e:
            logger.error(f"Error performing toggle for {prompt_id}: {e}")
            return False
        self.audit.toggle(prompt_id, enabled, source)
        return True

    # =========================================================================
    # Validation & auto-resolution
    # =========================================================================

    def validate(self, prompt_id: str, prompts: list[Prompt] | None = None) -> list[Issue]:
        """Issues raised by enabling prompt_id against the current prompt set."""
        if prompts is None:
            prompts = self.list_prompts()
        issues = validate(prompt_id, prompts, self.get_directives)
        self.audit.validation(prompt_id, issues)
        return issues

    def can_auto_resolve(self, issues: list[Issue], prompt_id: str, prompts: list[Prompt] | None = None) -> bool:
        return can_auto_resolve(issues, self.directives_of(prompt_id, prompts))

    def apply_auto_resolution(
        self,
        issues: list[Issue],
        prompt_id: str,
        toggle_sink: ToggleSink | None = None,
        prompts: list[Prompt] | None = None,
    ) -> ResolutionPlan:
        """
        Clear the error issues using the prompt's own @auto-disable and
        @auto-enable-dependencies directives.

        Raises:
            AutoResolutionError: If the issues are not auto-resolvable
            RuntimeError: If no toggle sink is available
        """
        sink = toggle_sink or self.sink
        if sink is None:
            raise RuntimeError("apply_auto_resolution needs a toggle sink")
        plan = apply_auto_resolution(issues, self.directives_of(prompt_id, prompts), sink)
        self.audit.auto_resolution(prompt_id, plan)
        return plan

    # =========================================================================
    # Toggle flow
    # =========================================================================

    def request_enable(self, prompt_id: str, resolution_prompt: ResolutionPrompt | None = None) -> ToggleOutcome:
        """Validate and enable a prompt, resolving or asking about issues."""
        outcome = ToggleOutcome(prompt_id=prompt_id, enabled=False)
        try:
            prompts = self.list_prompts()
            outcome.issues = self.validate(prompt_id, prompts)

            if outcome.issues and not has_errors(outcome.issues):
                proceed = True
                if resolution_prompt is not None:
                    outcome.asked_user = True
                    proceed = resolution_prompt.confirm(prompt_id, outcome.issues)
                if not proceed:
                    return outcome
            elif outcome.issues:
                if self.sink is not None and self.can_auto_resolve(outcome.issues, prompt_id, prompts):
                    outcome.auto_resolution = self.apply_auto_resolution(outcome.issues, prompt_id, prompts=prompts)
                elif resolution_prompt is None:
                    logger.info(f"Enable of {prompt_id} blocked by {len(outcome.issues)} issue(s)")
                    return outcome
                else:
                    outcome.asked_user = True
                    if not resolution_prompt.confirm(prompt_id, outcome.issues):
                        return outcome
        except Exception as e:
            # Never leave the user stuck on a broken validation
            logger.error(f"Error validating prompt activation for {prompt_id}: {e}")
            outcome.error = str(e)

        outcome.enabled = self.commit_toggle(prompt_id, True)
        return outcome

    def request_disable(self, prompt_id: str) -> ToggleOutcome:
        """Disabling never raises issues."""
        return ToggleOutcome(prompt_id=prompt_id, enabled=not self.commit_toggle(prompt_id, False))

    # =========================================================================
    # Triggers
    # =========================================================================

    def evaluate_triggers(
        self,
        message_count: int,
        prompts: list[Prompt] | None = None,
        fired: Collection[FiredKey] = (),
    ) -> TriggerResult:
        """Transitions due at message_count. Nothing is applied."""
        if prompts is None:
            prompts = self.list_prompts()
        result = evaluate_triggers(message_count, prompts, self.get_directives, fired)
        self.audit.triggers(result)
        return result

    def trigger_driver(self, counter: MessageCounter | None = None) -> "TriggerDriver":
        return TriggerDriver(self, counter)

    # =========================================================================
    # Catalog
    # =========================================================================

    def apply_default_enabled(self) -> list[str]:
        """Enable every disabled @default-enabled prompt. Returns the ids enabled."""
        applied = []
        for prompt_id in catalog.default_enabled_targets(self.list_prompts(), self.get_directives):
            if self.commit_toggle(prompt_id, True, source="default"):
                applied.append(prompt_id)
        if applied:
            logger.info(f"Applied default-enabled to {len(applied)} prompts")
        return applied

    def profiles(self) -> list[str]:
        return catalog.profiles(self.list_prompts(), self.get_directives)

    def activate_profile(self, profile: str) -> catalog.ProfileChanges:
        """Switch every profile-aware prompt to match a profile."""
        changes = catalog.profile_changes(profile, self.list_prompts(), self.get_directives)
        for prompt_id in changes.to_enable:
            self.commit_toggle(prompt_id, True, source=f"profile:{profile}")
        for prompt_id in changes.to_disable:
            self.commit_toggle(prompt_id, False, source=f"profile:{profile}")
        if not changes.is_empty:
            logger.info(
                f'Activated profile "{profile}": enabled {len(changes.to_enable)}, '
                f"disabled {len(changes.to_disable)}, skipped {changes.skipped} (no profile)"
            )
        return changes

    def visible_prompts(self, api: str | None = None) -> list[Prompt]:
        prompts = self.list_prompts()
        return [p for p in prompts if catalog.is_visible(p, prompts, api, self.get_directives)]

    def token_cost_summary(self) -> catalog.TokenCostSummary:
        return catalog.token_cost_summary(self.list_prompts(), self.get_directives)

    def tag_counts(self, limit: int = catalog.DEFAULT_TAG_LIMIT) -> list[tuple[str, int]]:
        return catalog.tag_counts(self.list_prompts(), limit, self.get_directives)

    def group_index(self) -> dict[str, catalog.PromptGroup]:
        return catalog.group_index(self.list_prompts(), self.get_directives)

    def search(self, term: str) -> list[Prompt]:
        return catalog.search(term, self.list_prompts(), self.get_directives)


class TriggerDriver:
    """
    Applies message triggers as the conversation moves.

    Holds the state the evaluator does not: the last message count it
    processed (an unchanged count is skipped) and the one-shot rules that
    already fired. When the count goes backwards (messages deleted, new
    chat) one-shot rules above the new count are re-armed.
    """

    def __init__(self, engine: DirectiveEngine, counter: MessageCounter | None = None):
        self.engine = engine
        self.counter = counter
        self.last_count: int | None = None
        # fired one-shot rule → threshold it fired at
        self.fired: dict[FiredKey, int | None] = {}

    def on_message_event(self) -> TriggerResult | None:
        """Host hook for message sent/received/deleted events."""
        if self.counter is None:
            logger.warning("Trigger driver has no message counter")
            return None
        try:
            message_count = self.counter.current_message_count()
        except Exception as e:
            logger.error(f"Error reading message count: {e}")
            return None
        return self.process(message_count)

    def process(self, message_count: int) -> TriggerResult | None:
        """Evaluate and apply triggers; None when the count is unchanged."""
        if message_count == self.last_count:
            logger.debug(f"Message count {message_count} unchanged, skipping triggers")
            return None
        if self.last_count is not None and message_count < self.last_count:
            self._rearm(message_count)

        result = self.engine.evaluate_triggers(message_count, fired=self.fired.keys())
        committed: set[tuple[str, str]] = set()
        for prompt_id in result.to_enable:
            if self.engine.commit_toggle(prompt_id, True, source="trigger"):
                committed.add((prompt_id, "enable"))
        for prompt_id in result.to_disable:
            if self.engine.commit_toggle(prompt_id, False, source="trigger"):
                committed.add((prompt_id, "disable"))
        for event in result.triggered:
            # a failed toggle leaves the rule armed for the next count
            if event.rule in ONE_SHOT_RULES and (event.id, event.action) in committed:
                self.fired[(event.id, event.rule)] = event.threshold
            logger.info(f"Trigger: {event.action} {event.name} ({event.reason})")

        self.last_count = message_count
        return result

    def _rearm(self, message_count: int) -> None:
        rearmed = [key for key, threshold in self.fired.items() if threshold is None or threshold > message_count]
        for key in rearmed:
            del self.fired[key]
        if rearmed:
            logger.debug(f"Re-armed {len(rearmed)} one-shot trigger(s) at message {message_count}")

    def reset(self) -> None:
        """Forget history (e.g. on chat switch)."""
        self.last_count = None
        self.fired.clear()
