"""
Prompt Directives - Catalog queries.

Read-only views over a prompt set that the host uses to organise and
present prompts: first-run defaults, profiles, conditional visibility,
token budgets, tags, groups and search. None of these change state; the
engine turns their results into toggles where needed.
"""

from collections import Counter
from dataclasses import dataclass, field

from prompt_directives.core.parser import EMPTY_DIRECTIVES, parse
from prompt_directives.core.validation import DirectiveLookup, index_prompts
from prompt_directives.models import Prompt

DEFAULT_TAG_LIMIT = 20


def _with_directives(prompts: list[Prompt], directives_for: DirectiveLookup):
    for prompt in prompts:
        if prompt.content:
            yield prompt, directives_for(prompt.content)


# =============================================================================
# Defaults & profiles
# =============================================================================


def default_enabled_targets(prompts: list[Prompt], directives_for: DirectiveLookup = parse) -> list[str]:
    """Disabled prompts that declare @default-enabled."""
    return [
        prompt.identifier
        for prompt, directives in _with_directives(prompts, directives_for)
        if directives.default_enabled and not prompt.enabled
    ]


def profiles(prompts: list[Prompt], directives_for: DirectiveLookup = parse) -> list[str]:
    """Every profile name declared, in first-seen order."""
    names: list[str] = []
    for _, directives in _with_directives(prompts, directives_for):
        for name in directives.profiles:
            if name not in names:
                names.append(name)
    return names


@dataclass
class ProfileChanges:
    """Toggles needed to switch to a profile."""

    profile: str
    to_enable: list[str] = field(default_factory=list)
    to_disable: list[str] = field(default_factory=list)
    skipped: int = 0  # prompts that declare no profile at all

    @property
    def is_empty(self) -> bool:
        return not self.to_enable and not self.to_disable


def profile_changes(profile: str, prompts: list[Prompt], directives_for: DirectiveLookup = parse) -> ProfileChanges:
    """
    Toggles that bring the prompt set in line with a profile.

    Only prompts that declare at least one @profile take part. Those listing
    the profile are enabled, the rest disabled. Prompts without any
    @profile are left as they are.
    """
    changes = ProfileChanges(profile=profile)
    for prompt in prompts:
        directives = directives_for(prompt.content) if prompt.content else None
        if directives is None or not directives.profiles:
            changes.skipped += 1
            continue
        wanted = profile in directives.profiles
        if wanted and not prompt.enabled:
            changes.to_enable.append(prompt.identifier)
        elif not wanted and prompt.enabled:
            changes.to_disable.append(prompt.identifier)
    return changes


# =============================================================================
# Visibility
# =============================================================================


def is_visible(
    prompt: Prompt,
    prompts: list[Prompt],
    api: str | None = None,
    directives_for: DirectiveLookup = parse,
) -> bool:
    """
    Whether a prompt should be shown given the rest of the set.

    - @if-enabled: at least one listed prompt is enabled
    - @if-disabled: every listed prompt is disabled or missing
    - @if-api: the current API is listed (skipped when api is None)
    - @hidden: never shown
    """
    if not prompt.content:
        return True
    directives = directives_for(prompt.content)
    if directives.hidden:
        return False

    by_id = index_prompts(prompts)

    def enabled(identifier: str) -> bool:
        other = by_id.get(identifier)
        return other is not None and other.enabled

    if directives.if_enabled and not any(enabled(i) for i in directives.if_enabled):
        return False
    if directives.if_disabled and any(enabled(i) for i in directives.if_disabled):
        return False
    if directives.if_api and api is not None and api.lower() not in directives.if_api:
        return False
    return True


# =============================================================================
# Token budget
# =============================================================================


@dataclass
class TokenCostSummary:
    total: int
    warn_threshold: int | None

    @property
    def exceeded(self) -> bool:
        return self.warn_threshold is not None and self.total > self.warn_threshold

    @property
    def percentage(self) -> float | None:
        if not self.warn_threshold:
            return None
        return min(self.total / self.warn_threshold * 100, 100.0)


def token_cost_summary(prompts: list[Prompt], directives_for: DirectiveLookup = parse) -> TokenCostSummary:
    """Sum @token-cost over enabled prompts; the lowest @token-cost-warn is the threshold."""
    total = 0
    threshold: int | None = None
    for prompt, directives in _with_directives(prompts, directives_for):
        if not prompt.enabled:
            continue
        if directives.token_cost:
            total += directives.token_cost
        if directives.token_cost_warn and (threshold is None or directives.token_cost_warn < threshold):
            threshold = directives.token_cost_warn
    return TokenCostSummary(total=total, warn_threshold=threshold)


# =============================================================================
# Tags, groups, search
# =============================================================================


def tag_counts(
    prompts: list[Prompt],
    limit: int = DEFAULT_TAG_LIMIT,
    directives_for: DirectiveLookup = parse,
) -> list[tuple[str, int]]:
    """Most used tags, most frequent first."""
    counts: Counter[str] = Counter()
    for _, directives in _with_directives(prompts, directives_for):
        counts.update(directives.tags)
    return counts.most_common(limit)


@dataclass
class PromptGroup:
    name: str
    description: str | None = None
    members: list[str] = field(default_factory=list)


def group_index(prompts: list[Prompt], directives_for: DirectiveLookup = parse) -> dict[str, PromptGroup]:
    """Prompts organised by @group, in first-seen order."""
    groups: dict[str, PromptGroup] = {}
    for prompt, directives in _with_directives(prompts, directives_for):
        if not directives.group:
            continue
        group = groups.setdefault(directives.group, PromptGroup(name=directives.group))
        if group.description is None and directives.group_description:
            group.description = directives.group_description
        group.members.append(prompt.identifier)
    return groups


def search(term: str, prompts: list[Prompt], directives_for: DirectiveLookup = parse) -> list[Prompt]:
    """Prompts whose name, tags, tooltip, help or categories contain term."""
    needle = term.lower().strip()
    if not needle:
        return list(prompts)
    matches = []
    for prompt in prompts:
        directives = directives_for(prompt.content) if prompt.content else EMPTY_DIRECTIVES
        haystack = " ".join([
            prompt.name,
            *directives.tags,
            directives.tooltip or "",
            directives.help or "",
            *directives.categories,
        ]).lower()
        if needle in haystack:
            matches.append(prompt)
    return matches
