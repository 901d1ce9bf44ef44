"""
Prompt Directives - Activation validation.

Given the prompt about to be enabled and the full prompt set with live
enabled state, derive every issue its directives (and the directives of
other enabled prompts) raise.

Emission order is fixed and is the order callers see:
1. exclusive (declared here, then declared by enabled prompts about this one)
2. missing-dependency
3. category-limit
4. mutual-exclusive-group
5. soft-conflict (declared here, then reverse)
6. deprecated

Errors come out ahead of warnings because of that order. Exclusion and
soft conflicts are symmetric: an author only has to declare them on one
side, and a pair declared on both sides collapses into a single issue.
"""

import logging
from collections.abc import Callable, Iterable

from prompt_directives.core.issues import Issue, IssueType, Severity, dedupe_issues
from prompt_directives.core.parser import parse
from prompt_directives.models import DirectiveSet, Prompt

logger = logging.getLogger(__name__)

DirectiveLookup = Callable[[str], DirectiveSet]


def index_prompts(prompts: Iterable[Prompt]) -> dict[str, Prompt]:
    """Map identifier → prompt. The first prompt with an identifier wins."""
    index: dict[str, Prompt] = {}
    for prompt in prompts:
        index.setdefault(prompt.identifier, prompt)
    return index


def _quoted(prompts: list[Prompt]) -> str:
    return ", ".join(f'"{p.display_name}"' for p in prompts)


class _Validation:
    """State for one validate() call."""

    def __init__(self, prompt: Prompt, prompts: list[Prompt], directives_for: DirectiveLookup):
        self.prompt = prompt
        self.directives_for = directives_for
        self.directives = directives_for(prompt.content)
        self.by_id = index_prompts(prompts)
        # Every other enabled prompt that can carry directives
        self.enabled_others = [
            p for p in prompts
            if p.enabled and p.content and p.identifier != prompt.identifier
        ]

    def _enabled(self, identifier: str) -> Prompt | None:
        if identifier == self.prompt.identifier:
            return None
        other = self.by_id.get(identifier)
        return other if other is not None and other.enabled else None

    def exclusive(self) -> list[Issue]:
        issues = []
        name = self.prompt.display_name
        for exclusive_id in self.directives.exclusive_with:
            other = self._enabled(exclusive_id)
            if other is None:
                continue
            issues.append(Issue(
                type=IssueType.EXCLUSIVE,
                severity=Severity.ERROR,
                message=self.directives.exclusive_with_message
                or f'Cannot enable both "{name}" and "{other.display_name}". These prompts are mutually exclusive.',
                current_prompt=self.prompt,
                conflicting_prompt=other,
                directive="exclusive-with",
            ))

        for other in self.enabled_others:
            other_directives = self.directives_for(other.content)
            if self.prompt.identifier not in other_directives.exclusive_with:
                continue
            issues.append(Issue(
                type=IssueType.EXCLUSIVE,
                severity=Severity.ERROR,
                message=other_directives.exclusive_with_message
                or f'Cannot enable both "{name}" and "{other.display_name}". '
                   f'"{other.display_name}" conflicts with this prompt.',
                current_prompt=self.prompt,
                conflicting_prompt=other,
                directive="exclusive-with",
            ))
        return issues

    def missing_dependencies(self) -> list[Issue]:
        issues = []
        for required_id in self.directives.requires:
            required = self.by_id.get(required_id)
            if required is not None and required.enabled:
                continue
            # A dangling reference still reports, using the raw id as its name
            required_name = required.display_name if required is not None else required_id
            issues.append(Issue(
                type=IssueType.MISSING_DEPENDENCY,
                severity=Severity.ERROR,
                message=self.directives.requires_message
                or f'"{self.prompt.display_name}" requires "{required_name}" to be enabled.',
                current_prompt=self.prompt,
                required_prompt=required,
                required_id=required_id,
                can_auto_enable=self.directives.auto_enable_dependencies,
                directive="requires",
            ))
        return issues

    def category_limit(self) -> list[Issue]:
        category = self.directives.max_one_per_category
        if not category:
            return []
        active = [
            p for p in self.enabled_others
            if category in self.directives_for(p.content).categories
        ]
        if not active:
            return []
        return [Issue(
            type=IssueType.CATEGORY_LIMIT,
            severity=Severity.ERROR,
            message=f'Only one prompt from category "{category}" can be active. Already active: {_quoted(active)}',
            current_prompt=self.prompt,
            conflicting_prompts=active,
            category=category,
            directive="max-one-per-category",
        )]

    def mutual_exclusive_group(self) -> list[Issue]:
        group = self.directives.mutual_exclusive_group
        if not group:
            return []
        active = [
            p for p in self.enabled_others
            if self.directives_for(p.content).mutual_exclusive_group == group
        ]
        if not active:
            return []
        return [Issue(
            type=IssueType.MUTUAL_EXCLUSIVE_GROUP,
            severity=Severity.ERROR,
            message=f'Only one prompt from group "{group}" can be active. Already active: {_quoted(active)}',
            current_prompt=self.prompt,
            conflicting_prompts=active,
            category=group,
            directive="mutual-exclusive-group",
        )]

    def soft_conflicts(self) -> list[Issue]:
        issues = []
        name = self.prompt.display_name
        for conflict_id in self.directives.conflicts_with:
            other = self._enabled(conflict_id)
            if other is None:
                continue
            issues.append(Issue(
                type=IssueType.SOFT_CONFLICT,
                severity=Severity.WARNING,
                message=self.directives.conflicts_message
                or f'"{name}" may conflict with "{other.display_name}". Consider disabling one.',
                current_prompt=self.prompt,
                conflicting_prompt=other,
                directive="conflicts-with",
            ))

        for other in self.enabled_others:
            other_directives = self.directives_for(other.content)
            if self.prompt.identifier not in other_directives.conflicts_with:
                continue
            issues.append(Issue(
                type=IssueType.SOFT_CONFLICT,
                severity=Severity.WARNING,
                message=other_directives.conflicts_message
                or f'"{name}" may conflict with "{other.display_name}". '
                   f'"{other.display_name}" suggests disabling one.',
                current_prompt=self.prompt,
                conflicting_prompt=other,
                directive="conflicts-with",
            ))
        return issues

    def deprecated(self) -> list[Issue]:
        if not self.directives.is_deprecated:
            return []
        return [Issue(
            type=IssueType.DEPRECATED,
            severity=Severity.WARNING,
            message=f'"{self.prompt.display_name}" is deprecated. {self.directives.deprecated}'.rstrip(),
            current_prompt=self.prompt,
            directive="deprecated",
        )]


def validate(
    prompt_id: str,
    prompts: list[Prompt],
    directives_for: DirectiveLookup = parse,
) -> list[Issue]:
    """
    Validate enabling a prompt against the current prompt set.

    Args:
        prompt_id: Identifier of the prompt being enabled
        prompts: Every prompt with its live enabled state
        directives_for: Content → DirectiveSet lookup (a DirectiveCache.get
            in production, plain parse by default)

    Returns:
        Ordered, deduplicated issues. Empty when the prompt is unknown or
        has no content.
    """
    prompt = index_prompts(prompts).get(prompt_id)
    if prompt is None or not prompt.content:
        return []

    check = _Validation(prompt, prompts, directives_for)
    issues = [
        *check.exclusive(),
        *check.missing_dependencies(),
        *check.category_limit(),
        *check.mutual_exclusive_group(),
        *check.soft_conflicts(),
        *check.deprecated(),
    ]
    issues = dedupe_issues(issues)

    if issues:
        logger.debug(
            f"Validation of {prompt_id}: {len(issues)} issue(s) "
            f"[{', '.join(issue.type.value for issue in issues)}]"
        )
    return issues
