"""
Prompt Directives - Validation issues.

An Issue is one finding produced while checking whether a prompt may be
enabled. Issues live only for the duration of a validation call and the
decision that follows it (auto-resolution or a user prompt).
"""

from dataclasses import dataclass, field, replace
from enum import Enum

from prompt_directives.models import Prompt


class IssueType(str, Enum):
    EXCLUSIVE = "exclusive"
    MISSING_DEPENDENCY = "missing-dependency"
    CATEGORY_LIMIT = "category-limit"
    MUTUAL_EXCLUSIVE_GROUP = "mutual-exclusive-group"
    SOFT_CONFLICT = "soft-conflict"
    DEPRECATED = "deprecated"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


# Issue types resolved by disabling the prompts they name
CONFLICT_TYPES = frozenset({
    IssueType.EXCLUSIVE,
    IssueType.CATEGORY_LIMIT,
    IssueType.MUTUAL_EXCLUSIVE_GROUP,
})

# Issue types that can describe one conflict from both directions
MERGEABLE_TYPES = frozenset({IssueType.EXCLUSIVE, IssueType.SOFT_CONFLICT})


@dataclass
class Issue:
    """A single validation finding."""

    type: IssueType
    severity: Severity
    message: str
    current_prompt: Prompt
    directive: str
    conflicting_prompt: Prompt | None = None
    conflicting_prompts: list[Prompt] = field(default_factory=list)
    required_prompt: Prompt | None = None
    required_id: str | None = None
    can_auto_enable: bool | None = None
    category: str | None = None  # category or group name for limit issues

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def conflicting(self) -> list[Prompt]:
        """Every prompt this issue conflicts with, singular first, no repeats."""
        seen: set[str] = set()
        prompts = []
        candidates = ([self.conflicting_prompt] if self.conflicting_prompt else []) + self.conflicting_prompts
        for prompt in candidates:
            if prompt.identifier not in seen:
                seen.add(prompt.identifier)
                prompts.append(prompt)
        return prompts

    @property
    def conflicting_ids(self) -> list[str]:
        return [prompt.identifier for prompt in self.conflicting]

    def to_dict(self) -> dict:
        """Serialize for audit logs and the CLI."""
        data = {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "prompt": self.current_prompt.identifier,
            "directive": self.directive,
        }
        if self.conflicting:
            data["conflicting"] = self.conflicting_ids
        if self.required_id is not None:
            data["required"] = self.required_id
        if self.can_auto_enable is not None:
            data["can_auto_enable"] = self.can_auto_enable
        if self.category is not None:
            data["category"] = self.category
        return data


def has_errors(issues: list[Issue]) -> bool:
    return any(issue.is_error for issue in issues)


def _describes_same_conflict(kept: Issue, issue: Issue) -> bool:
    if kept.type is not issue.type:
        return False
    if kept.message == issue.message:
        return True
    return bool(set(kept.conflicting_ids) & set(issue.conflicting_ids))


def _merge(kept: Issue, issue: Issue) -> Issue:
    prompts = kept.conflicting
    known = {prompt.identifier for prompt in prompts}
    prompts += [prompt for prompt in issue.conflicting if prompt.identifier not in known]
    if len(prompts) == 1:
        return replace(kept, conflicting_prompt=prompts[0], conflicting_prompts=[])
    return replace(kept, conflicting_prompt=None, conflicting_prompts=prompts)


def dedupe_issues(issues: list[Issue]) -> list[Issue]:
    """
    Collapse exclusive/soft-conflict issues that describe the same conflict.

    Two issues merge when their rendered messages match or when they name a
    common conflicting prompt (A excludes B and B excludes A). The first
    issue's message is kept; conflicting prompts from both are folded into
    conflicting_prompts. Other issue types pass through untouched, and the
    relative order of the surviving issues is preserved.
    """
    result: list[Issue] = []
    for issue in issues:
        if issue.type in MERGEABLE_TYPES:
            for index, kept in enumerate(result):
                if _describes_same_conflict(kept, issue):
                    result[index] = _merge(kept, issue)
                    break
            else:
                result.append(issue)
        else:
            result.append(issue)
    return result
