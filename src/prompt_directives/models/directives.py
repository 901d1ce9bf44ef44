"""
Prompt Directives - Parsed directive record.

A DirectiveSet is the zero-value record overlaid with every directive found
in one prompt's content. Each directive only touches its own field, so a
prompt with no directives yields the all-defaults set.
"""

from pydantic import BaseModel, ConfigDict


class MessageRange(BaseModel):
    """Inclusive message-count window. end=None means open-ended."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int | None = None

    def contains(self, message_count: int) -> bool:
        if message_count < self.start:
            return False
        return self.end is None or message_count <= self.end

    def __str__(self) -> str:
        return f"{self.start}-{'' if self.end is None else self.end}"


class DirectiveSet(BaseModel):
    """
    Metadata declared by one prompt through {{// @keyword value }} blocks.

    List fields accumulate across repeated directives and are stored as
    tuples, since parsed sets are shared through the cache. Scalar fields
    keep the last value written.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    # -------------------------------------------------------------------------
    # Identity & help
    # -------------------------------------------------------------------------
    tooltip: str | None = None
    help: str | None = None
    documentation_url: str | None = None
    author: str | None = None
    version: str | None = None
    example: str | None = None
    changelog: str | None = None

    # -------------------------------------------------------------------------
    # Relationship constraints
    # -------------------------------------------------------------------------
    requires: tuple[str, ...] = ()
    requires_message: str | None = None
    exclusive_with: tuple[str, ...] = ()
    exclusive_with_message: str | None = None
    conflicts_with: tuple[str, ...] = ()
    conflicts_message: str | None = None
    mutual_exclusive_group: str | None = None
    max_one_per_category: str | None = None
    categories: tuple[str, ...] = ()

    # -------------------------------------------------------------------------
    # Auto-behaviour
    # -------------------------------------------------------------------------
    auto_disable: tuple[str, ...] = ()
    auto_enable_dependencies: bool = False
    auto_enable_with: tuple[str, ...] = ()
    suggest_enable_with: tuple[str, ...] = ()

    # -------------------------------------------------------------------------
    # Visibility conditions
    # -------------------------------------------------------------------------
    if_enabled: tuple[str, ...] = ()
    if_disabled: tuple[str, ...] = ()
    if_api: tuple[str, ...] = ()
    hidden: bool = False

    # -------------------------------------------------------------------------
    # Presentation & organisation
    # -------------------------------------------------------------------------
    icon: str | None = None
    color: str | None = None
    badge: str | None = None
    highlight: bool = False
    group: str | None = None
    group_description: str | None = None
    tags: tuple[str, ...] = ()
    priority: int | None = None
    load_order: int | None = None

    # -------------------------------------------------------------------------
    # Status & compatibility
    # -------------------------------------------------------------------------
    warning: str | None = None
    deprecated: str | None = None  # "" when declared without a message
    unstable: str | None = None
    experimental: str | None = None
    incompatible_apis: tuple[str, ...] = ()
    recommended_with: tuple[str, ...] = ()
    recommended_api: tuple[str, ...] = ()
    tested_with: tuple[str, ...] = ()
    model_optimized: tuple[str, ...] = ()
    model_incompatible: tuple[str, ...] = ()

    # -------------------------------------------------------------------------
    # Setup defaults
    # -------------------------------------------------------------------------
    default_enabled: bool = False
    recommended_for_beginners: bool = False
    advanced: bool = False

    # -------------------------------------------------------------------------
    # Performance
    # -------------------------------------------------------------------------
    token_cost: int | None = None
    token_cost_warn: int | None = None
    performance_impact: str | None = None

    # -------------------------------------------------------------------------
    # Profiles & presets
    # -------------------------------------------------------------------------
    profiles: tuple[str, ...] = ()
    preset_name: str | None = None
    preset_version: str | None = None
    requires_preset_version: str | None = None

    # -------------------------------------------------------------------------
    # Message triggers
    # -------------------------------------------------------------------------
    enable_at_message: int | None = None
    disable_at_message: int | None = None
    message_range: MessageRange | None = None
    enable_after_message: int | None = None
    disable_after_message: int | None = None

    @property
    def is_deprecated(self) -> bool:
        return self.deprecated is not None

    @property
    def has_triggers(self) -> bool:
        return any(
            value is not None
            for value in (
                self.enable_at_message,
                self.disable_at_message,
                self.message_range,
                self.enable_after_message,
                self.disable_after_message,
            )
        )

    def declared(self) -> dict:
        """Fields that differ from the zero-value record."""
        return self.model_dump(exclude_defaults=True)
