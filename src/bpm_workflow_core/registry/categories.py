"""Toolbox category registry."""
from __future__ import annotations

from dataclasses import dataclass, field

from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.registry.base import Registry, RegistryItem
from bpm_workflow_core.text import MultilingualText

# Categories without an explicit order sort after every ordered one.
UNORDERED_CATEGORY = 999


@dataclass
class CategorySeparator:
    show: bool = False
    color: str | None = None
    style: str = "line"


@dataclass
class CategoryConfig:
    """Toolbox category shown in the node palette."""

    id: str
    name: MultilingualText
    category_type: str
    is_open: bool = True
    icon: str | None = None
    description: MultilingualText | None = None
    order: int | None = None
    separator: CategorySeparator | None = None
    extra: dict[str, object] = field(default_factory=dict)


class CategoryRegistry(Registry[CategoryConfig]):
    """Registry of :class:`CategoryConfig` objects."""

    def __init__(self, event_bus: EventBus) -> None:
        super().__init__("CategoryRegistry", event_bus)

    def get_all_sorted(self) -> list[RegistryItem[CategoryConfig]]:
        """Return all items sorted by ``order`` (stable for ties)."""
        return sorted(
            self.get_all(),
            key=lambda item: item.config.order
            if item.config.order is not None
            else UNORDERED_CATEGORY,
        )

    def get_by_category_type(self, category_type: str) -> RegistryItem[CategoryConfig] | None:
        for item in self.get_all():
            if item.config.category_type == category_type:
                return item
        return None

    def has_category_type(self, category_type: str) -> bool:
        return self.get_by_category_type(category_type) is not None
