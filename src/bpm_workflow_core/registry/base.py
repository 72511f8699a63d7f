"""Generic keyed registry of typed items.

:class:`Registry` is the storage primitive every specialized registry is
built on.  Ids are unique within one registry at any instant; registering
an id that already exists logs a warning and overwrites the stored item.
Mutations are announced on the shared :class:`EventBus`.

Example
-------
>>> bus = EventBus()
>>> registry: Registry[dict[str, object]] = Registry("NodeRegistry", bus)
>>> registry.register(RegistryItem(id="task", type="task", name="Task", config={}))
>>> registry.has("task")
True
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

from bpm_workflow_core.events.bus import EventBus, WorkflowEventTypes
from bpm_workflow_core.text import MultilingualText, text_values

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RegistryItem(Generic[T]):
    """The unit of storage in any registry.

    Attributes
    ----------
    id:
        Unique key within the owning registry.
    type:
        Free-form type tag (node type, edge type, ...).
    name:
        Display name; plain string or multilingual map.
    config:
        The typed payload owned by the registry.
    category:
        Optional grouping key used by :meth:`Registry.get_by_category`.
    description:
        Optional text searched by :meth:`Registry.search`.
    """

    id: str
    type: str
    name: MultilingualText
    config: T
    category: str | None = None
    description: MultilingualText | None = None


class Registry(Generic[T]):
    """Keyed store of :class:`RegistryItem` objects.

    Parameters
    ----------
    name:
        Registry name, included in every event payload.
    event_bus:
        Bus receiving ``registry:item:registered`` and
        ``registry:item:unregistered`` notifications.
    """

    def __init__(self, name: str, event_bus: EventBus) -> None:
        self._name = name
        self._event_bus = event_bus
        self._items: dict[str, RegistryItem[T]] = {}

    @property
    def name(self) -> str:
        """Registry name used in event payloads and log messages."""
        return self._name

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(self, item: RegistryItem[T]) -> None:
        """Store *item*, overwriting any item with the same id."""
        if item.id in self._items:
            logger.warning(
                "Item with id '%s' already exists in %s. Overwriting...",
                item.id,
                self._name,
            )
        self._items[item.id] = item
        logger.debug("Registered '%s' in %s", item.id, self._name)
        self._event_bus.emit(
            WorkflowEventTypes.REGISTRY_ITEM_REGISTERED,
            {"registry": self._name, "item": item},
        )

    def register_many(self, items: list[RegistryItem[T]]) -> None:
        """Register every item in order."""
        for item in items:
            self.register(item)

    def unregister(self, item_id: str) -> bool:
        """Remove the item with *item_id*.

        Returns
        -------
        bool
            ``True`` when an item was removed.  The unregistered event is
            only emitted in that case.
        """
        item = self._items.pop(item_id, None)
        if item is None:
            return False
        logger.debug("Unregistered '%s' from %s", item_id, self._name)
        self._event_bus.emit(
            WorkflowEventTypes.REGISTRY_ITEM_UNREGISTERED,
            {"registry": self._name, "item": item},
        )
        return True

    def update(self, item_id: str, **changes: object) -> bool:
        """Replace fields of an existing item.

        A new :class:`RegistryItem` is stored so that callers holding the
        previous object keep an unchanged snapshot.

        Returns
        -------
        bool
            ``False`` when no item has *item_id*.
        """
        item = self._items.get(item_id)
        if item is None:
            return False
        updated = dataclasses.replace(item, **changes)  # type: ignore[arg-type]
        self._items[item_id] = updated
        self._event_bus.emit(
            WorkflowEventTypes.REGISTRY_ITEM_REGISTERED,
            {"registry": self._name, "item": updated},
        )
        return True

    def clear(self) -> None:
        """Remove every item without emitting events."""
        self._items.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, item_id: str) -> RegistryItem[T] | None:
        return self._items.get(item_id)

    def get_config(self, item_id: str) -> T | None:
        item = self._items.get(item_id)
        return item.config if item is not None else None

    def has(self, item_id: str) -> bool:
        return item_id in self._items

    def get_all(self) -> list[RegistryItem[T]]:
        """Return all items in registration order."""
        return list(self._items.values())

    def get_by_type(self, item_type: str) -> list[RegistryItem[T]]:
        return [item for item in self._items.values() if item.type == item_type]

    def get_by_category(self, category: str) -> list[RegistryItem[T]]:
        return [item for item in self._items.values() if item.category == category]

    def search(self, query: str) -> list[RegistryItem[T]]:
        """Case-insensitive substring search over name, description and id.

        Multilingual names and descriptions match on any language.
        """
        needle = query.lower()
        results: list[RegistryItem[T]] = []
        for item in self._items.values():
            haystack = [item.id, *text_values(item.name), *text_values(item.description)]
            if any(needle in text.lower() for text in haystack):
                results.append(item)
        return results

    def size(self) -> int:
        return len(self._items)

    def get_categories(self) -> list[str]:
        """Return the distinct non-empty categories in first-seen order."""
        seen: dict[str, None] = {}
        for item in self._items.values():
            if item.category:
                seen.setdefault(item.category, None)
        return list(seen)

    def get_types(self) -> list[str]:
        """Return the distinct item types in first-seen order."""
        seen: dict[str, None] = {}
        for item in self._items.values():
            seen.setdefault(item.type, None)
        return list(seen)

    # ------------------------------------------------------------------
    # Dunder methods
    # ------------------------------------------------------------------

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[RegistryItem[T]]:
        return iter(list(self._items.values()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, items={len(self._items)})"
