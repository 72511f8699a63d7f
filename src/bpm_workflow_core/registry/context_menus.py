"""Context menu registry and the default/specific menu merge.

Menus are registered per target (``node``, ``edge``, ``canvas`` or
``all``).  A menu without a node/edge type filter contributes *general*
items; the first menu whose filter names the requested type contributes
*specific* items, which are spliced into the general list just before the
``properties`` entry.

Separator hygiene is re-established after every step that can remove
items: a merged menu never starts or ends with a separator and never
holds two separators in a row.

Example
-------
>>> general = [item("properties"), separator_item(), item("delete")]
>>> merge_context_menu_items(general, [item("send-now")], ["delete"])
[send-now, <separator>, properties]
"""
from __future__ import annotations

import inspect
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal

from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.registry.base import Registry
from bpm_workflow_core.text import MultilingualText

logger = logging.getLogger(__name__)

MenuTarget = Literal["node", "edge", "canvas", "all"]
MenuContext = dict[str, object]

DEFAULT_MENU_ITEM_IDS: tuple[str, ...] = ("properties", "appearance", "duplicate", "delete")
DISABLE_ALL = "all"
PROPERTIES_ANCHOR = "properties"


@dataclass
class ContextMenuItem:
    """One entry of a context menu.

    ``visible`` is evaluated against the menu context; ``on_click`` may be
    a plain function or a coroutine function.
    """

    id: str
    label: MultilingualText = ""
    icon: object = None
    color: str | None = None
    disabled: bool = False
    separator: bool = False
    children: list["ContextMenuItem"] = field(default_factory=list)
    on_click: Callable[[MenuContext], object] | None = None
    visible: Callable[[MenuContext], bool] | None = None
    action_name: str | None = None

    def __repr__(self) -> str:
        return "<separator>" if self.separator else self.id


@dataclass
class ContextMenuConfig:
    """A menu registered for a target, optionally scoped to specific types."""

    id: str
    name: str
    target_type: MenuTarget
    items: list[ContextMenuItem] = field(default_factory=list)
    target_node_types: list[str] | None = None
    target_edge_types: list[str] | None = None
    disable_default_items: list[str] = field(default_factory=list)
    description: str | None = None

    @property
    def is_general(self) -> bool:
        return not self.target_node_types and not self.target_edge_types


def separator_item() -> ContextMenuItem:
    """Return a new separator with a unique id."""
    return ContextMenuItem(id=f"separator-{uuid.uuid4().hex[:12]}", separator=True)


# ---------------------------------------------------------------------------
# Merge algorithm
# ---------------------------------------------------------------------------


def cleanup_separators(items: Iterable[ContextMenuItem]) -> list[ContextMenuItem]:
    """Drop leading, trailing and consecutive separators."""
    cleaned: list[ContextMenuItem] = []
    for entry in items:
        if entry.separator and (not cleaned or cleaned[-1].separator):
            continue
        cleaned.append(entry)
    while cleaned and cleaned[-1].separator:
        cleaned.pop()
    return cleaned


def expand_disabled_ids(disabled: Iterable[str]) -> set[str]:
    """Expand the ``"all"`` sentinel into every reserved default id."""
    expanded: set[str] = set()
    for item_id in disabled:
        if item_id == DISABLE_ALL:
            expanded.update(DEFAULT_MENU_ITEM_IDS)
        else:
            expanded.add(item_id)
    return expanded


def remove_disabled_defaults(
    items: Iterable[ContextMenuItem],
    disabled: Iterable[str],
) -> list[ContextMenuItem]:
    """Remove the disabled ids and repair the separators left behind."""
    blocked = expand_disabled_ids(disabled)
    if not blocked:
        return cleanup_separators(items)
    return cleanup_separators(entry for entry in items if entry.id not in blocked)


def merge_context_menu_items(
    general: list[ContextMenuItem],
    specific: list[ContextMenuItem],
    disabled: Iterable[str] = (),
) -> list[ContextMenuItem]:
    """Splice type-specific items into the general menu.

    Parameters
    ----------
    general:
        Items of every menu without a type filter, in registration order.
    specific:
        Items of the first menu scoped to the requested type.
    disabled:
        Default item ids to drop from *general*; ``"all"`` drops all four
        reserved ids.

    Returns
    -------
    list[ContextMenuItem]
        A new list.  When *specific* already carries a reserved default id
        it is treated as a complete menu and returned unchanged.
    """
    if any(entry.id in DEFAULT_MENU_ITEM_IDS for entry in specific):
        return list(specific)

    base = remove_disabled_defaults(general, disabled)
    if not specific:
        return base

    block = list(specific)
    anchor = next(
        (index for index, entry in enumerate(base) if entry.id == PROPERTIES_ANCHOR),
        None,
    )
    if anchor is None:
        return cleanup_separators([*base, *block])

    before = base[:anchor]
    after = base[anchor:]
    if before and not before[-1].separator and not block[0].separator:
        block.insert(0, separator_item())
    if not block[-1].separator and not after[0].separator:
        block.append(separator_item())

    return cleanup_separators([*before, *block, *after])


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ContextMenuRegistry(Registry[ContextMenuConfig]):
    """Registry of :class:`ContextMenuConfig` objects."""

    def __init__(self, event_bus: EventBus) -> None:
        super().__init__("ContextMenuRegistry", event_bus)

    def get_node_context_menu(
        self,
        node_type: str,
        context: MenuContext | None = None,
    ) -> list[ContextMenuItem]:
        return self._get_context_menu_items("node", node_type, context)

    def get_edge_context_menu(
        self,
        edge_type: str,
        context: MenuContext | None = None,
    ) -> list[ContextMenuItem]:
        return self._get_context_menu_items("edge", edge_type, context)

    def get_canvas_context_menu(self, context: MenuContext | None = None) -> list[ContextMenuItem]:
        return self._get_context_menu_items("canvas", None, context)

    async def execute_action(self, item_id: str, context: MenuContext) -> bool:
        """Run the ``on_click`` handler of the first item with *item_id*.

        Returns
        -------
        bool
            ``False`` (with a warning) when no such item has a handler.
        """
        for registry_item in self.get_all():
            entry = self.find_menu_item(registry_item.config.items, item_id)
            if entry is not None and entry.on_click is not None:
                outcome = entry.on_click(context)
                if inspect.isawaitable(outcome):
                    await outcome
                return True

        logger.warning("Context menu item '%s' not found or has no on_click handler", item_id)
        return False

    def find_menu_item(
        self,
        items: list[ContextMenuItem],
        item_id: str,
    ) -> ContextMenuItem | None:
        """Depth-first search through *items* and their children."""
        for entry in items:
            if entry.id == item_id:
                return entry
            found = self.find_menu_item(entry.children, item_id)
            if found is not None:
                return found
        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_context_menu_items(
        self,
        target_type: Literal["node", "edge", "canvas"],
        specific_type: str | None,
        context: MenuContext | None,
    ) -> list[ContextMenuItem]:
        general: list[ContextMenuItem] = []
        specific: list[ContextMenuItem] = []
        disabled: list[str] = []
        matched = False

        for registry_item in self.get_all():
            menu = registry_item.config
            if menu.target_type not in (target_type, "all"):
                continue
            if menu.is_general:
                general.extend(menu.items)
                continue
            if matched or specific_type is None:
                continue
            type_filter = (
                menu.target_node_types if target_type == "node" else menu.target_edge_types
            )
            if type_filter and specific_type in type_filter:
                specific.extend(menu.items)
                disabled.extend(menu.disable_default_items)
                matched = True

        merged = merge_context_menu_items(general, specific, disabled)
        if context is None:
            return merged
        return cleanup_separators(
            entry for entry in merged if entry.visible is None or entry.visible(context)
        )
