"""Typed registries for node, edge, rule, theme, category and menu resources."""
from __future__ import annotations

from bpm_workflow_core.registry.actions import ContextMenuActionsRegistry
from bpm_workflow_core.registry.base import Registry, RegistryItem
from bpm_workflow_core.registry.categories import (
    CategoryConfig,
    CategoryRegistry,
    CategorySeparator,
)
from bpm_workflow_core.registry.context_menus import (
    DEFAULT_MENU_ITEM_IDS,
    ContextMenuConfig,
    ContextMenuItem,
    ContextMenuRegistry,
    cleanup_separators,
    merge_context_menu_items,
    remove_disabled_defaults,
    separator_item,
)
from bpm_workflow_core.registry.edges import EdgeRegistry
from bpm_workflow_core.registry.nodes import NodeRegistry
from bpm_workflow_core.registry.rules import RuleConfig, RuleRegistry
from bpm_workflow_core.registry.themes import ThemeConfig, ThemeRegistry

__all__ = [
    "DEFAULT_MENU_ITEM_IDS",
    "CategoryConfig",
    "CategoryRegistry",
    "CategorySeparator",
    "ContextMenuActionsRegistry",
    "ContextMenuConfig",
    "ContextMenuItem",
    "ContextMenuRegistry",
    "EdgeRegistry",
    "NodeRegistry",
    "Registry",
    "RegistryItem",
    "RuleConfig",
    "RuleRegistry",
    "ThemeConfig",
    "ThemeRegistry",
    "cleanup_separators",
    "merge_context_menu_items",
    "remove_disabled_defaults",
    "separator_item",
]
