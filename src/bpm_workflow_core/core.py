"""Service container wiring every engine component to one event bus.

Example
-------
::

    from bpm_workflow_core import WorkflowCore
    core = WorkflowCore()
    core.node_factory.register_from_config(
        {"id": "sendEmailTask", "extends": "task", "name": "Send email"}
    )
    core.node_registry.has("sendEmailTask")  # True
"""
from __future__ import annotations

from bpm_workflow_core.config import EngineSettings
from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.factory.custom_node_factory import CustomNodeFactory
from bpm_workflow_core.factory.plugin_loader import PluginJSONLoader
from bpm_workflow_core.plugins.manager import PluginManager
from bpm_workflow_core.properties.base_groups import (
    base_edge_property_groups,
    base_node_property_groups,
)
from bpm_workflow_core.properties.configuration import PropertyConfigurationRegistry
from bpm_workflow_core.properties.sync import PropertySyncEngine
from bpm_workflow_core.registry.actions import ContextMenuActionsRegistry
from bpm_workflow_core.registry.base import Registry
from bpm_workflow_core.registry.categories import CategoryRegistry
from bpm_workflow_core.registry.context_menus import ContextMenuRegistry
from bpm_workflow_core.registry.edges import EdgeRegistry
from bpm_workflow_core.registry.nodes import NodeRegistry
from bpm_workflow_core.registry.rules import RuleRegistry
from bpm_workflow_core.registry.themes import ThemeRegistry


class WorkflowCore:
    """Owns one instance of every service.

    Nothing here is global: two cores never share state, which keeps
    tests isolated.

    Parameters
    ----------
    settings:
        Engine settings.  Defaults to :class:`EngineSettings` with all
        defaults applied.
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings if settings is not None else EngineSettings()

        self.event_bus = EventBus()
        self.node_registry = NodeRegistry(self.event_bus)
        self.edge_registry = EdgeRegistry(self.event_bus)
        self.rule_registry = RuleRegistry(self.event_bus)
        self.theme_registry = ThemeRegistry(self.event_bus)
        self.category_registry = CategoryRegistry(self.event_bus)
        self.context_menu_registry = ContextMenuRegistry(self.event_bus)
        self.actions_registry = ContextMenuActionsRegistry()

        self.property_registry = PropertyConfigurationRegistry()
        if self.settings.install_base_property_groups:
            self.property_registry.set_base_node_groups(base_node_property_groups())
            self.property_registry.set_base_edge_groups(base_edge_property_groups())
        self.sync_engine = PropertySyncEngine()

        self.plugin_manager = PluginManager(
            node_registry=self.node_registry,
            edge_registry=self.edge_registry,
            rule_registry=self.rule_registry,
            theme_registry=self.theme_registry,
            context_menu_registry=self.context_menu_registry,
            category_registry=self.category_registry,
            property_registry=self.property_registry,
            event_bus=self.event_bus,
        )
        self.node_factory = CustomNodeFactory(
            self.node_registry,
            self.property_registry,
            self.context_menu_registry,
            self.event_bus,
            self.actions_registry,
            max_menu_depth=self.settings.max_menu_depth,
            fetch_timeout_seconds=self.settings.fetch_timeout_seconds,
            language=self.settings.default_language,
        )
        self.plugin_loader = PluginJSONLoader(
            self.node_factory,
            self.category_registry,
            fetch_timeout_seconds=self.settings.fetch_timeout_seconds,
        )

    @property
    def registries(self) -> list[Registry[object]]:
        return [
            self.node_registry,
            self.edge_registry,
            self.rule_registry,
            self.theme_registry,
            self.category_registry,
            self.context_menu_registry,
        ]  # type: ignore[list-item]

    def debug_snapshot(self) -> dict[str, list[str]]:
        """Return the registered ids of every registry keyed by registry name.

        Also lists installed plugins under ``"plugins"`` and node types with
        property configuration under ``"properties"``.
        """
        snapshot: dict[str, list[str]] = {
            registry.name: [item.id for item in registry.get_all()] for registry in self.registries
        }
        snapshot["plugins"] = [plugin.id for plugin in self.plugin_manager.get_all_plugins()]
        snapshot["properties"] = self.property_registry.get_registered_node_types()
        return snapshot

    def __repr__(self) -> str:
        return f"WorkflowCore(nodes={len(self.node_registry)}, plugins={len(self.plugin_manager.get_all_plugins())})"
