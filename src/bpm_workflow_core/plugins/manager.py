"""Plugin lifecycle: install, activate, deactivate, uninstall.

A plugin bundles registry items (nodes, edges, rules, themes, context
menus, categories) with optional lifecycle hooks.  Its resources live in
the specialized registries exactly while it is active.

Hooks may be plain callables or coroutine functions; the manager awaits
whatever they return when it is awaitable.

Example
-------
>>> manager = PluginManager(nodes, edges, rules, themes, menus, categories,
...                         property_registry, bus)
>>> await manager.install(plugin)
>>> await manager.activate(plugin.metadata.id)
>>> manager.is_active(plugin.metadata.id)
True
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Callable

from bpm_workflow_core.errors import (
    DuplicateInstallError,
    MissingDependencyError,
    PluginNotInstalledError,
)
from bpm_workflow_core.events.bus import EventBus, WorkflowEventTypes
from bpm_workflow_core.properties.configuration import (
    PropertyConfigurationRegistry,
    convert_property_definitions_to_groups,
)
from bpm_workflow_core.registry.base import RegistryItem
from bpm_workflow_core.registry.categories import CategoryConfig, CategoryRegistry
from bpm_workflow_core.registry.context_menus import ContextMenuConfig, ContextMenuRegistry
from bpm_workflow_core.registry.edges import EdgeRegistry
from bpm_workflow_core.registry.nodes import NodeRegistry
from bpm_workflow_core.registry.rules import RuleConfig, RuleRegistry
from bpm_workflow_core.registry.themes import ThemeConfig, ThemeRegistry
from bpm_workflow_core.text import MultilingualText

logger = logging.getLogger(__name__)

LifecycleHook = Callable[[], object]


@dataclass
class PluginMetadata:
    """Identity of a plugin; ``id`` is unique within a manager."""

    id: str
    name: MultilingualText
    version: str = "1.0.0"
    description: MultilingualText | None = None
    author: str | None = None
    dependencies: list[str] = field(default_factory=list)


@dataclass
class PluginConfig:
    """Registry items contributed by a plugin while it is active."""

    nodes: list[RegistryItem[dict[str, object]]] = field(default_factory=list)
    edges: list[RegistryItem[dict[str, object]]] = field(default_factory=list)
    rules: list[RegistryItem[RuleConfig]] = field(default_factory=list)
    themes: list[RegistryItem[ThemeConfig]] = field(default_factory=list)
    context_menus: list[RegistryItem[ContextMenuConfig]] = field(default_factory=list)
    categories: list[RegistryItem[CategoryConfig]] = field(default_factory=list)


@dataclass
class Plugin:
    metadata: PluginMetadata
    config: PluginConfig = field(default_factory=PluginConfig)
    on_install: LifecycleHook | None = None
    on_uninstall: LifecycleHook | None = None
    on_activate: LifecycleHook | None = None
    on_deactivate: LifecycleHook | None = None
    initialize: LifecycleHook | None = None

    @property
    def id(self) -> str:
        return self.metadata.id


async def _run_hook(hook: LifecycleHook | None) -> None:
    if hook is None:
        return
    outcome = hook()
    if inspect.isawaitable(outcome):
        await outcome


class PluginManager:
    """Installs plugins and copies their resources into the registries.

    Parameters
    ----------
    node_registry, edge_registry, rule_registry, theme_registry,
    context_menu_registry, category_registry:
        Target registries for the matching :class:`PluginConfig` lists.
    property_registry:
        Receives the property groups derived from each node's
        ``propertyDefinitions``.
    event_bus:
        Receives ``plugin:loaded`` and ``plugin:unloaded``.
    """

    def __init__(
        self,
        node_registry: NodeRegistry,
        edge_registry: EdgeRegistry,
        rule_registry: RuleRegistry,
        theme_registry: ThemeRegistry,
        context_menu_registry: ContextMenuRegistry,
        category_registry: CategoryRegistry,
        property_registry: PropertyConfigurationRegistry,
        event_bus: EventBus,
    ) -> None:
        self._nodes = node_registry
        self._edges = edge_registry
        self._rules = rule_registry
        self._themes = theme_registry
        self._context_menus = context_menu_registry
        self._categories = category_registry
        self._property_registry = property_registry
        self._event_bus = event_bus
        self._plugins: dict[str, Plugin] = {}
        self._installed: set[str] = set()
        self._active: set[str] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def install(self, plugin: Plugin) -> None:
        """Store *plugin* and run its ``on_install`` hook.

        Raises
        ------
        DuplicateInstallError:
            When the plugin id is already installed.
        MissingDependencyError:
            When a declared dependency is not installed.  Nothing is stored
            in that case.
        """
        plugin_id = plugin.metadata.id
        if plugin_id in self._plugins:
            raise DuplicateInstallError(plugin_id)
        for dependency_id in plugin.metadata.dependencies:
            if dependency_id not in self._installed:
                raise MissingDependencyError(plugin_id, dependency_id)

        self._plugins[plugin_id] = plugin
        self._installed.add(plugin_id)
        logger.info("Installed plugin '%s' (%s)", plugin_id, plugin.metadata.version)

        await _run_hook(plugin.on_install)
        self._event_bus.emit(WorkflowEventTypes.PLUGIN_LOADED, {"plugin": plugin})

    async def uninstall(self, plugin_id: str) -> None:
        """Deactivate if needed, run ``on_uninstall`` and forget the plugin."""
        plugin = self._require(plugin_id)
        if plugin_id in self._active:
            await self.deactivate(plugin_id)

        await _run_hook(plugin.on_uninstall)
        self._unregister_resources(plugin)

        del self._plugins[plugin_id]
        self._installed.discard(plugin_id)
        logger.info("Uninstalled plugin '%s'", plugin_id)
        self._event_bus.emit(WorkflowEventTypes.PLUGIN_UNLOADED, {"plugin_id": plugin_id})

    async def activate(self, plugin_id: str) -> None:
        """Register the plugin's resources, then run ``initialize`` and ``on_activate``.

        Activating an active plugin logs a warning and does nothing.  If a
        hook raises, the resources are removed again and the error
        propagates.
        """
        plugin = self._require(plugin_id)
        if plugin_id in self._active:
            logger.warning("Plugin '%s' is already active", plugin_id)
            return

        self._register_resources(plugin)
        self._active.add(plugin_id)
        try:
            await _run_hook(plugin.initialize)
            await _run_hook(plugin.on_activate)
        except Exception:
            self._active.discard(plugin_id)
            self._unregister_resources(plugin)
            raise
        logger.info("Activated plugin '%s'", plugin_id)

    async def deactivate(self, plugin_id: str) -> None:
        """Run ``on_deactivate`` and remove the plugin's resources."""
        plugin = self._require(plugin_id)
        if plugin_id not in self._active:
            logger.warning("Plugin '%s' is not active", plugin_id)
            return

        try:
            await _run_hook(plugin.on_deactivate)
        finally:
            self._unregister_resources(plugin)
            self._active.discard(plugin_id)
        logger.info("Deactivated plugin '%s'", plugin_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_plugin(self, plugin_id: str) -> Plugin | None:
        return self._plugins.get(plugin_id)

    def get_all_plugins(self) -> list[Plugin]:
        return list(self._plugins.values())

    def get_active_plugins(self) -> list[Plugin]:
        return [plugin for plugin_id, plugin in self._plugins.items() if plugin_id in self._active]

    def is_installed(self, plugin_id: str) -> bool:
        return plugin_id in self._installed

    def is_active(self, plugin_id: str) -> bool:
        return plugin_id in self._active

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, plugin_id: str) -> Plugin:
        plugin = self._plugins.get(plugin_id)
        if plugin is None:
            raise PluginNotInstalledError(plugin_id)
        return plugin

    def _register_resources(self, plugin: Plugin) -> None:
        config = plugin.config
        # Categories go first so node registration can resolve them.
        self._categories.register_many(config.categories)

        for node in config.nodes:
            self._nodes.register(node)
            definitions = node.config.get("propertyDefinitions")
            if definitions:
                self._property_registry.register_node_config(
                    node.type,
                    convert_property_definitions_to_groups(definitions),  # type: ignore[arg-type]
                )

        self._edges.register_many(config.edges)
        self._rules.register_many(config.rules)
        self._themes.register_many(config.themes)
        self._context_menus.register_many(config.context_menus)

    def _unregister_resources(self, plugin: Plugin) -> None:
        config = plugin.config
        for node in config.nodes:
            self._nodes.unregister(node.id)
            if node.config.get("propertyDefinitions"):
                self._property_registry.unregister_node_config(node.type)
        for edge in config.edges:
            self._edges.unregister(edge.id)
        for rule in config.rules:
            self._rules.unregister(rule.id)
        for theme in config.themes:
            self._themes.unregister(theme.id)
        for menu in config.context_menus:
            self._context_menus.unregister(menu.id)
        for category in config.categories:
            self._categories.unregister(category.id)
