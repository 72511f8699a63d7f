"""Build :class:`~bpm_workflow_core.plugins.Plugin` objects from JSON documents.

The returned plugin carries no static registry items.  Its
``initialize`` hook registers the document's categories and then its
nodes through :class:`CustomNodeFactory`; its ``on_deactivate`` hook
removes them again, so a JSON plugin's resources exist only while it is
active.

Example
-------
>>> loader = PluginJSONLoader(factory, categories)
>>> plugin = loader.load_plugin_from_json(Path("email-plugin.json").read_text())
>>> await manager.install(plugin)
>>> await manager.activate(plugin.metadata.id)
"""
from __future__ import annotations

import json
import logging
from typing import Iterable, Mapping

from pydantic import ValidationError

from bpm_workflow_core.errors import ConfigValidationError
from bpm_workflow_core.factory.custom_node_factory import CustomNodeFactory, ValidationResult
from bpm_workflow_core.factory.schemas import CategoryJSON, PluginJSON, format_validation_errors
from bpm_workflow_core.factory.transport import fetch_json
from bpm_workflow_core.plugins.manager import Plugin, PluginMetadata
from bpm_workflow_core.registry.base import RegistryItem
from bpm_workflow_core.registry.categories import (
    UNORDERED_CATEGORY,
    CategoryConfig,
    CategoryRegistry,
    CategorySeparator,
)

logger = logging.getLogger(__name__)


class PluginJSONLoader:
    """Validates plugin documents and turns them into plugins.

    Parameters
    ----------
    factory:
        Registers the document's nodes.
    category_registry:
        Receives the document's categories.
    fetch_timeout_seconds:
        Timeout for :meth:`load_plugin_from_url`.
    """

    def __init__(
        self,
        factory: CustomNodeFactory,
        category_registry: CategoryRegistry,
        fetch_timeout_seconds: float = 30.0,
    ) -> None:
        self._factory = factory
        self._categories = category_registry
        self._fetch_timeout = fetch_timeout_seconds

    def validate_plugin(self, config: object) -> ValidationResult:
        """Check *config* against :class:`PluginJSON` without raising."""
        try:
            PluginJSON.model_validate(config)
        except ValidationError as exc:
            return ValidationResult(valid=False, errors=format_validation_errors(exc))
        return ValidationResult(valid=True)

    def load_plugin(self, config: Mapping[str, object] | PluginJSON) -> Plugin:
        """Build a plugin from a document.

        Raises
        ------
        ConfigValidationError:
            When the document violates the schema.
        """
        document = self._parse(config)
        meta = document.metadata
        registered_nodes: list[str] = []

        def initialize() -> None:
            for category in document.categories or []:
                self._categories.register(self._category_item(category))

            nodes = document.nodes or []
            result = self._factory.register_many(nodes)
            failed = {error.node_id for error in result.errors}
            registered_nodes[:] = [node.id for node in nodes if node.id not in failed]
            if result.failed:
                logger.warning(
                    "%d nodes of plugin '%s' failed to load: %s",
                    result.failed,
                    meta.id,
                    "; ".join(f"{error.node_id}: {error.error}" for error in result.errors),
                )

        def on_deactivate() -> None:
            for node_id in registered_nodes:
                self._factory.unregister(node_id)
            registered_nodes.clear()
            for category in document.categories or []:
                self._categories.unregister(category.id)

        return Plugin(
            metadata=PluginMetadata(
                id=meta.id,
                name=meta.name,
                version=meta.version,
                description=meta.description,
                author=meta.author,
                dependencies=list(meta.dependencies or []),
            ),
            initialize=initialize,
            on_deactivate=on_deactivate,
        )

    def load_plugin_from_json(self, json_string: str) -> Plugin:
        try:
            config = json.loads(json_string)
        except ValueError as exc:
            raise ConfigValidationError(f"Failed to parse plugin JSON: {exc}", [str(exc)]) from exc
        return self.load_plugin(config)

    async def load_plugin_from_url(self, url: str) -> Plugin:
        """Fetch and load a plugin document.

        Raises
        ------
        TransportError:
            When the document cannot be fetched or decoded.
        ConfigValidationError:
            When the fetched document violates the schema.
        """
        config = await fetch_json(url, self._fetch_timeout)
        return self.load_plugin(config)  # type: ignore[arg-type]

    def load_plugins(self, configs: Iterable[Mapping[str, object] | PluginJSON]) -> list[Plugin]:
        return [self.load_plugin(config) for config in configs]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(config: Mapping[str, object] | PluginJSON) -> PluginJSON:
        if isinstance(config, PluginJSON):
            return config
        try:
            return PluginJSON.model_validate(config)
        except ValidationError as exc:
            errors = format_validation_errors(exc)
            raise ConfigValidationError(
                f"Invalid plugin configuration: {', '.join(errors)}", errors
            ) from exc

    @staticmethod
    def _category_item(category: CategoryJSON) -> RegistryItem[CategoryConfig]:
        separator = None
        if category.separator is not None:
            separator = CategorySeparator(
                show=bool(category.separator.show),
                color=category.separator.color,
                style=category.separator.style or "line",
            )
        return RegistryItem(
            id=category.id,
            type=category.id,
            name=category.name,
            config=CategoryConfig(
                id=category.id,
                name=category.name,
                category_type=category.id,
                is_open=True,
                icon=category.icon,
                description=category.description,
                order=category.order if category.order is not None else UNORDERED_CATEGORY,
                separator=separator,
            ),
            description=category.description,
        )
