"""Node type registry.

Stores one node configuration dict per node type and builds node
instances from those defaults for the rendering layer.
"""
from __future__ import annotations

import logging
import time

from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.registry.base import Registry
from bpm_workflow_core.text import resolve_text

logger = logging.getLogger(__name__)

NodeConfig = dict[str, object]


def _as_dict(value: object) -> dict[str, object]:
    return dict(value) if isinstance(value, dict) else {}


class NodeRegistry(Registry[NodeConfig]):
    """Registry of node types keyed by node type id."""

    def __init__(self, event_bus: EventBus) -> None:
        super().__init__("NodeRegistry", event_bus)

    def get_renderer(self, node_type: str) -> object | None:
        """Return the ``renderer`` entry of a node config, if any."""
        config = self.get_config(node_type)
        return config.get("renderer") if config else None

    def create_node(
        self,
        node_type: str,
        overrides: dict[str, object] | None = None,
    ) -> NodeConfig | None:
        """Create a node instance from the registered defaults.

        Top-level keys of *overrides* replace the defaults; ``metadata``,
        ``properties`` and ``data`` are merged key by key.  When no label is
        present, ``data.label`` and ``properties.label`` are filled from
        ``metadata.title``.

        Parameters
        ----------
        node_type:
            Registered node type id.
        overrides:
            Instance-level values (``id``, ``position``, ``properties``...).

        Returns
        -------
        dict | None
            The node instance, or ``None`` when *node_type* is unknown.
        """
        item = self.get(node_type)
        if item is None:
            logger.error("Node type '%s' not found in registry", node_type)
            return None

        overrides = overrides or {}
        defaults = item.config

        metadata = {**_as_dict(defaults.get("metadata")), **_as_dict(overrides.get("metadata"))}
        properties = {
            **_as_dict(defaults.get("properties")),
            **_as_dict(overrides.get("properties")),
        }
        title = metadata.get("title")
        label = title if title else resolve_text(item.name) or "New Node"

        data: dict[str, object] = {
            "label": label,
            **_as_dict(defaults.get("data")),
            **_as_dict(overrides.get("data")),
        }
        data["metadata"] = dict(metadata)
        if title and not properties.get("label"):
            properties["label"] = title

        node_id = overrides.get("id") or f"{node_type}-{int(time.time() * 1000)}"
        return {
            **defaults,
            **overrides,
            "id": node_id,
            "data": data,
            "metadata": metadata,
            "properties": properties,
        }

    def validate_node(self, node: dict[str, object]) -> dict[str, object]:
        """Check that a node instance is well formed.

        Returns
        -------
        dict[str, object]
            ``{"valid": bool, "errors": list[str]}``.
        """
        errors: list[str] = []
        node_type = node.get("nodeType")

        if not node.get("id"):
            errors.append("Node id is required")
        if not node_type:
            errors.append("Node type is required")
        elif not self.has(str(node_type)):
            errors.append(f"Node type '{node_type}' is not registered")

        properties = _as_dict(node.get("properties"))
        for definition in node.get("propertyDefinitions") or []:  # type: ignore[union-attr]
            if not isinstance(definition, dict):
                continue
            if definition.get("required") and not properties.get(str(definition.get("id"))):
                errors.append(f"Property '{resolve_text(definition.get('label'))}' is required")

        return {"valid": not errors, "errors": errors}
