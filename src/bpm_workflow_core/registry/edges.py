"""Edge type registry."""
from __future__ import annotations

import logging
import time

from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.registry.base import Registry

logger = logging.getLogger(__name__)

EdgeConfig = dict[str, object]


def _as_dict(value: object) -> dict[str, object]:
    return dict(value) if isinstance(value, dict) else {}


class EdgeRegistry(Registry[EdgeConfig]):
    """Registry of edge types keyed by edge type id."""

    def __init__(self, event_bus: EventBus) -> None:
        super().__init__("EdgeRegistry", event_bus)

    def get_renderer(self, edge_type: str) -> object | None:
        config = self.get_config(edge_type)
        return config.get("renderer") if config else None

    def create_edge(
        self,
        edge_type: str,
        source: str,
        target: str,
        overrides: dict[str, object] | None = None,
    ) -> EdgeConfig | None:
        """Create an edge instance between *source* and *target*.

        Returns ``None`` (and logs) when *edge_type* is not registered.
        """
        item = self.get(edge_type)
        if item is None:
            logger.error("Edge type '%s' not found in registry", edge_type)
            return None

        overrides = overrides or {}
        defaults = item.config
        edge_id = overrides.get("id") or f"{source}-{target}-{int(time.time() * 1000)}"

        return {
            **defaults,
            **overrides,
            "id": edge_id,
            "source": source,
            "target": target,
            "metadata": {
                **_as_dict(defaults.get("metadata")),
                **_as_dict(overrides.get("metadata")),
            },
            "properties": {
                **_as_dict(defaults.get("properties")),
                **_as_dict(overrides.get("properties")),
            },
        }

    def validate_edge(self, edge: dict[str, object]) -> dict[str, object]:
        """Return ``{"valid": bool, "errors": list[str]}`` for an edge instance."""
        errors: list[str] = []
        edge_type = edge.get("edgeType")

        if not edge.get("id"):
            errors.append("Edge id is required")
        if not edge.get("source"):
            errors.append("Edge source is required")
        if not edge.get("target"):
            errors.append("Edge target is required")
        if not edge_type:
            errors.append("Edge type is required")
        elif not self.has(str(edge_type)):
            errors.append(f"Edge type '{edge_type}' is not registered")

        return {"valid": not errors, "errors": errors}
