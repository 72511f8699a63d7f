"""JSON bridge: schemas, the custom node factory and the plugin loader."""
from __future__ import annotations

from bpm_workflow_core.factory.custom_node_factory import (
    BatchError,
    BatchResult,
    CustomNodeFactory,
    ValidationResult,
)
from bpm_workflow_core.factory.plugin_loader import PluginJSONLoader
from bpm_workflow_core.factory.schemas import (
    CategoryJSON,
    ContextMenuItemJSON,
    CustomNodeJSON,
    EventTriggerJSON,
    PluginJSON,
    PropertyDefinitionJSON,
    format_validation_errors,
)
from bpm_workflow_core.factory.transport import fetch_json

__all__ = [
    "BatchError",
    "BatchResult",
    "CategoryJSON",
    "ContextMenuItemJSON",
    "CustomNodeFactory",
    "CustomNodeJSON",
    "EventTriggerJSON",
    "PluginJSON",
    "PluginJSONLoader",
    "PropertyDefinitionJSON",
    "ValidationResult",
    "fetch_json",
    "format_validation_errors",
]
