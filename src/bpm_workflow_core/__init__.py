"""bpm-workflow-core: extensibility engine for BPMN workflow editors.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import bpm_workflow_core as bpm
>>> bpm.__version__
'0.1.0'
>>> core = bpm.WorkflowCore()
>>> core.node_factory.register_from_config(
...     {"id": "sendEmailTask", "extends": "task", "name": "Send email"}
... )
>>> core.node_registry.get_config("sendEmailTask")["nodeType"]
'sendEmailTask'
"""
from __future__ import annotations

__version__: str = "0.1.0"

from bpm_workflow_core.config import ConfigLoader, EngineSettings
from bpm_workflow_core.core import WorkflowCore
from bpm_workflow_core.errors import (
    ConfigValidationError,
    DuplicateInstallError,
    MenuDepthExceededError,
    MissingDependencyError,
    PluginLifecycleError,
    PluginNotInstalledError,
    TransportError,
    WorkflowCoreError,
)

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
from bpm_workflow_core.events import EventBus, Subscription, WorkflowEvent, WorkflowEventTypes

# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------
from bpm_workflow_core.registry import (
    CategoryConfig,
    CategoryRegistry,
    ContextMenuActionsRegistry,
    ContextMenuConfig,
    ContextMenuItem,
    ContextMenuRegistry,
    EdgeRegistry,
    NodeRegistry,
    Registry,
    RegistryItem,
    RuleConfig,
    RuleRegistry,
    ThemeConfig,
    ThemeRegistry,
    merge_context_menu_items,
)

# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------
from bpm_workflow_core.nodes import (
    BaseNodeType,
    create_inherited_node_config,
    get_base_node_definition,
    validate_inheritance,
)

# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------
from bpm_workflow_core.properties import (
    UNSET,
    PropertyCondition,
    PropertyConfigurationRegistry,
    PropertyFieldDefinition,
    PropertyGroupDefinition,
    PropertySyncEngine,
    RuleValidator,
    TypeAdapterValidator,
    ValidationOptions,
)

# ---------------------------------------------------------------------------
# Plugins and the JSON bridge
# ---------------------------------------------------------------------------
from bpm_workflow_core.plugins import Plugin, PluginConfig, PluginManager, PluginMetadata
from bpm_workflow_core.factory import (
    BatchResult,
    CustomNodeFactory,
    CustomNodeJSON,
    PluginJSON,
    PluginJSONLoader,
    ValidationResult,
)

__all__ = [
    "__version__",
    "ConfigLoader",
    "EngineSettings",
    "WorkflowCore",
    # Errors
    "ConfigValidationError",
    "DuplicateInstallError",
    "MenuDepthExceededError",
    "MissingDependencyError",
    "PluginLifecycleError",
    "PluginNotInstalledError",
    "TransportError",
    "WorkflowCoreError",
    # Events
    "EventBus",
    "Subscription",
    "WorkflowEvent",
    "WorkflowEventTypes",
    # Registries
    "CategoryConfig",
    "CategoryRegistry",
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
    "merge_context_menu_items",
    # Nodes
    "BaseNodeType",
    "create_inherited_node_config",
    "get_base_node_definition",
    "validate_inheritance",
    # Properties
    "UNSET",
    "PropertyCondition",
    "PropertyConfigurationRegistry",
    "PropertyFieldDefinition",
    "PropertyGroupDefinition",
    "PropertySyncEngine",
    "RuleValidator",
    "TypeAdapterValidator",
    "ValidationOptions",
    # Plugins
    "BatchResult",
    "CustomNodeFactory",
    "CustomNodeJSON",
    "Plugin",
    "PluginConfig",
    "PluginJSON",
    "PluginJSONLoader",
    "PluginManager",
    "PluginMetadata",
    "ValidationResult",
]
