"""Base node archetypes and the inheritance engine built on them."""
from __future__ import annotations

from bpm_workflow_core.nodes.definitions import (
    BASE_NODE_DEFINITIONS,
    BaseNodeDefinition,
    BaseNodeType,
    get_all_base_node_types,
    get_base_node_definition,
    is_base_node_type,
)
from bpm_workflow_core.nodes.inheritance import (
    InheritanceValidation,
    create_inherited_node_config,
    merge_connection_rules,
    merge_context_menu_items,
    merge_properties,
    merge_property_definitions,
    merge_visual_configs,
    validate_inheritance,
)

__all__ = [
    "BASE_NODE_DEFINITIONS",
    "BaseNodeDefinition",
    "BaseNodeType",
    "InheritanceValidation",
    "create_inherited_node_config",
    "get_all_base_node_types",
    "get_base_node_definition",
    "is_base_node_type",
    "merge_connection_rules",
    "merge_context_menu_items",
    "merge_properties",
    "merge_property_definitions",
    "merge_visual_configs",
    "validate_inheritance",
]
