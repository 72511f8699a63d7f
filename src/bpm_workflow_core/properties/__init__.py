"""Property panel schema: groups, fields, validation and sync."""
from __future__ import annotations

from bpm_workflow_core.properties.base_groups import (
    base_edge_property_groups,
    base_node_property_groups,
)
from bpm_workflow_core.properties.configuration import (
    PropertyConfigurationRegistry,
    convert_property_definitions_to_groups,
    field_from_property_definition,
    merge_fields,
    merge_property_groups,
)
from bpm_workflow_core.properties.sync import PropertySyncEngine, evaluate_condition
from bpm_workflow_core.properties.types import (
    UNSET,
    Condition,
    EntityValidationResult,
    FieldValidationResult,
    PropertyCondition,
    PropertyEntity,
    PropertyFieldDefinition,
    PropertyGroupDefinition,
    PropertySyncResult,
    ValidationIssue,
    ValidationOptions,
)
from bpm_workflow_core.properties.validation import (
    RuleValidator,
    TypeAdapterValidator,
    Validator,
)

__all__ = [
    "UNSET",
    "Condition",
    "EntityValidationResult",
    "FieldValidationResult",
    "PropertyCondition",
    "PropertyConfigurationRegistry",
    "PropertyEntity",
    "PropertyFieldDefinition",
    "PropertyGroupDefinition",
    "PropertySyncEngine",
    "PropertySyncResult",
    "RuleValidator",
    "TypeAdapterValidator",
    "ValidationIssue",
    "ValidationOptions",
    "Validator",
    "base_edge_property_groups",
    "base_node_property_groups",
    "convert_property_definitions_to_groups",
    "evaluate_condition",
    "field_from_property_definition",
    "merge_fields",
    "merge_property_groups",
]
