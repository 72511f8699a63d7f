"""Per-type property group registry with base-group merging.

One list of *base* groups applies to every node type (and another to every
edge type).  Custom groups registered for a type are merged over the base
groups each time they are requested:

* groups are merged by id, the custom group's attributes winning and its
  fields merged into the base group's fields;
* fields are merged by id with a **full replace**: a custom field never
  inherits keys from the base field of the same id;
* groups and fields are stably sorted by ``order``, fields without an
  order last.

Registered definitions are never mutated; every call returns new lists
and new group objects.

Example
-------
>>> registry = PropertyConfigurationRegistry()
>>> registry.set_base_node_groups(base_node_property_groups())
>>> registry.register_node_config("review", [PropertyGroupDefinition(
...     id="basic", label="Basic", order=1,
...     fields=[PropertyFieldDefinition(id="owner", label="Owner", order=4)])])
>>> [f.id for f in registry.get_node_property_groups("review")[0].fields]
['id', 'label', 'description', 'owner']
"""
from __future__ import annotations

import dataclasses
import logging
import math
from typing import Iterable, Mapping

from bpm_workflow_core.properties.types import (
    UNSET,
    PropertyFieldDefinition,
    PropertyGroupDefinition,
)
from bpm_workflow_core.properties.validation import RuleValidator, Validator
from bpm_workflow_core.text import capitalize_id

logger = logging.getLogger(__name__)

DEFAULT_GROUP_ID = "custom"
BASIC_GROUP_ORDER = 1
CUSTOM_GROUP_ORDER = 90


def _field_sort_key(definition: PropertyFieldDefinition) -> float:
    return definition.order if definition.order is not None else math.inf


class PropertyConfigurationRegistry:
    """Holds the property groups of every node and edge type."""

    def __init__(self) -> None:
        self._node_configs: dict[str, list[PropertyGroupDefinition]] = {}
        self._edge_configs: dict[str, list[PropertyGroupDefinition]] = {}
        self._base_node_groups: list[PropertyGroupDefinition] = []
        self._base_edge_groups: list[PropertyGroupDefinition] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_node_config(
        self,
        node_type: str,
        property_groups: list[PropertyGroupDefinition],
    ) -> None:
        """Store the custom groups of *node_type*, replacing earlier ones."""
        self._node_configs[node_type] = list(property_groups)
        logger.debug("Registered %d property groups for node type '%s'", len(property_groups), node_type)

    def register_edge_config(
        self,
        edge_type: str,
        property_groups: list[PropertyGroupDefinition],
    ) -> None:
        self._edge_configs[edge_type] = list(property_groups)

    def register_node_configs(
        self,
        configs: Mapping[str, list[PropertyGroupDefinition]],
    ) -> None:
        for node_type, groups in configs.items():
            self.register_node_config(node_type, groups)

    def unregister_node_config(self, node_type: str) -> bool:
        return self._node_configs.pop(node_type, None) is not None

    def unregister_edge_config(self, edge_type: str) -> bool:
        return self._edge_configs.pop(edge_type, None) is not None

    def set_base_node_groups(self, groups: list[PropertyGroupDefinition]) -> None:
        self._base_node_groups = list(groups)

    def set_base_edge_groups(self, groups: list[PropertyGroupDefinition]) -> None:
        self._base_edge_groups = list(groups)

    def clear(self) -> None:
        """Drop every registered config and both base group lists."""
        self._node_configs.clear()
        self._edge_configs.clear()
        self._base_node_groups = []
        self._base_edge_groups = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_node_property_groups(self, node_type: str) -> list[PropertyGroupDefinition]:
        """Return the base node groups merged with *node_type*'s groups."""
        return merge_property_groups(self._base_node_groups, self._node_configs.get(node_type, []))

    def get_edge_property_groups(self, edge_type: str) -> list[PropertyGroupDefinition]:
        return merge_property_groups(self._base_edge_groups, self._edge_configs.get(edge_type, []))

    def has_node_config(self, node_type: str) -> bool:
        return node_type in self._node_configs

    def has_edge_config(self, edge_type: str) -> bool:
        return edge_type in self._edge_configs

    def get_registered_node_types(self) -> list[str]:
        return list(self._node_configs)

    def get_registered_edge_types(self) -> list[str]:
        return list(self._edge_configs)

    def get_default_node_properties(self, node_type: str) -> dict[str, object]:
        """Flat map of field id to default value across the merged groups."""
        return _collect_defaults(self.get_node_property_groups(node_type))

    def get_default_edge_properties(self, edge_type: str) -> dict[str, object]:
        return _collect_defaults(self.get_edge_property_groups(edge_type))


# ---------------------------------------------------------------------------
# Merge helpers
# ---------------------------------------------------------------------------


def merge_property_groups(
    base_groups: Iterable[PropertyGroupDefinition],
    custom_groups: Iterable[PropertyGroupDefinition],
) -> list[PropertyGroupDefinition]:
    """Merge *custom_groups* over *base_groups* by group id."""
    merged: dict[str, PropertyGroupDefinition] = {}
    for group in base_groups:
        merged[group.id] = dataclasses.replace(group, fields=list(group.fields))

    for custom in custom_groups:
        existing = merged.get(custom.id)
        if existing is None:
            merged[custom.id] = dataclasses.replace(custom, fields=list(custom.fields))
        else:
            merged[custom.id] = dataclasses.replace(
                custom, fields=merge_fields(existing.fields, custom.fields)
            )

    return sorted(merged.values(), key=lambda group: group.order)


def merge_fields(
    base_fields: Iterable[PropertyFieldDefinition],
    custom_fields: Iterable[PropertyFieldDefinition],
) -> list[PropertyFieldDefinition]:
    """Merge field lists by id; a custom field replaces the base one whole."""
    merged: dict[str, PropertyFieldDefinition] = {}
    for definition in base_fields:
        merged[definition.id] = dataclasses.replace(definition)
    for definition in custom_fields:
        merged[definition.id] = dataclasses.replace(definition)
    return sorted(merged.values(), key=_field_sort_key)


def _collect_defaults(groups: Iterable[PropertyGroupDefinition]) -> dict[str, object]:
    defaults: dict[str, object] = {}
    for group in groups:
        for definition in group.fields:
            if definition.has_default:
                defaults[definition.id] = definition.default_value
    return defaults


# ---------------------------------------------------------------------------
# Conversion from node-config property definitions
# ---------------------------------------------------------------------------


def field_from_property_definition(
    definition: Mapping[str, object],
    group_id: str,
    default_order: int = 0,
    language: str = "en",
) -> PropertyFieldDefinition:
    """Build a :class:`PropertyFieldDefinition` from a camelCase dict.

    ``description`` becomes the help text, an options list is wrapped as
    ``{"options": [...]}`` and a rule dict under ``validation`` becomes a
    :class:`RuleValidator`.
    """
    field_type = str(definition.get("type") or "text")

    options = definition.get("options")
    if isinstance(options, list):
        options = {
            "options": [
                {"label": option.get("label"), "value": option.get("value")}
                for option in options
                if isinstance(option, dict)
            ]
        }

    validation = definition.get("validation")
    validator: Validator | None = None
    if isinstance(validation, dict):
        validator = RuleValidator(validation, field_type=field_type, language=language)
    elif isinstance(validation, Validator):
        validator = validation

    order = definition.get("order")
    return PropertyFieldDefinition(
        id=str(definition["id"]),
        label=definition.get("label") or str(definition["id"]),  # type: ignore[arg-type]
        type=field_type,  # type: ignore[arg-type]
        default_value=definition["defaultValue"] if "defaultValue" in definition else UNSET,
        placeholder=definition.get("placeholder"),  # type: ignore[arg-type]
        help_text=definition.get("description") or definition.get("helpText"),  # type: ignore[arg-type]
        required=bool(definition.get("required", False)),
        readonly=bool(definition.get("readonly", False)),
        validation=validator,
        options=options if isinstance(options, dict) else None,
        order=order if isinstance(order, (int, float)) else default_order,  # type: ignore[arg-type]
        group=group_id,
    )


def convert_property_definitions_to_groups(
    property_definitions: Iterable[Mapping[str, object]] | None,
) -> list[PropertyGroupDefinition]:
    """Group node-config property definitions into property groups.

    Definitions without a ``group`` land in ``"custom"``.  Group order is
    1 for ``"basic"``, 90 for ``"custom"`` and otherwise counts up from 1
    in first-seen order.  Labels are the capitalized group ids.
    """
    grouped: dict[str, list[PropertyFieldDefinition]] = {}
    for definition in property_definitions or []:
        group_id = str(definition.get("group") or DEFAULT_GROUP_ID)
        grouped.setdefault(group_id, []).append(field_from_property_definition(definition, group_id))

    groups: list[PropertyGroupDefinition] = []
    next_order = 1
    for group_id, fields in grouped.items():
        if group_id == "basic":
            order = BASIC_GROUP_ORDER
        elif group_id == DEFAULT_GROUP_ID:
            order = CUSTOM_GROUP_ORDER
        else:
            order = next_order
            next_order += 1
        groups.append(
            PropertyGroupDefinition(id=group_id, label=capitalize_id(group_id), order=order, fields=fields)
        )
    return groups
