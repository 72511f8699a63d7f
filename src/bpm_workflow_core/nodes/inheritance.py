"""Merge a base archetype with the overrides of a custom node type.

All merges are right-biased: override values win for identical keys or
ids, and unspecified override keys fall back to the base.  Property
definitions are patched field by field here, unlike the property
configuration registry which replaces whole fields.

Example
-------
>>> config = create_inherited_node_config(
...     "task",
...     {"type": "review", "metadata": {"id": "review", "title": "Review"},
...      "properties": {"assignee": "bob"}},
... )
>>> config["properties"]["priority"], config["properties"]["assignee"]
('medium', 'bob')
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bpm_workflow_core.nodes.definitions import (
    BaseNodeType,
    get_base_node_definition,
    is_base_node_type,
)

logger = logging.getLogger(__name__)

DEFAULT_NODE_VERSION = "1.0.0"

# Behaviour flags and the value used when an override leaves them out.
BEHAVIOR_FLAG_DEFAULTS: dict[str, bool] = {
    "collapsible": True,
    "collapsed": False,
    "editable": True,
    "deletable": True,
    "connectable": True,
    "draggable": True,
}


@dataclass
class InheritanceValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


def merge_visual_configs(
    base: dict[str, object] | None,
    override: dict[str, object] | None,
) -> dict[str, object] | None:
    """Shallow-merge *override* over *base*; ``None`` when both are absent."""
    if base is None and override is None:
        return None
    if base is None:
        return dict(override or {})
    if override is None:
        return dict(base)
    return {**base, **override}


def merge_properties(
    base: dict[str, object],
    override: dict[str, object] | None,
) -> dict[str, object]:
    return {**base, **(override or {})}


def merge_property_definitions(
    base: list[dict[str, object]],
    override: list[dict[str, object]] | None,
) -> list[dict[str, object]]:
    """Merge definition lists by id.

    Base entries keep their position.  An override entry whose id exists in
    *base* is shallow-merged onto that entry, so a single key such as
    ``defaultValue`` can be patched; other override entries are appended.
    """
    merged = [dict(definition) for definition in base]
    positions = {definition.get("id"): index for index, definition in enumerate(merged)}

    for definition in override or []:
        index = positions.get(definition.get("id"))
        if index is None:
            positions[definition.get("id")] = len(merged)
            merged.append(dict(definition))
        else:
            merged[index] = {**merged[index], **definition}
    return merged


def merge_connection_rules(
    base: dict[str, object] | None,
    override: dict[str, object] | None,
) -> dict[str, object]:
    return {**(base or {}), **(override or {})}


def merge_context_menu_items(
    base: list[dict[str, object]] | None = None,
    override: list[dict[str, object]] | None = None,
) -> list[dict[str, object]]:
    """Archetype menu entries followed by the custom node's entries."""
    return [*(base or []), *(override or [])]


def create_inherited_node_config(
    base_type: BaseNodeType | str,
    overrides: dict[str, object],
) -> dict[str, object] | None:
    """Build a node configuration from an archetype and overrides.

    Parameters
    ----------
    base_type:
        One of the eight archetypes.
    overrides:
        Node configuration keys to layer on top of the archetype.  ``type``
        and ``metadata`` (with ``id`` and ``title``) are expected.

    Returns
    -------
    dict[str, object] | None
        The merged configuration, or ``None`` (logged) when *base_type* is
        not an archetype.  This function never raises for an unknown type.
    """
    definition = get_base_node_definition(base_type)
    if definition is None:
        logger.error("Base node type '%s' not found", base_type)
        return None

    metadata = overrides.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    config: dict[str, object] = {
        "id": overrides.get("id") or "",
        "type": overrides.get("type"),
        "position": overrides.get("position") or {"x": 0, "y": 0},
        "data": overrides.get("data") or {},
        "nodeType": overrides.get("type"),
        "category": overrides.get("category") or definition.category,
        "metadata": {
            "id": metadata.get("id"),
            "title": metadata.get("title"),
            "description": metadata.get("description"),
            "version": metadata.get("version") or DEFAULT_NODE_VERSION,
        },
        "visualConfig": merge_visual_configs(
            definition.visual_config,
            overrides.get("visualConfig"),  # type: ignore[arg-type]
        ),
        "properties": merge_properties(
            definition.default_properties,
            overrides.get("properties"),  # type: ignore[arg-type]
        ),
        "propertyDefinitions": merge_property_definitions(
            definition.property_definitions,
            overrides.get("propertyDefinitions"),  # type: ignore[arg-type]
        ),
        "connectionRules": merge_connection_rules(
            definition.connection_rules,
            overrides.get("connectionRules"),  # type: ignore[arg-type]
        ),
        "contextMenuItems": merge_context_menu_items(
            definition.context_menu_items,
            overrides.get("contextMenuItems"),  # type: ignore[arg-type]
        ),
    }
    for flag, default in BEHAVIOR_FLAG_DEFAULTS.items():
        value = overrides.get(flag)
        config[flag] = default if value is None else value
    config["icon"] = overrides.get("icon")
    config["validationRules"] = overrides.get("validationRules")
    return config


def validate_inheritance(node_type: str | None, extends_from: str | None) -> InheritanceValidation:
    """Check that *node_type* may extend *extends_from*."""
    errors: list[str] = []

    if not node_type:
        errors.append("Node type is required")
    if not extends_from:
        errors.append("Base type (extends) is required")
    elif not is_base_node_type(extends_from):
        allowed = ", ".join(member.value for member in BaseNodeType)
        errors.append(f'Invalid base type: "{extends_from}". Must be one of: {allowed}')
    if node_type and node_type == extends_from:
        errors.append("Node type cannot be the same as base type")

    return InheritanceValidation(valid=not errors, errors=errors)
