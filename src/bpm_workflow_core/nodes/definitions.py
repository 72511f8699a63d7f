"""Canonical definitions of the eight base node archetypes.

Every custom node type extends exactly one archetype.  The tables below
are read-only templates; :func:`get_base_node_definition` hands out deep
copies so that callers can patch them freely.

Example
-------
>>> definition = get_base_node_definition("task")
>>> definition.default_properties["priority"]
'medium'
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum


class BaseNodeType(str, Enum):
    """The closed set of archetypes a custom node may extend."""

    START = "start"
    END = "end"
    TASK = "task"
    GATEWAY = "gateway"
    EVENT = "event"
    ANNOTATION = "annotation"
    POOL = "pool"
    NOTE = "note"


# Toolbox category each archetype falls into when no override is given.
CATEGORY_START = "start"
CATEGORY_END = "end"
CATEGORY_TASK = "task"
CATEGORY_GATEWAY = "gateway"
CATEGORY_OTHER = "other"

UNLIMITED_CONNECTIONS = -1


@dataclass
class BaseNodeDefinition:
    """Template a custom node type is merged onto.

    Attributes
    ----------
    type:
        The archetype.
    category:
        Default toolbox category.
    default_properties:
        Flat map of property id to default value.
    visual_config:
        Rendering hints; empty for every archetype, themes supply colors.
    connection_rules:
        ``maxInputConnections`` / ``maxOutputConnections``; ``-1`` means
        unlimited.
    property_definitions:
        Editor field definitions (camelCase dicts, as found in node configs).
    context_menu_items:
        Extra menu entries contributed by the archetype.
    """

    type: BaseNodeType
    category: str
    default_properties: dict[str, object]
    visual_config: dict[str, object] = field(default_factory=dict)
    connection_rules: dict[str, object] = field(default_factory=dict)
    property_definitions: list[dict[str, object]] = field(default_factory=list)
    context_menu_items: list[dict[str, object]] = field(default_factory=list)


def _property(
    property_id: str,
    label: str,
    property_type: str,
    default_value: object,
    group: str,
    order: int,
    *,
    required: bool = False,
) -> dict[str, object]:
    return {
        "id": property_id,
        "name": property_id,
        "label": label,
        "type": property_type,
        "required": required,
        "defaultValue": default_value,
        "group": group,
        "order": order,
    }


def _label_and_description(default_label: str) -> list[dict[str, object]]:
    return [
        _property("label", "Label", "text", default_label, "basic", 1, required=True),
        _property("description", "Description", "textarea", "", "basic", 2),
    ]


def _connections(max_in: int, max_out: int) -> dict[str, object]:
    return {"maxInputConnections": max_in, "maxOutputConnections": max_out}


BASE_NODE_DEFINITIONS: dict[BaseNodeType, BaseNodeDefinition] = {
    BaseNodeType.START: BaseNodeDefinition(
        type=BaseNodeType.START,
        category=CATEGORY_START,
        default_properties={"label": "Start", "description": "Start event"},
        connection_rules=_connections(0, 1),
        property_definitions=_label_and_description("Start"),
    ),
    BaseNodeType.END: BaseNodeDefinition(
        type=BaseNodeType.END,
        category=CATEGORY_END,
        default_properties={"label": "End", "description": "End event"},
        connection_rules=_connections(UNLIMITED_CONNECTIONS, 0),
        property_definitions=_label_and_description("End"),
    ),
    BaseNodeType.TASK: BaseNodeDefinition(
        type=BaseNodeType.TASK,
        category=CATEGORY_TASK,
        default_properties={
            "label": "Task",
            "description": "Generic task",
            "assignee": "",
            "priority": "medium",
        },
        connection_rules=_connections(UNLIMITED_CONNECTIONS, UNLIMITED_CONNECTIONS),
        property_definitions=[
            *_label_and_description("Task"),
            _property("assignee", "Assignee", "text", "", "config", 3),
            _property("priority", "Priority", "select", "medium", "config", 4),
        ],
    ),
    BaseNodeType.GATEWAY: BaseNodeDefinition(
        type=BaseNodeType.GATEWAY,
        category=CATEGORY_GATEWAY,
        default_properties={
            "label": "Gateway",
            "description": "Decision gateway",
            "gatewayType": "exclusive",
        },
        connection_rules=_connections(UNLIMITED_CONNECTIONS, UNLIMITED_CONNECTIONS),
        property_definitions=[
            *_label_and_description("Gateway"),
            _property(
                "gatewayType", "Gateway Type", "select", "exclusive", "config", 3, required=True
            ),
        ],
    ),
    BaseNodeType.EVENT: BaseNodeDefinition(
        type=BaseNodeType.EVENT,
        category=CATEGORY_OTHER,
        default_properties={
            "label": "Event",
            "description": "Intermediate event",
            "eventType": "message",
        },
        connection_rules=_connections(UNLIMITED_CONNECTIONS, UNLIMITED_CONNECTIONS),
        property_definitions=[
            *_label_and_description("Event"),
            _property("eventType", "Event Type", "select", "message", "config", 3, required=True),
        ],
    ),
    BaseNodeType.ANNOTATION: BaseNodeDefinition(
        type=BaseNodeType.ANNOTATION,
        category=CATEGORY_OTHER,
        default_properties={"label": "Annotation", "text": ""},
        connection_rules=_connections(0, 0),
        property_definitions=[_property("text", "Text", "textarea", "", "basic", 1)],
    ),
    BaseNodeType.POOL: BaseNodeDefinition(
        type=BaseNodeType.POOL,
        category=CATEGORY_OTHER,
        default_properties={"label": "Pool", "description": "Container for process elements"},
        connection_rules=_connections(0, 0),
        property_definitions=_label_and_description("Pool"),
    ),
    BaseNodeType.NOTE: BaseNodeDefinition(
        type=BaseNodeType.NOTE,
        category=CATEGORY_OTHER,
        default_properties={"label": "Note", "text": ""},
        connection_rules=_connections(0, 0),
        property_definitions=[_property("text", "Text", "textarea", "", "basic", 1)],
    ),
}


def is_base_node_type(node_type: object) -> bool:
    """Return ``True`` when *node_type* names one of the eight archetypes."""
    try:
        BaseNodeType(node_type)
    except ValueError:
        return False
    return True


def get_base_node_definition(node_type: BaseNodeType | str) -> BaseNodeDefinition | None:
    """Return a deep copy of the archetype definition, or ``None``."""
    if not is_base_node_type(node_type):
        return None
    return copy.deepcopy(BASE_NODE_DEFINITIONS[BaseNodeType(node_type)])


def get_all_base_node_types() -> list[BaseNodeType]:
    return list(BaseNodeType)
