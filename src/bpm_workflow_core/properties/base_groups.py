"""Property groups applied to every node type and every edge type."""
from __future__ import annotations

from bpm_workflow_core.properties.types import PropertyFieldDefinition, PropertyGroupDefinition
from bpm_workflow_core.properties.validation import RuleValidator, optional_text


def base_node_property_groups() -> list[PropertyGroupDefinition]:
    """Return fresh copies of the groups shared by all nodes."""
    return [
        PropertyGroupDefinition(
            id="basic",
            label="Basic",
            description="Basic node properties",
            icon="settings-2",
            order=1,
            fields=[
                PropertyFieldDefinition(
                    id="id",
                    label="ID",
                    type="text",
                    readonly=True,
                    help_text="Unique identifier for this node",
                    order=1,
                ),
                PropertyFieldDefinition(
                    id="label",
                    label="Label",
                    type="text",
                    required=True,
                    placeholder="",
                    help_text="Display name for this node",
                    validation=RuleValidator({"minLength": 1, "message": "Label is required"}),
                    order=2,
                ),
                PropertyFieldDefinition(
                    id="description",
                    label="Description",
                    type="textarea",
                    placeholder="",
                    help_text="Optional description for this node",
                    validation=optional_text(),
                    order=3,
                ),
            ],
        )
    ]


def base_edge_property_groups() -> list[PropertyGroupDefinition]:
    """Return fresh copies of the groups shared by all edges."""
    return [
        PropertyGroupDefinition(
            id="basic",
            label="Basic",
            description="Basic edge properties",
            icon="settings-2",
            order=1,
            fields=[
                PropertyFieldDefinition(
                    id="id",
                    label="ID",
                    readonly=True,
                    help_text="Unique identifier for this edge",
                    order=1,
                ),
                PropertyFieldDefinition(
                    id="source",
                    label="Source Node",
                    readonly=True,
                    help_text="Source node ID",
                    order=2,
                ),
                PropertyFieldDefinition(
                    id="target",
                    label="Target Node",
                    readonly=True,
                    help_text="Target node ID",
                    order=3,
                ),
            ],
        ),
        PropertyGroupDefinition(
            id="labels",
            label="Labels",
            description="Edge label settings",
            icon="info",
            order=2,
            fields=[
                PropertyFieldDefinition(
                    id="start-label",
                    label="Start Label",
                    placeholder="",
                    help_text="Label at the start of the edge",
                    order=1,
                ),
                PropertyFieldDefinition(
                    id="center-label",
                    label="Center Label",
                    placeholder="",
                    help_text="Label at the center of the edge",
                    order=2,
                ),
                PropertyFieldDefinition(
                    id="end-label",
                    label="End Label",
                    placeholder="",
                    help_text="Label at the end of the edge",
                    order=3,
                ),
            ],
        ),
    ]
