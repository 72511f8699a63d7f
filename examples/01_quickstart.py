#!/usr/bin/env python3
"""Example: Quickstart for bpm-workflow-core

Minimal working example: declare a custom task type, create a node from
it, and edit one of its properties.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install bpm-workflow-core
"""
from __future__ import annotations

import bpm_workflow_core as bpm


def main() -> None:
    print(f"bpm-workflow-core version: {bpm.__version__}")

    # Step 1: Build the engine and register a custom node type
    core = bpm.WorkflowCore()
    core.node_factory.register_from_config(
        {
            "id": "reviewTask",
            "extends": "task",
            "name": {"en": "Review", "de": "Prüfung"},
            "properties": [
                {"id": "reviewer", "name": "reviewer", "label": "Reviewer", "type": "text",
                 "group": "basic", "order": 3, "required": True,
                 "validation": {"minLength": 2, "message": "Reviewer is required"}},
            ],
        }
    )
    print(f"Registered node types: {[item.id for item in core.node_registry]}")

    # Step 2: Create a node instance
    node = core.node_registry.create_node("reviewTask", {"id": "review-1"})
    print(f"\nCreated node {node['id']} with properties {node['properties']}")

    # Step 3: Show the property panel layout
    groups = core.property_registry.get_node_property_groups("reviewTask")
    print("\nProperty groups:")
    for group in groups:
        print(f"  {group.id} (order {group.order}): {[field.id for field in group.fields]}")

    # Step 4: Edit a property
    fields = {field.id: field for group in groups for field in group.fields}
    for value in ("x", "alice"):
        result = core.sync_engine.sync_property(node, "reviewer", value, fields["reviewer"])
        status = "OK" if result.valid else "REJECTED"
        print(f"  [{status}] reviewer={value!r}")


if __name__ == "__main__":
    main()
