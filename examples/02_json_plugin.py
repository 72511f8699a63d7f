#!/usr/bin/env python3
"""Example: JSON plugins for bpm-workflow-core

Loads a plugin document, installs and activates it, runs a context menu
action, then deactivates the plugin again.

Usage:
    python examples/02_json_plugin.py

Requirements:
    pip install bpm-workflow-core
"""
from __future__ import annotations

import asyncio
import json

import bpm_workflow_core as bpm

PLUGIN = {
    "metadata": {"id": "email-plugin", "name": "Email", "version": "1.2.0"},
    "categories": [{"id": "messaging", "name": "Messaging", "order": 3}],
    "nodes": [
        {
            "id": "sendEmailTask",
            "extends": "task",
            "name": "Send email",
            "category": "messaging",
            "properties": [
                {"id": "to", "name": "to", "label": "To", "type": "text", "group": "basic", "order": 3},
                {"id": "subject", "name": "subject", "label": "Subject", "type": "text", "group": "basic", "order": 4},
            ],
            "contextMenuItems": [
                {"id": "send-now", "label": "Send now", "action": {"type": "event", "event": "email:send"}},
            ],
        }
    ],
}


async def main() -> None:
    core = bpm.WorkflowCore()
    core.event_bus.on("email:send", lambda event: print(f"  email:send fired with {event.payload}"))

    # Step 1: Validate and load the document
    result = core.plugin_loader.validate_plugin(PLUGIN)
    print(f"Plugin document valid: {result.valid}")
    plugin = core.plugin_loader.load_plugin_from_json(json.dumps(PLUGIN))

    # Step 2: Install and activate
    await core.plugin_manager.install(plugin)
    await core.plugin_manager.activate(plugin.id)
    print(f"Snapshot after activation: {core.debug_snapshot()}")

    # Step 3: Use the node's context menu
    menu = core.context_menu_registry.get_node_context_menu("sendEmailTask")
    print(f"Menu items: {[item.id for item in menu]}")
    await core.context_menu_registry.execute_action("send-now", {"nodeId": "email-1"})

    # Step 4: Deactivate
    await core.plugin_manager.deactivate(plugin.id)
    print(f"Node still registered: {core.node_registry.has('sendEmailTask')}")


if __name__ == "__main__":
    asyncio.run(main())
