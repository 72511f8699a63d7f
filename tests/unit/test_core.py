"""Tests for the WorkflowCore service container."""
from __future__ import annotations

import pytest

from bpm_workflow_core.config import EngineSettings
from bpm_workflow_core.core import WorkflowCore


class TestWiring:
    def test_services_share_one_bus(self) -> None:
        core = WorkflowCore()
        assert core.node_registry._event_bus is core.event_bus
        assert core.context_menu_registry._event_bus is core.event_bus

    def test_instances_are_isolated(self) -> None:
        first = WorkflowCore()
        second = WorkflowCore()
        first.node_factory.register_from_config({"id": "review", "extends": "task", "name": "Review"})
        assert first.node_registry.has("review")
        assert not second.node_registry.has("review")

    def test_base_groups_installed_by_default(self) -> None:
        groups = WorkflowCore().property_registry.get_node_property_groups("anything")
        assert [group.id for group in groups] == ["basic"]

    def test_base_groups_can_be_skipped(self) -> None:
        core = WorkflowCore(EngineSettings(install_base_property_groups=False))
        assert core.property_registry.get_node_property_groups("anything") == []
        assert core.property_registry.get_edge_property_groups("anything") == []


class TestDebugSnapshot:
    @pytest.mark.asyncio
    async def test_snapshot_lists_ids(self) -> None:
        core = WorkflowCore()
        plugin = core.plugin_loader.load_plugin(
            {
                "metadata": {"id": "email-plugin", "name": "Email"},
                "categories": [{"id": "messaging", "name": "Messaging"}],
                "nodes": [
                    {
                        "id": "sendEmailTask",
                        "extends": "task",
                        "name": "Send email",
                        "properties": [{"id": "to", "name": "to", "label": "To", "type": "text"}],
                        "contextMenuItems": [{"id": "send-now", "label": "Send now"}],
                    }
                ],
            }
        )
        await core.plugin_manager.install(plugin)
        await core.plugin_manager.activate(plugin.id)

        snapshot = core.debug_snapshot()
        assert snapshot["NodeRegistry"] == ["sendEmailTask"]
        assert snapshot["CategoryRegistry"] == ["messaging"]
        assert snapshot["ContextMenuRegistry"] == ["sendEmailTask-context-menu"]
        assert snapshot["EdgeRegistry"] == []
        assert snapshot["plugins"] == ["email-plugin"]
        assert snapshot["properties"] == ["sendEmailTask"]
        assert repr(core) == "WorkflowCore(nodes=1, plugins=1)"
