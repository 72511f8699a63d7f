"""Tests for CustomNodeFactory."""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from bpm_workflow_core.config import EngineSettings
from bpm_workflow_core.core import WorkflowCore
from bpm_workflow_core.errors import ConfigValidationError, MenuDepthExceededError, TransportError
from bpm_workflow_core.factory.custom_node_factory import CustomNodeFactory
from bpm_workflow_core.factory.transport import fetch_json


@pytest.fixture()
def core() -> WorkflowCore:
    return WorkflowCore()


@pytest.fixture()
def factory(core: WorkflowCore) -> CustomNodeFactory:
    return core.node_factory


def _email_node(**extra: object) -> dict[str, object]:
    node: dict[str, object] = {
        "id": "sendEmailTask",
        "extends": "task",
        "name": {"en": "Send email", "de": "E-Mail senden"},
        "category": "messaging",
        "defaultProperties": {"priority": "high"},
        "properties": [
            {"id": "to", "name": "to", "label": "To", "type": "text", "group": "email", "order": 1,
             "validation": {"pattern": r"^[^@]+@[^@]+$", "message": "Invalid address"}},
            {"id": "retries", "name": "retries", "label": "Retries", "type": "number", "defaultValue": 2},
        ],
        "propertyGroups": [{"id": "email", "label": "Email", "order": 5}],
    }
    node.update(extra)
    return node


def _nested_menu(depth: int) -> list[dict[str, object]]:
    item: dict[str, object] = {"id": f"level-{depth}", "label": f"Level {depth}"}
    for level in range(depth - 1, 0, -1):
        item = {"id": f"level-{level}", "label": f"Level {level}", "submenu": [item]}
    return [item]


# ---------------------------------------------------------------------------
# validate_config
# ---------------------------------------------------------------------------


class TestValidateConfig:
    def test_valid_document(self, factory: CustomNodeFactory) -> None:
        result = factory.validate_config(_email_node())
        assert result.valid
        assert result.errors == []

    def test_missing_fields_are_aggregated(self, factory: CustomNodeFactory) -> None:
        result = factory.validate_config({"id": "x"})
        assert not result.valid
        assert "extends: Field required" in result.errors
        assert "name: Field required" in result.errors

    def test_unknown_archetype(self, factory: CustomNodeFactory) -> None:
        result = factory.validate_config({"id": "x", "extends": "subprocess", "name": "X"})
        assert result.errors[0].startswith("extends:")

    def test_empty_id(self, factory: CustomNodeFactory) -> None:
        result = factory.validate_config({"id": "", "extends": "task", "name": "X"})
        assert any("Node ID is required" in error for error in result.errors)

    def test_multilingual_map_requires_english(self, factory: CustomNodeFactory) -> None:
        result = factory.validate_config({"id": "x", "extends": "task", "name": {"de": "X"}})
        assert not result.valid
        assert result.errors[0].startswith("name:")

    def test_nested_paths(self, factory: CustomNodeFactory) -> None:
        result = factory.validate_config(
            {"id": "x", "extends": "task", "name": "X", "properties": [{"id": "a", "name": "a", "label": "A", "type": "weird"}]}
        )
        assert result.errors[0].startswith("properties.0.type:")


# ---------------------------------------------------------------------------
# register_from_config
# ---------------------------------------------------------------------------


class TestRegisterFromConfig:
    def test_registers_inherited_node(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        factory.register_from_config(_email_node())
        item = core.node_registry.get("sendEmailTask")
        assert item is not None
        assert item.category == "messaging"
        config = item.config
        assert config["nodeType"] == "sendEmailTask"
        assert config["metadata"]["title"] == {"en": "Send email", "de": "E-Mail senden"}  # type: ignore[index]
        assert config["properties"]["priority"] == "high"  # type: ignore[index]
        assert config["properties"]["assignee"] == ""  # type: ignore[index]
        ids = [definition["id"] for definition in config["propertyDefinitions"]]  # type: ignore[union-attr]
        assert ids == ["label", "description", "assignee", "priority", "to", "retries"]

    def test_property_groups(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        factory.register_from_config(_email_node())
        groups = core.property_registry.get_node_property_groups("sendEmailTask")
        assert [(group.id, group.order) for group in groups] == [
            ("basic", 1),
            ("email", 5),
            ("custom", 90),
        ]
        custom = next(group for group in groups if group.id == "custom")
        assert custom.fields[0].default_value == 2
        assert core.property_registry.get_default_node_properties("sendEmailTask")["retries"] == 2

    def test_property_validation_rules(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        factory.register_from_config(_email_node())
        groups = core.property_registry.get_node_property_groups("sendEmailTask")
        to_field = next(group for group in groups if group.id == "email").fields[0]
        node = core.node_registry.create_node("sendEmailTask", {"id": "n1"})
        assert node is not None

        result = core.sync_engine.sync_property(node, "to", "nope", to_field)
        assert not result.valid
        assert result.errors[0].message == "Invalid address"
        assert core.sync_engine.sync_property(node, "to", "a@b", to_field).valid

    def test_invalid_document_raises_aggregated_error(self, factory: CustomNodeFactory) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            factory.register_from_config({"id": "x"})
        assert str(exc_info.value).startswith("Invalid node configuration:")
        assert len(exc_info.value.errors) == 2

    def test_invalid_document_registers_nothing(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        with pytest.raises(ConfigValidationError):
            factory.register_from_config(
                _email_node(contextMenuItems=[{"id": "bad", "label": {"fr": "x"}}])
            )
        assert not core.node_registry.has("sendEmailTask")

    def test_node_without_declared_properties(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        factory.register_from_config({"id": "memo", "extends": "note", "name": "Memo"})
        assert not core.property_registry.has_node_config("memo")
        groups = core.property_registry.get_node_property_groups("memo")
        assert [field.id for field in groups[0].fields] == ["id", "label", "description"]
        config = core.node_registry.get_config("memo")
        assert [definition["id"] for definition in config["propertyDefinitions"]] == ["text"]  # type: ignore[index]

    def test_inherited_definitions_keep_base_label_validation(
        self, core: WorkflowCore, factory: CustomNodeFactory
    ) -> None:
        factory.register_from_config(
            _email_node(
                properties=[{"id": "to", "name": "to", "label": "To", "type": "text", "group": "basic", "order": 3}]
            )
        )
        (basic,) = core.property_registry.get_node_property_groups("sendEmailTask")
        assert [field.id for field in basic.fields] == ["id", "label", "description", "to"]
        label = basic.fields[1]
        assert label.order == 2
        assert label.validation is not None

        result = core.sync_engine.validate_entity({"id": "n1", "properties": {"label": ""}}, [basic])
        assert not result.valid
        assert result.errors[0].field == "label"

    def test_group_conversion_failure_registers_nothing(
        self, core: WorkflowCore, factory: CustomNodeFactory
    ) -> None:
        with patch.object(CustomNodeFactory, "_convert_property_groups", side_effect=ValueError("bad rules")):
            with pytest.raises(ConfigValidationError, match="bad rules"):
                factory.register_from_config(_email_node())
        assert not core.node_registry.has("sendEmailTask")
        assert not core.property_registry.has_node_config("sendEmailTask")


# ---------------------------------------------------------------------------
# Context menus
# ---------------------------------------------------------------------------


class TestContextMenus:
    def test_menu_scoped_to_node_type(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        factory.register_from_config(
            _email_node(
                contextMenuItems=[{"id": "send-now", "label": "Send now", "icon": "send"}],
                disableDefaultContextMenu=["duplicate"],
            )
        )
        menu = core.context_menu_registry.get_config("sendEmailTask-context-menu")
        assert menu is not None
        assert menu.target_node_types == ["sendEmailTask"]
        assert menu.disable_default_items == ["duplicate"]
        assert menu.name == "Send email Context Menu"
        assert [item.id for item in core.context_menu_registry.get_node_context_menu("sendEmailTask")] == [
            "send-now"
        ]
        assert core.context_menu_registry.get_node_context_menu("userTask") == []

    @pytest.mark.asyncio
    async def test_event_action_emits(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        listener = MagicMock()
        core.event_bus.on("email:send", listener)
        factory.register_from_config(
            _email_node(
                contextMenuItems=[
                    {
                        "id": "send-now",
                        "label": "Send now",
                        "action": {"type": "event", "event": "email:send", "payload": {"urgent": True}},
                    }
                ]
            )
        )
        context = {"node": {"id": "n1"}}
        assert await core.context_menu_registry.execute_action("send-now", context) is True
        assert listener.call_args.args[0].payload == {"context": context, "payload": {"urgent": True}}

    @pytest.mark.asyncio
    async def test_function_action_uses_actions_registry(
        self, core: WorkflowCore, factory: CustomNodeFactory
    ) -> None:
        archive = MagicMock()
        core.actions_registry.register_actions(archive=archive)
        factory.register_from_config(
            _email_node(
                contextMenuItems=[
                    {
                        "id": "more",
                        "label": "More",
                        "submenu": [
                            {"id": "archive", "label": "Archive", "action": {"type": "function", "function": "archive"}}
                        ],
                    }
                ]
            )
        )
        await core.context_menu_registry.execute_action("archive", {"node": {"id": "n1"}})
        archive.assert_called_once_with({"node": {"id": "n1"}})
        item = core.context_menu_registry.find_menu_item(
            core.context_menu_registry.get_node_context_menu("sendEmailTask"), "archive"
        )
        assert item is not None
        assert item.action_name == "archive"

    def test_condition_controls_visibility(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        factory.register_from_config(
            _email_node(
                contextMenuItems=[
                    {
                        "id": "resend",
                        "label": "Resend",
                        "condition": {"field": "status", "operator": "equals", "value": "failed"},
                    }
                ]
            )
        )
        menus = core.context_menu_registry
        failed = {"node": {"properties": {"status": "failed"}}}
        sent = {"node": {"properties": {"status": "sent"}}}
        assert [item.id for item in menus.get_node_context_menu("sendEmailTask", failed)] == ["resend"]
        assert menus.get_node_context_menu("sendEmailTask", sent) == []

    def test_submenu_depth_guard(self) -> None:
        core = WorkflowCore(EngineSettings(max_menu_depth=2))
        with pytest.raises(MenuDepthExceededError) as exc_info:
            core.node_factory.register_from_config(_email_node(contextMenuItems=_nested_menu(3)))
        assert exc_info.value.item_id == "level-3"
        assert not core.node_registry.has("sendEmailTask")

        core.node_factory.register_from_config(_email_node(contextMenuItems=_nested_menu(2)))
        assert core.node_registry.has("sendEmailTask")


# ---------------------------------------------------------------------------
# Event triggers and hooks
# ---------------------------------------------------------------------------


class TestEventWiring:
    def test_emit_trigger_with_condition(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        listener = MagicMock()
        core.event_bus.on("email:ready", listener)
        factory.register_from_config(
            _email_node(
                eventTriggers=[
                    {
                        "on": "property:changed",
                        "action": "emit",
                        "event": "email:ready",
                        "payload": {"channel": "smtp"},
                        "condition": {"property": "to", "operator": "notEquals", "value": ""},
                    }
                ]
            )
        )
        core.event_bus.emit("property:changed", {"node": {"properties": {"to": ""}}})
        core.event_bus.emit("property:changed", {"nodeId": "n1"})
        listener.assert_not_called()

        core.event_bus.emit("property:changed", {"node": {"properties": {"to": "a@b"}}})
        assert listener.call_args.args[0].payload == {"channel": "smtp"}

    def test_call_trigger(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        notify = MagicMock()
        core.actions_registry.register_actions(notify=notify)
        factory.register_from_config(
            _email_node(eventTriggers=[{"on": "node:deleted", "action": "call", "function": "notify"}])
        )
        core.event_bus.emit("node:deleted", {"node": {"id": "n1"}})
        assert notify.call_args.args[0].type == "node:deleted"

    def test_hooks_filtered_to_node_type(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        created = MagicMock()
        changed = MagicMock()
        core.event_bus.on("email:created", created)
        core.event_bus.on("email:changed", changed)
        factory.register_from_config(
            _email_node(hooks={"onCreated": "email:created", "onPropertyChanged": "email:changed"})
        )

        node = core.node_registry.create_node("sendEmailTask", {"id": "n1"})
        core.event_bus.emit("node:created", {"node": {"id": "x", "type": "userTask"}})
        core.event_bus.emit("node:created", {"node": node})
        core.event_bus.emit("property:changed", {"node": node, "propertyId": "to", "value": "a@b"})

        assert created.call_count == 1
        assert created.call_args.args[0].payload == {"node": node}
        assert changed.call_args.args[0].payload["propertyId"] == "to"

    def test_reregistering_replaces_subscriptions(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        created = MagicMock()
        core.event_bus.on("email:created", created)
        factory.register_from_config(_email_node(hooks={"onCreated": "email:created"}))
        factory.register_from_config(_email_node(hooks={"onCreated": "email:created"}))
        core.event_bus.emit("node:created", {"node": {"type": "sendEmailTask"}})
        assert created.call_count == 1

    def test_unregister_removes_everything(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        created = MagicMock()
        core.event_bus.on("email:created", created)
        factory.register_from_config(
            _email_node(
                hooks={"onCreated": "email:created"},
                contextMenuItems=[{"id": "send-now", "label": "Send now"}],
            )
        )
        assert factory.unregister("sendEmailTask") is True

        core.event_bus.emit("node:created", {"node": {"type": "sendEmailTask"}})
        created.assert_not_called()
        assert not core.node_registry.has("sendEmailTask")
        assert not core.property_registry.has_node_config("sendEmailTask")
        assert not core.context_menu_registry.has("sendEmailTask-context-menu")
        assert factory.unregister("sendEmailTask") is False


# ---------------------------------------------------------------------------
# Batch loading
# ---------------------------------------------------------------------------


class TestBatchLoading:
    def test_register_many_tallies_failures(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        result = factory.register_many(
            [_email_node(), {"id": "broken", "extends": "nope", "name": "Broken"}, 42]
        )
        assert result.success == 1
        assert result.failed == 2
        assert [error.node_id for error in result.errors] == ["broken", "unknown"]
        assert core.node_registry.has("sendEmailTask")

    def test_malformed_pattern_fails_one_node_only(self, core: WorkflowCore, factory: CustomNodeFactory) -> None:
        bad_pattern = {
            "id": "badPatternTask",
            "extends": "task",
            "name": "Bad pattern",
            "properties": [
                {"id": "code", "name": "code", "label": "Code", "type": "text", "validation": {"pattern": "("}},
            ],
        }
        assert not factory.validate_config(bad_pattern).valid

        result = factory.register_many([bad_pattern, _email_node()])

        assert (result.success, result.failed) == (1, 1)
        assert result.errors[0].node_id == "badPatternTask"
        assert "Invalid regular expression" in result.errors[0].error
        assert not core.node_registry.has("badPatternTask")
        assert core.node_registry.has("sendEmailTask")

    def test_load_from_json(self, factory: CustomNodeFactory) -> None:
        result = factory.load_from_json(json.dumps([_email_node()]))
        assert (result.success, result.failed) == (1, 0)

    def test_load_from_json_parse_error(self, factory: CustomNodeFactory) -> None:
        result = factory.load_from_json("[{not json")
        assert result.failed == 1
        assert result.errors[0].node_id == "unknown"

    def test_load_from_json_requires_array(self, factory: CustomNodeFactory) -> None:
        result = factory.load_from_json(json.dumps(_email_node()))
        assert result.errors[0].error == "JSON must be an array of node configurations"

    @pytest.mark.asyncio
    async def test_load_from_url(self, factory: CustomNodeFactory) -> None:
        fetch = AsyncMock(return_value=[_email_node()])
        with patch("bpm_workflow_core.factory.custom_node_factory.fetch_json", fetch):
            result = await factory.load_from_url("https://plugins.example.com/nodes.json")
        assert result.success == 1
        fetch.assert_awaited_once_with("https://plugins.example.com/nodes.json", 30.0)

    @pytest.mark.asyncio
    async def test_load_from_url_network_failure(self, factory: CustomNodeFactory) -> None:
        fetch = AsyncMock(side_effect=TransportError("https://x", "Failed to fetch: 404 Not Found"))
        with patch("bpm_workflow_core.factory.custom_node_factory.fetch_json", fetch):
            result = await factory.load_from_url("https://x")
        assert (result.success, result.failed) == (0, 1)
        assert result.errors[0].error == "Failed to fetch: 404 Not Found"


class TestFetchJson:
    @pytest.mark.asyncio
    async def test_client_error_becomes_transport_error(self) -> None:
        session_factory = MagicMock(side_effect=aiohttp.ClientConnectionError("connection refused"))
        with patch("bpm_workflow_core.factory.transport.aiohttp.ClientSession", session_factory):
            with pytest.raises(TransportError) as exc_info:
                await fetch_json("https://plugins.example.com/nodes.json")
        assert exc_info.value.url == "https://plugins.example.com/nodes.json"
        assert "connection refused" in str(exc_info.value)
