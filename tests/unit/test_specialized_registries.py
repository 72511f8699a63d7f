"""Tests for node, edge, rule, theme, category and action registries."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.registry.actions import ContextMenuActionsRegistry
from bpm_workflow_core.registry.base import RegistryItem
from bpm_workflow_core.registry.categories import CategoryConfig, CategoryRegistry
from bpm_workflow_core.registry.edges import EdgeRegistry
from bpm_workflow_core.registry.nodes import NodeRegistry
from bpm_workflow_core.registry.rules import RuleConfig, RuleRegistry
from bpm_workflow_core.registry.themes import ThemeConfig, ThemeRegistry


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


# ---------------------------------------------------------------------------
# NodeRegistry
# ---------------------------------------------------------------------------


class TestNodeRegistry:
    @pytest.fixture()
    def nodes(self, bus: EventBus) -> NodeRegistry:
        registry = NodeRegistry(bus)
        registry.register(
            RegistryItem(
                id="approval",
                type="approval",
                name="Approval",
                config={
                    "nodeType": "approval",
                    "metadata": {"title": "Approve", "version": "1.0.0"},
                    "properties": {"priority": "normal"},
                    "renderer": "ApprovalNode",
                    "propertyDefinitions": [
                        {"id": "label", "label": "Label", "required": True},
                    ],
                },
            )
        )
        return registry

    def test_get_renderer(self, nodes: NodeRegistry) -> None:
        assert nodes.get_renderer("approval") == "ApprovalNode"
        assert nodes.get_renderer("missing") is None

    def test_create_node_merges_overrides(self, nodes: NodeRegistry) -> None:
        node = nodes.create_node(
            "approval",
            {"id": "n1", "position": {"x": 10, "y": 20}, "properties": {"assignee": "kim"}},
        )
        assert node is not None
        assert node["id"] == "n1"
        assert node["position"] == {"x": 10, "y": 20}
        assert node["properties"] == {"priority": "normal", "assignee": "kim", "label": "Approve"}
        assert node["data"]["label"] == "Approve"  # type: ignore[index]
        assert node["metadata"]["version"] == "1.0.0"  # type: ignore[index]

    def test_create_node_generates_id(self, nodes: NodeRegistry) -> None:
        node = nodes.create_node("approval")
        assert node is not None
        assert str(node["id"]).startswith("approval-")

    def test_create_node_unknown_type(self, nodes: NodeRegistry) -> None:
        assert nodes.create_node("missing") is None

    def test_validate_node_reports_missing_required_property(self, nodes: NodeRegistry) -> None:
        node = nodes.create_node("approval", {"id": "n1"})
        assert node is not None
        node["properties"] = {}
        result = nodes.validate_node(node)
        assert result == {"valid": False, "errors": ["Property 'Label' is required"]}

    def test_validate_node_unregistered_type(self, nodes: NodeRegistry) -> None:
        result = nodes.validate_node({"id": "x", "nodeType": "ghost"})
        assert result["errors"] == ["Node type 'ghost' is not registered"]


# ---------------------------------------------------------------------------
# EdgeRegistry
# ---------------------------------------------------------------------------


class TestEdgeRegistry:
    def test_create_and_validate_edge(self, bus: EventBus) -> None:
        edges = EdgeRegistry(bus)
        edges.register(
            RegistryItem(id="sequence", type="sequence", name="Sequence", config={"edgeType": "sequence"})
        )
        edge = edges.create_edge("sequence", "a", "b", {"properties": {"label": "yes"}})
        assert edge is not None
        assert edge["source"] == "a"
        assert edge["target"] == "b"
        assert edge["properties"] == {"label": "yes"}
        assert edges.validate_edge(edge) == {"valid": True, "errors": []}

    def test_unknown_edge_type(self, bus: EventBus) -> None:
        assert EdgeRegistry(bus).create_edge("ghost", "a", "b") is None


# ---------------------------------------------------------------------------
# RuleRegistry
# ---------------------------------------------------------------------------


class TestRuleRegistry:
    @pytest.fixture()
    def rules(self, bus: EventBus) -> RuleRegistry:
        return RuleRegistry(bus)

    def _add(self, rules: RuleRegistry, config: RuleConfig) -> None:
        rules.register(RegistryItem(id=config.id, type=config.type, name=config.name, config=config))

    @pytest.mark.asyncio
    async def test_missing_rule_passes(self, rules: RuleRegistry) -> None:
        assert await rules.execute_rule("missing", {}) is True

    @pytest.mark.asyncio
    async def test_async_action_is_awaited(self, rules: RuleRegistry) -> None:
        action = AsyncMock()
        self._add(rules, RuleConfig(id="r1", name="R1", action=action))
        assert await rules.execute_rule("r1", {"x": 1}) is True
        action.assert_awaited_once_with({"x": 1})

    @pytest.mark.asyncio
    async def test_false_condition_skips_action(self, rules: RuleRegistry) -> None:
        action = MagicMock()
        self._add(rules, RuleConfig(id="r1", name="R1", condition=lambda ctx: False, action=action))
        assert await rules.execute_rule("r1", {}) is True
        action.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_action_returns_false(self, rules: RuleRegistry) -> None:
        self._add(rules, RuleConfig(id="r1", name="R1", action=MagicMock(side_effect=ValueError("no"))))
        self._add(rules, RuleConfig(id="r2", name="R2", enabled=False))
        assert await rules.execute_rules(["r1", "r2"], {}) == [False, True]

    def test_rules_by_scope_sorted_by_priority(self, rules: RuleRegistry) -> None:
        self._add(rules, RuleConfig(id="late", name="Late", scope="node", priority=5))
        self._add(rules, RuleConfig(id="early", name="Early", scope="node", priority=1))
        self._add(rules, RuleConfig(id="other", name="Other", scope="edge"))
        assert [rule.id for rule in rules.get_rules_by_scope("node")] == ["early", "late"]


# ---------------------------------------------------------------------------
# ThemeRegistry
# ---------------------------------------------------------------------------


class TestThemeRegistry:
    def test_current_theme_only_changes_to_registered_ids(self, bus: EventBus) -> None:
        themes = ThemeRegistry(bus)
        themes.register(
            RegistryItem(id="dark", type="theme", name="Dark", config=ThemeConfig(name="Dark", colors={"bg": "#000"}))
        )
        assert themes.current_theme_id == "default"
        assert themes.set_current_theme("neon") is False
        assert themes.set_current_theme("dark") is True
        assert themes.get_color("bg") == "#000"
        assert themes.get_style() is None


# ---------------------------------------------------------------------------
# CategoryRegistry
# ---------------------------------------------------------------------------


class TestCategoryRegistry:
    def test_sorted_with_unordered_last(self, bus: EventBus) -> None:
        categories = CategoryRegistry(bus)
        for category_id, order in (("misc", None), ("events", 2), ("tasks", 1)):
            categories.register(
                RegistryItem(
                    id=category_id,
                    type=category_id,
                    name=category_id,
                    config=CategoryConfig(id=category_id, name=category_id, category_type=category_id, order=order),
                )
            )
        assert [item.id for item in categories.get_all_sorted()] == ["tasks", "events", "misc"]
        assert categories.has_category_type("events")
        assert categories.get_by_category_type("ghost") is None


# ---------------------------------------------------------------------------
# ContextMenuActionsRegistry
# ---------------------------------------------------------------------------


class TestActionsRegistry:
    def test_register_merges_and_later_wins(self) -> None:
        actions = ContextMenuActionsRegistry()
        first, second, third = MagicMock(), MagicMock(), MagicMock()
        actions.register_actions(select=first, delete=second)
        actions.register_actions(delete=third)
        assert actions.get_action("delete") is third
        assert actions.get_action("select") is first
        assert "select" in actions
        assert len(actions) == 2

    def test_clear_actions(self) -> None:
        actions = ContextMenuActionsRegistry()
        actions.register_actions(select=MagicMock())
        actions.clear_actions()
        assert actions.get_actions() == {}
        assert actions.get_action("select") is None
