"""Tests for PropertyConfigurationRegistry and property definition conversion."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from bpm_workflow_core.properties.base_groups import base_edge_property_groups, base_node_property_groups
from bpm_workflow_core.properties.configuration import (
    PropertyConfigurationRegistry,
    convert_property_definitions_to_groups,
    field_from_property_definition,
    merge_fields,
    merge_property_groups,
)
from bpm_workflow_core.properties.types import UNSET, PropertyFieldDefinition, PropertyGroupDefinition
from bpm_workflow_core.properties.validation import RuleValidator


@pytest.fixture()
def registry() -> PropertyConfigurationRegistry:
    registry = PropertyConfigurationRegistry()
    registry.set_base_node_groups(base_node_property_groups())
    registry.set_base_edge_groups(base_edge_property_groups())
    return registry


def _group(group_id: str, order: int, *fields: PropertyFieldDefinition, **kwargs: object) -> PropertyGroupDefinition:
    return PropertyGroupDefinition(id=group_id, label=group_id.title(), order=order, fields=list(fields), **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_unconfigured_type_gets_base_groups(self, registry: PropertyConfigurationRegistry) -> None:
        groups = registry.get_node_property_groups("userTask")
        assert [group.id for group in groups] == ["basic"]
        assert [f.id for f in groups[0].fields] == ["id", "label", "description"]

    def test_custom_group_sorted_after_basic(self, registry: PropertyConfigurationRegistry) -> None:
        registry.register_node_config(
            "sendEmailTask",
            [_group("email", 10, PropertyFieldDefinition(id="to", label="To", order=1))],
        )
        groups = registry.get_node_property_groups("sendEmailTask")
        assert [group.id for group in groups] == ["basic", "email"]
        assert registry.has_node_config("sendEmailTask")
        assert registry.get_registered_node_types() == ["sendEmailTask"]

    def test_same_group_id_merges_fields(self, registry: PropertyConfigurationRegistry) -> None:
        registry.register_node_config(
            "sendEmailTask",
            [
                _group(
                    "basic",
                    1,
                    PropertyFieldDefinition(id="label", label="Subject line", order=2),
                    PropertyFieldDefinition(id="cc", label="CC", order=5),
                    description="Email basics",
                )
            ],
        )
        (basic,) = registry.get_node_property_groups("sendEmailTask")
        assert [f.id for f in basic.fields] == ["id", "label", "description", "cc"]
        label = next(f for f in basic.fields if f.id == "label")
        assert label.label == "Subject line"
        assert label.validation is None
        assert basic.description == "Email basics"

    def test_base_group_factories_return_fresh_copies(self) -> None:
        import bpm_workflow_core.properties as properties

        first, second = base_node_property_groups(), base_node_property_groups()
        first[0].fields.clear()
        assert [f.id for f in second[0].fields] == ["id", "label", "description"]
        assert base_edge_property_groups()[0] is not base_edge_property_groups()[0]
        assert not hasattr(properties, "BASE_NODE_PROPERTY_GROUPS")

    def test_base_groups_are_not_mutated(self, registry: PropertyConfigurationRegistry) -> None:
        registry.register_node_config(
            "x", [_group("basic", 1, PropertyFieldDefinition(id="extra", label="Extra"))]
        )
        registry.get_node_property_groups("x")
        assert [f.id for f in registry.get_node_property_groups("y")[0].fields] == ["id", "label", "description"]

    def test_unregister(self, registry: PropertyConfigurationRegistry) -> None:
        registry.register_node_config("x", [])
        assert registry.unregister_node_config("x") is True
        assert registry.unregister_node_config("x") is False

    def test_register_many_and_edges(self, registry: PropertyConfigurationRegistry) -> None:
        registry.register_node_configs({"a": [], "b": []})
        registry.register_edge_config("conditional", [_group("condition", 3)])
        assert registry.get_registered_node_types() == ["a", "b"]
        assert [g.id for g in registry.get_edge_property_groups("conditional")] == [
            "basic",
            "labels",
            "condition",
        ]
        assert registry.has_edge_config("conditional")
        assert registry.unregister_edge_config("conditional") is True

    def test_default_properties_skip_unset(self, registry: PropertyConfigurationRegistry) -> None:
        registry.register_node_config(
            "x",
            [
                _group(
                    "config",
                    5,
                    PropertyFieldDefinition(id="retries", label="Retries", default_value=3),
                    PropertyFieldDefinition(id="note", label="Note", default_value=None),
                    PropertyFieldDefinition(id="owner", label="Owner"),
                )
            ],
        )
        assert registry.get_default_node_properties("x") == {"retries": 3, "note": None}

    def test_clear(self, registry: PropertyConfigurationRegistry) -> None:
        registry.register_node_config("x", [])
        registry.clear()
        assert registry.get_node_property_groups("x") == []
        assert registry.get_edge_property_groups("x") == []


# ---------------------------------------------------------------------------
# Merge helpers
# ---------------------------------------------------------------------------


class TestMergeHelpers:
    def test_custom_field_sorts_ahead_of_replaced_label(self) -> None:
        base = [_group("basic", 1, PropertyFieldDefinition(id="label", label="Label", required=True, order=2))]
        custom = [
            _group(
                "basic",
                1,
                PropertyFieldDefinition(id="label", label="Label", required=False, order=2),
                PropertyFieldDefinition(id="custom1", label="Custom 1", order=1),
            )
        ]

        (basic,) = merge_property_groups(base, custom)

        assert [f.id for f in basic.fields] == ["custom1", "label"]
        label = basic.fields[1]
        assert label.required is False
        assert label is not custom[0].fields[0]

    def test_fields_without_order_sort_last(self) -> None:
        merged = merge_fields(
            [PropertyFieldDefinition(id="b", label="B", order=None)],
            [PropertyFieldDefinition(id="a", label="A", order=3)],
        )
        assert [f.id for f in merged] == ["a", "b"]

    def test_groups_sorted_by_order(self) -> None:
        merged = merge_property_groups([_group("z", 5)], [_group("a", 9), _group("m", 1)])
        assert [g.id for g in merged] == ["m", "z", "a"]


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


class TestConversion:
    def test_field_from_definition(self) -> None:
        field = field_from_property_definition(
            {
                "id": "priority",
                "label": {"en": "Priority"},
                "type": "select",
                "description": "How urgent",
                "options": [{"label": "High", "value": "high"}],
                "defaultValue": "high",
                "order": 4,
            },
            "config",
        )
        assert field.help_text == "How urgent"
        assert field.options == {"options": [{"label": "High", "value": "high"}]}
        assert field.default_value == "high"
        assert field.order == 4
        assert field.group == "config"

    def test_missing_default_is_unset(self) -> None:
        field = field_from_property_definition({"id": "to", "label": "To"}, "custom")
        assert field.default_value is UNSET
        assert not field.has_default
        assert field.order == 0

    def test_validation_rules_become_rule_validator(self) -> None:
        field = field_from_property_definition(
            {"id": "port", "label": "Port", "type": "number", "validation": {"min": 1, "max": 65535}},
            "custom",
        )
        assert isinstance(field.validation, RuleValidator)
        assert field.validation.parse(8080) == 8080
        with pytest.raises(ValidationError):
            field.validation.parse(70000)

    def test_malformed_pattern_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid validation rules"):
            RuleValidator({"pattern": "("})

    def test_convert_groups_orders(self) -> None:
        groups = convert_property_definitions_to_groups(
            [
                {"id": "to", "label": "To", "group": "email"},
                {"id": "retries", "label": "Retries"},
                {"id": "label", "label": "Label", "group": "basic"},
                {"id": "timeout", "label": "Timeout", "group": "advanced"},
            ]
        )
        assert [(g.id, g.order, g.label) for g in groups] == [
            ("email", 1, "Email"),
            ("custom", 90, "Custom"),
            ("basic", 1, "Basic"),
            ("advanced", 2, "Advanced"),
        ]

    def test_convert_none(self) -> None:
        assert convert_property_definitions_to_groups(None) == []
