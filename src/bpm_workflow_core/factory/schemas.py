"""Pydantic v2 models for node and plugin JSON documents.

Documents use camelCase keys; the models expose snake_case attributes and
accept either form.  Unknown keys are allowed so that documents written for
newer editors still load.

Example
-------
>>> node = CustomNodeJSON.model_validate(
...     {"id": "sendEmailTask", "extends": "task", "name": {"en": "Send email"}}
... )
>>> node.extends
<BaseNodeType.TASK: 'task'>
"""
from __future__ import annotations

import re
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from bpm_workflow_core.nodes.definitions import BaseNodeType

_MODEL_CONFIG = {"extra": "allow", "alias_generator": to_camel, "populate_by_name": True}

PropertyTypeJSON = Literal[
    "text",
    "number",
    "textarea",
    "boolean",
    "select",
    "multiselect",
    "color",
    "json",
    "date",
    "slider",
    "custom",
]
DeclarativeOperator = Literal["equals", "notEquals", "includes", "notIncludes"]
DisableableMenuItem = Literal["change-type", "properties", "appearance", "duplicate", "delete", "all"]


def _check_multilingual(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        if not all(isinstance(key, str) and isinstance(text, str) for key, text in value.items()):
            raise ValueError("Multilingual text values must be strings")
        if not value or "en" not in value:
            raise ValueError("Multilingual text must include at least 'en' (English) key")
        return value
    raise ValueError("Expected a string or a map of language code to string")


# A plain string or a language map that contains at least "en".
MultilingualTextJSON = Annotated[Any, AfterValidator(_check_multilingual)]


class IconConfigJSON(BaseModel):
    model_config = _MODEL_CONFIG

    type: Literal["lucide", "custom", "svg", "url"]
    value: Any
    color: str | None = None
    background_color: str | None = None


class VisualConfigJSON(BaseModel):
    model_config = _MODEL_CONFIG

    background_color: str | None = None
    border_color: str | None = None
    border_style: Literal["solid", "dashed", "dotted"] | None = None
    border_width: float | None = None
    ring_color: str | None = None
    text_color: str | None = None
    description_color: str | None = None
    icon_background_color: str | None = None
    icon_color: str | None = None


class PropertyFieldOptionJSON(BaseModel):
    model_config = _MODEL_CONFIG

    label: MultilingualTextJSON
    value: str | int | float | bool
    description: MultilingualTextJSON | None = None
    disabled: bool | None = None


class PropertyValidationJSON(BaseModel):
    """Rule object turned into a :class:`~bpm_workflow_core.properties.RuleValidator`."""

    model_config = _MODEL_CONFIG

    pattern: str | None = None
    min: float | None = None
    max: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    message: MultilingualTextJSON | None = None

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"Invalid regular expression: {exc}") from exc
        return value


class PropertyDefinitionJSON(BaseModel):
    model_config = _MODEL_CONFIG

    id: str
    name: str
    label: MultilingualTextJSON
    type: PropertyTypeJSON
    required: bool | None = None
    default_value: Any = None
    placeholder: MultilingualTextJSON | None = None
    description: MultilingualTextJSON | None = None
    group: str | None = None
    order: float | None = None
    options: list[PropertyFieldOptionJSON] | None = None
    validation: PropertyValidationJSON | None = None

    @property
    def has_default(self) -> bool:
        return "default_value" in self.model_fields_set


class PropertyGroupJSON(BaseModel):
    model_config = _MODEL_CONFIG

    id: str
    label: MultilingualTextJSON
    description: MultilingualTextJSON | None = None
    icon: str | None = None
    order: float | None = None


class ConnectionRulesJSON(BaseModel):
    model_config = _MODEL_CONFIG

    max_input_connections: int | None = None
    max_output_connections: int | None = None
    allowed_sources: list[str] | None = None
    allowed_targets: list[str] | None = None


class ContextMenuActionJSON(BaseModel):
    model_config = _MODEL_CONFIG

    type: Literal["event", "function", "navigate", "modal", "api"]
    event: str | None = None
    function: str | None = None
    url: str | None = None
    payload: dict[str, Any] | None = None


class MenuConditionJSON(BaseModel):
    model_config = _MODEL_CONFIG

    field: str
    operator: DeclarativeOperator
    value: Any = None


class ContextMenuItemJSON(BaseModel):
    """Menu entry; ``submenu`` nests further entries."""

    model_config = _MODEL_CONFIG

    id: str
    label: MultilingualTextJSON
    icon: str | None = None
    action: ContextMenuActionJSON | None = None
    condition: MenuConditionJSON | None = None
    submenu: list[ContextMenuItemJSON] | None = None
    separator: bool | None = None
    disabled: bool | None = None


class TriggerConditionJSON(BaseModel):
    model_config = _MODEL_CONFIG

    property: str
    operator: DeclarativeOperator
    value: Any = None


class EventTriggerJSON(BaseModel):
    model_config = _MODEL_CONFIG

    on: str
    action: Literal["emit", "call"]
    event: str | None = None
    function: str | None = None
    payload: dict[str, Any] | None = None
    condition: TriggerConditionJSON | None = None


class HooksJSON(BaseModel):
    """Event names re-emitted on node lifecycle events."""

    model_config = _MODEL_CONFIG

    on_created: str | None = None
    on_updated: str | None = None
    on_deleted: str | None = None
    on_property_changed: str | None = None


class CustomNodeJSON(BaseModel):
    """A custom node type extending one of the base archetypes."""

    model_config = _MODEL_CONFIG

    id: str
    extends: BaseNodeType
    name: MultilingualTextJSON

    description: MultilingualTextJSON | None = None
    category: str | None = None
    icon: IconConfigJSON | None = None
    visual_config: VisualConfigJSON | None = None

    properties: list[PropertyDefinitionJSON] | None = None
    property_groups: list[PropertyGroupJSON] | None = None
    default_properties: dict[str, Any] | None = None

    connection_rules: ConnectionRulesJSON | None = None

    context_menu_items: list[ContextMenuItemJSON] | None = None
    disable_default_context_menu: list[DisableableMenuItem] | None = None

    event_triggers: list[EventTriggerJSON] | None = None
    hooks: HooksJSON | None = None

    collapsible: bool | None = None
    editable: bool | None = None
    deletable: bool | None = None
    connectable: bool | None = None
    draggable: bool | None = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        if not value:
            raise ValueError("Node ID is required")
        return value


class CategorySeparatorJSON(BaseModel):
    model_config = _MODEL_CONFIG

    show: bool | None = None
    color: str | None = None
    style: Literal["line", "spacer"] | None = None


class CategoryJSON(BaseModel):
    model_config = _MODEL_CONFIG

    id: str
    name: MultilingualTextJSON
    icon: str | None = None
    description: MultilingualTextJSON | None = None
    order: int | None = None
    separator: CategorySeparatorJSON | None = None


class PluginMetadataJSON(BaseModel):
    model_config = _MODEL_CONFIG

    id: str
    name: MultilingualTextJSON
    version: str = Field(default="1.0.0")
    description: MultilingualTextJSON | None = None
    author: str | None = None
    dependencies: list[str] | None = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        if not value:
            raise ValueError("Plugin ID is required")
        return value


class PluginJSON(BaseModel):
    """Top-level plugin document."""

    model_config = _MODEL_CONFIG

    metadata: PluginMetadataJSON
    nodes: list[CustomNodeJSON] | None = None
    categories: list[CategoryJSON] | None = None


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Turn pydantic errors into ``"path.to.field: message"`` strings."""
    messages: list[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        messages.append(f"{path}: {error['msg']}" if path else error["msg"])
    return messages
