"""Register custom node types described by JSON documents.

A node document names a base archetype in ``extends`` and layers its own
properties, property groups, context menu entries, event triggers and
hooks on top.  :class:`CustomNodeFactory` validates the document, builds
the inherited node configuration and wires everything into the node
registry, the property configuration registry, the context menu registry
and the event bus.

Example
-------
>>> factory = CustomNodeFactory(nodes, property_registry, menus, bus)
>>> result = factory.register_many([
...     {"id": "sendEmailTask", "extends": "task", "name": "Send email",
...      "properties": [{"id": "to", "name": "to", "label": "To",
...                      "type": "text", "group": "basic", "order": 3}]},
... ])
>>> result.success, result.failed
(1, 0)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping

from pydantic import ValidationError

from bpm_workflow_core.errors import ConfigValidationError, MenuDepthExceededError, TransportError
from bpm_workflow_core.events.bus import EventBus, Subscription, WorkflowEvent, WorkflowEventTypes
from bpm_workflow_core.factory.schemas import (
    ContextMenuActionJSON,
    ContextMenuItemJSON,
    CustomNodeJSON,
    EventTriggerJSON,
    MenuConditionJSON,
    PropertyDefinitionJSON,
    PropertyGroupJSON,
    format_validation_errors,
)
from bpm_workflow_core.factory.transport import fetch_json
from bpm_workflow_core.nodes.inheritance import create_inherited_node_config
from bpm_workflow_core.properties.configuration import (
    BASIC_GROUP_ORDER,
    CUSTOM_GROUP_ORDER,
    DEFAULT_GROUP_ID,
    PropertyConfigurationRegistry,
    field_from_property_definition,
)
from bpm_workflow_core.properties.types import PropertyFieldDefinition, PropertyGroupDefinition
from bpm_workflow_core.registry.actions import ContextMenuActionsRegistry
from bpm_workflow_core.registry.base import RegistryItem
from bpm_workflow_core.registry.context_menus import (
    ContextMenuConfig,
    ContextMenuItem,
    ContextMenuRegistry,
)
from bpm_workflow_core.registry.nodes import NodeRegistry
from bpm_workflow_core.text import capitalize_id, resolve_text

logger = logging.getLogger(__name__)

UNKNOWN_NODE_ID = "unknown"
OTHER_GROUP_ORDER = 99
DEFAULT_MAX_MENU_DEPTH = 8

# Node lifecycle events a document's ``hooks`` can re-emit.
HOOK_EVENTS: dict[str, str] = {
    "on_created": WorkflowEventTypes.NODE_CREATED,
    "on_updated": WorkflowEventTypes.NODE_UPDATED,
    "on_deleted": WorkflowEventTypes.NODE_DELETED,
    "on_property_changed": WorkflowEventTypes.PROPERTY_CHANGED,
}


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class BatchError:
    node_id: str
    error: str


@dataclass
class BatchResult:
    """Tally of a batch registration; individual failures never abort it."""

    success: int = 0
    failed: int = 0
    errors: list[BatchError] = field(default_factory=list)

    @classmethod
    def single_failure(cls, message: str) -> BatchResult:
        return cls(failed=1, errors=[BatchError(node_id=UNKNOWN_NODE_ID, error=message)])


def _node_properties(payload: object, key: str = "node") -> dict[str, object] | None:
    """Return ``payload[key]["properties"]`` or ``None`` without a node."""
    if not isinstance(payload, dict):
        return None
    node = payload.get(key)
    if not isinstance(node, dict):
        return None
    properties = node.get("properties")
    return properties if isinstance(properties, dict) else {}


def _compare(operator: str, actual: object, expected: object) -> bool:
    """Declarative comparison used by menu conditions and event triggers.

    ``notIncludes`` holds for values that are not lists.
    """
    if operator == "equals":
        return actual == expected
    if operator == "notEquals":
        return actual != expected
    if operator == "includes":
        return isinstance(actual, list) and expected in actual
    if operator == "notIncludes":
        return not isinstance(actual, list) or expected not in actual
    return True


def _as_order(value: float | None, default: int) -> int:
    return int(value) if value is not None else default


class CustomNodeFactory:
    """Builds and registers node types from JSON documents.

    Parameters
    ----------
    node_registry:
        Receives the inherited node configuration.
    property_registry:
        Receives the node's property groups.
    context_menu_registry:
        Receives a menu scoped to the node type.
    event_bus:
        Source and target of trigger and hook events.
    actions_registry:
        Optional; resolves ``function`` menu actions and ``call`` triggers.
    max_menu_depth:
        Deepest submenu nesting accepted in ``contextMenuItems``.
    fetch_timeout_seconds:
        Timeout for :meth:`load_from_url`.
    language:
        Language used for plain-text labels derived from multilingual names.
    """

    def __init__(
        self,
        node_registry: NodeRegistry,
        property_registry: PropertyConfigurationRegistry,
        context_menu_registry: ContextMenuRegistry,
        event_bus: EventBus,
        actions_registry: ContextMenuActionsRegistry | None = None,
        *,
        max_menu_depth: int = DEFAULT_MAX_MENU_DEPTH,
        fetch_timeout_seconds: float = 30.0,
        language: str = "en",
    ) -> None:
        self._nodes = node_registry
        self._property_registry = property_registry
        self._context_menus = context_menu_registry
        self._event_bus = event_bus
        self._actions = actions_registry
        self._max_menu_depth = max_menu_depth
        self._fetch_timeout = fetch_timeout_seconds
        self._language = language
        self._subscriptions: dict[str, list[Subscription]] = {}

    # ------------------------------------------------------------------
    # Validation and registration
    # ------------------------------------------------------------------

    def validate_config(self, config: object) -> ValidationResult:
        """Check *config* against :class:`CustomNodeJSON` without raising."""
        try:
            CustomNodeJSON.model_validate(config)
        except ValidationError as exc:
            return ValidationResult(valid=False, errors=format_validation_errors(exc))
        return ValidationResult(valid=True)

    def register_from_config(self, config: Mapping[str, object] | CustomNodeJSON) -> None:
        """Validate and register one node document.

        Raises
        ------
        ConfigValidationError:
            When the document violates the schema (all errors aggregated)
            or its submenus nest deeper than ``max_menu_depth``.
        """
        node = self._parse(config)
        menu_items = self._convert_menu_items(node.context_menu_items or [])
        overrides = self._build_overrides(node)
        declared: list[dict[str, object]] = overrides["propertyDefinitions"]  # type: ignore[assignment]
        try:
            property_groups = (
                self._convert_property_groups(declared, node.property_groups or []) if declared else []
            )
        except ValueError as exc:
            raise ConfigValidationError(
                f"Invalid property definitions for '{node.id}': {exc}", [str(exc)]
            ) from exc

        node_config = create_inherited_node_config(node.extends, overrides)
        if node_config is None:
            raise ConfigValidationError(f"Failed to create node config for '{node.id}'")

        if node.id in self._subscriptions:
            self._detach(node.id)

        self._nodes.register(
            RegistryItem(
                id=node.id,
                type=node.id,
                name=node.name,
                config=node_config,
                category=node_config.get("category"),  # type: ignore[arg-type]
                description=node.description,
            )
        )

        if property_groups:
            self._property_registry.register_node_config(node.id, property_groups)

        if menu_items or node.disable_default_context_menu:
            self._register_context_menu(node, menu_items)

        subscriptions = [
            *self._wire_event_triggers(node.event_triggers or []),
            *self._wire_hooks(node),
        ]
        if subscriptions:
            self._subscriptions[node.id] = subscriptions
        logger.debug("Registered custom node '%s' extending '%s'", node.id, node.extends.value)

    def register_many(self, configs: Iterable[object]) -> BatchResult:
        """Register each document, tallying failures instead of raising."""
        result = BatchResult()
        for config in configs:
            try:
                self.register_from_config(config)  # type: ignore[arg-type]
            except (ConfigValidationError, TypeError, ValueError, KeyError) as exc:
                node_id = config.get("id") if isinstance(config, dict) else None
                result.failed += 1
                result.errors.append(BatchError(node_id=str(node_id or UNKNOWN_NODE_ID), error=str(exc)))
                logger.warning("Failed to register node '%s': %s", node_id, exc)
            else:
                result.success += 1
        return result

    def load_from_json(self, json_string: str) -> BatchResult:
        """Parse a JSON array of node documents and register them."""
        try:
            configs = json.loads(json_string)
        except ValueError as exc:
            return BatchResult.single_failure(str(exc))
        if not isinstance(configs, list):
            return BatchResult.single_failure("JSON must be an array of node configurations")
        return self.register_many(configs)

    async def load_from_url(self, url: str) -> BatchResult:
        """Fetch a JSON array of node documents and register them.

        Network and parse failures are reported as one failed entry.
        """
        try:
            configs = await fetch_json(url, self._fetch_timeout)
        except TransportError as exc:
            return BatchResult.single_failure(str(exc))
        if not isinstance(configs, list):
            return BatchResult.single_failure("Response must be an array of node configurations")
        return self.register_many(configs)

    def unregister(self, node_id: str) -> bool:
        """Undo :meth:`register_from_config` for *node_id*.

        Removes the node, its property groups, its scoped context menu and
        every bus subscription its triggers and hooks created.

        Returns
        -------
        bool
            ``True`` when the node was registered.
        """
        self._detach(node_id)
        self._property_registry.unregister_node_config(node_id)
        self._context_menus.unregister(self._menu_id(node_id))
        return self._nodes.unregister(node_id)

    # ------------------------------------------------------------------
    # Document conversion
    # ------------------------------------------------------------------

    def _parse(self, config: Mapping[str, object] | CustomNodeJSON) -> CustomNodeJSON:
        if isinstance(config, CustomNodeJSON):
            return config
        try:
            return CustomNodeJSON.model_validate(config)
        except ValidationError as exc:
            errors = format_validation_errors(exc)
            raise ConfigValidationError(
                f"Invalid node configuration: {', '.join(errors)}", errors
            ) from exc

    def _build_overrides(self, node: CustomNodeJSON) -> dict[str, object]:
        return {
            "id": "",
            "type": node.id,
            "metadata": {
                "id": node.id,
                "title": node.name,
                "description": node.description,
                "version": "1.0.0",
            },
            "category": node.category,
            "visualConfig": (
                node.visual_config.model_dump(by_alias=True, exclude_none=True)
                if node.visual_config
                else None
            ),
            "properties": dict(node.default_properties or {}),
            "propertyDefinitions": [
                self._convert_property_definition(definition) for definition in node.properties or []
            ],
            "connectionRules": (
                node.connection_rules.model_dump(by_alias=True, exclude_none=True)
                if node.connection_rules
                else None
            ),
            "icon": node.icon.model_dump(by_alias=True, exclude_none=True) if node.icon else None,
            "collapsible": node.collapsible,
            "editable": node.editable,
            "deletable": node.deletable,
            "connectable": node.connectable,
            "draggable": node.draggable,
        }

    @staticmethod
    def _convert_property_definition(definition: PropertyDefinitionJSON) -> dict[str, object]:
        converted: dict[str, object] = {
            "id": definition.id,
            "name": definition.name,
            "label": definition.label,
            "type": definition.type,
            "required": definition.required or False,
            "group": definition.group or DEFAULT_GROUP_ID,
            "order": _as_order(definition.order, 0),
        }
        if definition.has_default:
            converted["defaultValue"] = definition.default_value
        if definition.placeholder is not None:
            converted["placeholder"] = definition.placeholder
        if definition.description is not None:
            converted["description"] = definition.description
        if definition.options is not None:
            converted["options"] = [
                {"label": option.label, "value": option.value} for option in definition.options
            ]
        if definition.validation is not None:
            converted["validation"] = definition.validation.model_dump(by_alias=True, exclude_none=True)
        return converted

    def _convert_property_groups(
        self,
        definitions: list[dict[str, object]],
        group_docs: list[PropertyGroupJSON],
    ) -> list[PropertyGroupDefinition]:
        """Group the node's declared property definitions by their ``group``.

        Inherited archetype definitions stay out of the property registry, so
        the base groups keep their own fields and validators.
        """
        docs = {doc.id: doc for doc in group_docs}
        grouped: dict[str, list[PropertyFieldDefinition]] = {}
        for definition in definitions:
            group_id = str(definition.get("group") or DEFAULT_GROUP_ID)
            grouped.setdefault(group_id, []).append(
                field_from_property_definition(definition, group_id, language=self._language)
            )

        groups: list[PropertyGroupDefinition] = []
        for group_id, fields in grouped.items():
            doc = docs.get(group_id)
            if group_id == "basic":
                fallback_order = BASIC_GROUP_ORDER
            elif group_id == DEFAULT_GROUP_ID:
                fallback_order = CUSTOM_GROUP_ORDER
            else:
                fallback_order = OTHER_GROUP_ORDER
            groups.append(
                PropertyGroupDefinition(
                    id=group_id,
                    label=doc.label if doc is not None else capitalize_id(group_id),
                    description=doc.description if doc is not None else None,
                    icon=doc.icon if doc is not None else None,
                    order=_as_order(doc.order if doc is not None else None, fallback_order),
                    fields=sorted(fields, key=lambda definition: definition.order or 0),
                )
            )
        return groups

    # ------------------------------------------------------------------
    # Context menus
    # ------------------------------------------------------------------

    @staticmethod
    def _menu_id(node_id: str) -> str:
        return f"{node_id}-context-menu"

    def _register_context_menu(self, node: CustomNodeJSON, items: list[ContextMenuItem]) -> None:
        menu_id = self._menu_id(node.id)
        name = f"{resolve_text(node.name, self._language)} Context Menu"
        self._context_menus.register(
            RegistryItem(
                id=menu_id,
                type=node.id,
                name=name,
                config=ContextMenuConfig(
                    id=menu_id,
                    name=name,
                    target_type="node",
                    items=items,
                    target_node_types=[node.id],
                    disable_default_items=list(node.disable_default_context_menu or []),
                ),
            )
        )

    def _convert_menu_items(
        self,
        items: list[ContextMenuItemJSON],
        depth: int = 1,
    ) -> list[ContextMenuItem]:
        """Convert menu documents recursively, refusing deep nesting."""
        if items and depth > self._max_menu_depth:
            raise MenuDepthExceededError(items[0].id, self._max_menu_depth)
        return [
            ContextMenuItem(
                id=item.id,
                label=item.label,
                icon=item.icon,
                disabled=bool(item.disabled),
                separator=bool(item.separator),
                children=self._convert_menu_items(item.submenu or [], depth + 1),
                on_click=self._menu_action(item.id, item.action) if item.action else None,
                visible=self._menu_condition(item.condition) if item.condition else None,
                action_name=item.action.function if item.action else None,
            )
            for item in items
        ]

    def _menu_action(
        self,
        item_id: str,
        action: ContextMenuActionJSON,
    ) -> Callable[[dict[str, object]], object]:
        def on_click(context: dict[str, object]) -> object:
            if action.type == "event" and action.event:
                self._event_bus.emit(action.event, {"context": context, "payload": action.payload})
            elif action.type == "function" and action.function:
                return self._call_action(action.function, context)
            else:
                logger.debug("Menu action type '%s' of '%s' is handled by the host", action.type, item_id)
            return None

        return on_click

    def _menu_condition(self, condition: MenuConditionJSON) -> Callable[[dict[str, object]], bool]:
        def visible(context: dict[str, object]) -> bool:
            properties = _node_properties(context) or {}
            return _compare(condition.operator, properties.get(condition.field), condition.value)

        return visible

    def _call_action(self, action_name: str, *args: object) -> object:
        action = self._actions.get_action(action_name) if self._actions is not None else None
        if action is None:
            logger.warning("Action '%s' is not registered", action_name)
            return None
        return action(*args)

    # ------------------------------------------------------------------
    # Event wiring
    # ------------------------------------------------------------------

    def _wire_event_triggers(self, triggers: list[EventTriggerJSON]) -> list[Subscription]:
        return [self._event_bus.on(trigger.on, self._trigger_listener(trigger)) for trigger in triggers]

    def _trigger_listener(self, trigger: EventTriggerJSON) -> Callable[[WorkflowEvent], None]:
        def listener(event: WorkflowEvent) -> None:
            if trigger.condition is not None:
                properties = _node_properties(event.payload)
                if properties is None:
                    return
                condition = trigger.condition
                if not _compare(condition.operator, properties.get(condition.property), condition.value):
                    return

            if trigger.action == "emit" and trigger.event:
                self._event_bus.emit(trigger.event, trigger.payload or {})
            elif trigger.action == "call" and trigger.function:
                self._call_action(trigger.function, event)

        return listener

    def _wire_hooks(self, node: CustomNodeJSON) -> list[Subscription]:
        if node.hooks is None:
            return []
        subscriptions: list[Subscription] = []
        for hook_name, source_event in HOOK_EVENTS.items():
            target_event = getattr(node.hooks, hook_name)
            if target_event:
                listener = self._hook_listener(
                    node.id,
                    target_event,
                    forward_payload=hook_name == "on_property_changed",
                )
                subscriptions.append(self._event_bus.on(source_event, listener))
        return subscriptions

    def _hook_listener(
        self,
        node_type: str,
        target_event: str,
        forward_payload: bool,
    ) -> Callable[[WorkflowEvent], None]:
        def listener(event: WorkflowEvent) -> None:
            payload = event.payload if isinstance(event.payload, dict) else {}
            node = payload.get("node")
            if not isinstance(node, dict) or node.get("type") != node_type:
                return
            self._event_bus.emit(target_event, payload if forward_payload else {"node": node})

        return listener

    def _detach(self, node_id: str) -> None:
        for subscription in self._subscriptions.pop(node_id, []):
            subscription.unsubscribe()
