"""Write property edits back into node/edge dicts and validate them.

Edits are routed by field id:

* ``id`` is immutable and produces no update;
* ``description`` is mirrored into ``metadata``, ``data`` and
  ``properties``;
* every other field is mirrored into ``properties`` and ``data``.

A validation failure never blocks the update object; it only marks the
result invalid.

Example
-------
>>> engine = PropertySyncEngine()
>>> result = engine.sync_property({"id": "n1", "properties": {}}, "assignee", "bob")
>>> result.updates["properties"]
{'assignee': 'bob'}
"""
from __future__ import annotations

import logging
from typing import Mapping

from pydantic import ValidationError

from bpm_workflow_core.properties.types import (
    UNSET,
    Condition,
    EntityValidationResult,
    FieldValidationResult,
    PropertyCondition,
    PropertyEntity,
    PropertyFieldDefinition,
    PropertyGroupDefinition,
    PropertySyncResult,
    ValidationIssue,
    ValidationOptions,
)
from bpm_workflow_core.properties.validation import Validator

logger = logging.getLogger(__name__)

IMMUTABLE_FIELD = "id"
DESCRIPTION_FIELD = "description"


def _section(entity: Mapping[str, object], key: str) -> dict[str, object]:
    value = entity.get(key)
    return dict(value) if isinstance(value, dict) else {}


def _first_present(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None and candidate is not UNSET:
            return candidate
    return None


def evaluate_condition(
    condition: Condition,
    entity: PropertyEntity,
    fallback: bool,
) -> bool:
    """Evaluate a field/group condition against *entity*.

    Parameters
    ----------
    condition:
        A predicate over the entity, or a :class:`PropertyCondition`
        compared with ``entity["properties"][condition.field]``.
    entity:
        The node or edge dict.
    fallback:
        Returned for a ``"custom"`` operator without a check and for
        unknown operators.
    """
    if not isinstance(condition, PropertyCondition):
        return bool(condition(entity))

    field_value = _section(entity, "properties").get(condition.field)
    operator = condition.operator

    if operator == "equals":
        return field_value == condition.value
    if operator == "notEquals":
        return field_value != condition.value
    if operator == "includes":
        return isinstance(field_value, list) and condition.value in field_value
    if operator == "notIncludes":
        return isinstance(field_value, list) and condition.value not in field_value
    if operator == "custom":
        if condition.custom_check is None:
            return fallback
        return bool(condition.custom_check(field_value, entity))

    logger.warning("Unknown condition operator '%s'", operator)
    return fallback


class PropertySyncEngine:
    """Routes property edits and runs field validators."""

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync_property(
        self,
        entity: PropertyEntity,
        property_id: str,
        value: object,
        field_definition: PropertyFieldDefinition | None = None,
    ) -> PropertySyncResult:
        """Build the update object for a single property edit."""
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        if field_definition is not None and field_definition.validation is not None:
            outcome = self.validate_field(property_id, value, field_definition.validation)
            errors.extend(outcome.errors)
            warnings.extend(outcome.warnings)

        updates: dict[str, object] = {}
        if property_id == IMMUTABLE_FIELD:
            pass
        elif property_id == DESCRIPTION_FIELD:
            updates["metadata"] = {**_section(entity, "metadata"), DESCRIPTION_FIELD: value}
            updates["data"] = {**_section(entity, "data"), DESCRIPTION_FIELD: value}
            updates["properties"] = {**_section(entity, "properties"), DESCRIPTION_FIELD: value}
        else:
            updates["properties"] = {**_section(entity, "properties"), property_id: value}
            updates["data"] = {**_section(entity, "data"), property_id: value}

        return PropertySyncResult(updates=updates, errors=errors, warnings=warnings, valid=not errors)

    def sync_properties(
        self,
        entity: PropertyEntity,
        changes: Mapping[str, object],
        field_definitions: Mapping[str, PropertyFieldDefinition] | None = None,
    ) -> PropertySyncResult:
        """Build one combined update object for several edits.

        ``properties`` and ``data`` are always present in the updates;
        ``metadata`` only when ``description`` changed.
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        if field_definitions:
            for property_id, value in changes.items():
                definition = field_definitions.get(property_id)
                if definition is not None and definition.validation is not None:
                    outcome = self.validate_field(property_id, value, definition.validation)
                    errors.extend(outcome.errors)
                    warnings.extend(outcome.warnings)

        properties = _section(entity, "properties")
        data = _section(entity, "data")
        metadata: dict[str, object] | None = None

        for property_id, value in changes.items():
            if property_id == IMMUTABLE_FIELD:
                continue
            if property_id == DESCRIPTION_FIELD:
                metadata = {**_section(entity, "metadata"), DESCRIPTION_FIELD: value}
            properties[property_id] = value
            data[property_id] = value

        updates: dict[str, object] = {"properties": properties, "data": data}
        if metadata is not None:
            updates["metadata"] = metadata
        return PropertySyncResult(updates=updates, errors=errors, warnings=warnings, valid=not errors)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_entity(
        self,
        entity: PropertyEntity,
        property_groups: list[PropertyGroupDefinition],
        options: ValidationOptions | None = None,
    ) -> EntityValidationResult:
        """Validate the current value of every field that has a validator.

        Values are resolved from ``entity["id"]`` for ``id``; from
        ``metadata``, then ``data``, then the default for ``description``;
        and from ``properties``, then ``data``, then the default otherwise.
        """
        options = options or ValidationOptions()
        metadata = _section(entity, "metadata")
        data = _section(entity, "data")
        properties = _section(entity, "properties")

        result = EntityValidationResult(valid=True)
        for group in property_groups:
            for definition in group.fields:
                if definition.validation is None:
                    continue

                if definition.id == IMMUTABLE_FIELD:
                    value = entity.get("id")
                elif definition.id == DESCRIPTION_FIELD:
                    value = _first_present(
                        metadata.get(DESCRIPTION_FIELD),
                        data.get(DESCRIPTION_FIELD),
                        definition.default_value,
                    )
                else:
                    value = _first_present(
                        properties.get(definition.id),
                        data.get(definition.id),
                        definition.default_value,
                    )

                outcome = self.validate_field(definition.id, value, definition.validation)
                result.field_results[definition.id] = outcome
                if outcome.valid:
                    continue
                result.errors.extend(outcome.errors)
                result.warnings.extend(outcome.warnings)
                if options.abort_early and outcome.errors:
                    result.valid = False
                    return result

        result.valid = not result.errors
        return result

    def validate_field(
        self,
        field_id: str,
        value: object,
        validator: Validator,
    ) -> FieldValidationResult:
        """Run *validator* and convert pydantic errors into issues."""
        try:
            validator.parse(value)
        except ValidationError as exc:
            errors = [
                ValidationIssue(field=field_id, message=error["msg"], code=error["type"])
                for error in exc.errors()
            ]
            return FieldValidationResult(valid=False, errors=errors)
        except (TypeError, ValueError) as exc:
            logger.debug("Validator for '%s' failed: %s", field_id, exc)
            return FieldValidationResult(
                valid=False,
                errors=[ValidationIssue(field=field_id, message="Validation failed")],
            )
        return FieldValidationResult(valid=True)

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def is_field_visible(self, definition: PropertyFieldDefinition, entity: PropertyEntity) -> bool:
        if definition.visible is None:
            return True
        return evaluate_condition(definition.visible, entity, fallback=True)

    def is_field_disabled(self, definition: PropertyFieldDefinition, entity: PropertyEntity) -> bool:
        """A readonly field is always disabled."""
        if definition.readonly:
            return True
        if definition.disabled is None:
            return False
        return evaluate_condition(definition.disabled, entity, fallback=False)

    def is_group_visible(self, group: PropertyGroupDefinition, entity: PropertyEntity) -> bool:
        if group.visible is None:
            return True
        return evaluate_condition(group.visible, entity, fallback=True)

    def get_visible_groups(
        self,
        groups: list[PropertyGroupDefinition],
        entity: PropertyEntity,
    ) -> list[PropertyGroupDefinition]:
        return [group for group in groups if self.is_group_visible(group, entity)]

    def get_visible_fields(
        self,
        fields: list[PropertyFieldDefinition],
        entity: PropertyEntity,
    ) -> list[PropertyFieldDefinition]:
        return [definition for definition in fields if self.is_field_visible(definition, entity)]
