"""Data types for property panels: fields, groups, conditions and results.

Entities (nodes and edges) stay plain dicts with the keys ``id``,
``metadata``, ``data`` and ``properties``; only the schema describing
their editable attributes is typed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Literal, Union

from bpm_workflow_core.text import MultilingualText

if TYPE_CHECKING:
    from bpm_workflow_core.properties.validation import Validator

PropertyEntity = dict[str, object]

PropertyFieldType = Literal[
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

ConditionOperator = Literal["equals", "notEquals", "includes", "notIncludes", "custom"]


class _Unset:
    """Marker for "no default value", distinct from a default of ``None``."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


@dataclass
class PropertyCondition:
    """Declarative comparison against ``entity["properties"][field]``.

    ``custom_check`` receives ``(field_value, entity)`` and is only used
    with the ``"custom"`` operator.
    """

    field: str
    operator: ConditionOperator
    value: object = None
    custom_check: Callable[[object, PropertyEntity], bool] | None = None


# A condition is either a declarative comparison or a predicate over the entity.
Condition = Union[PropertyCondition, Callable[[PropertyEntity], bool]]


@dataclass
class PropertyFieldDefinition:
    """One editable attribute shown in a property panel.

    Attributes
    ----------
    id:
        Field id; also the key in ``entity["properties"]``.
    label:
        Display label.
    type:
        Editor widget type.
    default_value:
        :data:`UNSET` when the field has no default.
    readonly:
        A readonly field is always disabled.
    disabled, visible:
        Optional :data:`Condition` evaluated against the entity.
    validation:
        Optional :class:`~bpm_workflow_core.properties.validation.Validator`.
    options:
        Widget options (select choices, numeric bounds...).
    order:
        Sort key inside the group; fields without one sort last.
    group:
        Group id the field belongs to.
    """

    id: str
    label: MultilingualText
    type: PropertyFieldType = "text"
    default_value: object = UNSET
    placeholder: MultilingualText | None = None
    help_text: MultilingualText | None = None
    required: bool = False
    readonly: bool = False
    disabled: Condition | None = None
    visible: Condition | None = None
    validation: Validator | None = None
    options: dict[str, object] | None = None
    order: int | None = None
    group: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default_value is not UNSET


@dataclass
class PropertyGroupDefinition:
    """A tab of the property panel holding an ordered list of fields."""

    id: str
    label: MultilingualText
    order: int
    fields: list[PropertyFieldDefinition] = field(default_factory=list)
    description: MultilingualText | None = None
    icon: str | None = None
    visible: Condition | None = None
    collapsible: bool | None = None
    default_collapsed: bool | None = None
    metadata: dict[str, object] | None = None


@dataclass
class ValidationIssue:
    """An error or warning attached to one field."""

    field: str
    message: str
    code: str | None = None


@dataclass
class FieldValidationResult:
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)


@dataclass
class EntityValidationResult:
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    field_results: dict[str, FieldValidationResult] = field(default_factory=dict)


@dataclass
class PropertySyncResult:
    """Update object produced by a property edit.

    ``updates`` holds the replacement ``metadata``, ``data`` and
    ``properties`` maps; it is produced even when validation fails.
    """

    updates: dict[str, object]
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    valid: bool = True


@dataclass
class ValidationOptions:
    mode: Literal["all", "changed"] = "all"
    abort_early: bool = False
