"""Field value validators backed by pydantic.

A validator exposes ``parse(value)`` and raises
:class:`pydantic.ValidationError` on failure.  Two implementations ship:

* :class:`TypeAdapterValidator` wraps any annotated type, e.g.
  ``Annotated[str, StringConstraints(min_length=1)]``.
* :class:`RuleValidator` is built from the JSON rule objects found in node
  documents (``pattern``, ``min``, ``max``, ``minLength``, ``maxLength``,
  ``message``).

Example
-------
>>> validator = RuleValidator({"minLength": 3, "message": "Too short"})
>>> validator.parse("ab")
Traceback (most recent call last):
    ...
pydantic_core._pydantic_core.ValidationError: 1 validation error ...
"""
from __future__ import annotations

from typing import Annotated, Any, Optional, Protocol, runtime_checkable

from pydantic import Field, StringConstraints, TypeAdapter, ValidationError
from pydantic_core import PydanticCustomError, SchemaError

from bpm_workflow_core.text import MultilingualText, resolve_text

NUMERIC_FIELD_TYPES = frozenset({"number", "slider"})


@runtime_checkable
class Validator(Protocol):
    """Anything that can check a single field value."""

    def parse(self, value: object) -> object:
        """Return the validated value or raise :class:`pydantic.ValidationError`."""
        ...


class TypeAdapterValidator:
    """Validate values against an arbitrary type annotation.

    Parameters
    ----------
    annotation:
        Any type pydantic understands, including ``Annotated`` constraints.
    """

    def __init__(self, annotation: Any) -> None:
        self._annotation = annotation
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)

    def parse(self, value: object) -> object:
        return self._adapter.validate_python(value)

    def __repr__(self) -> str:
        return f"TypeAdapterValidator({self._annotation!r})"


class RuleValidator:
    """Validator built from a JSON ``validation`` rule object.

    String fields get ``pattern``/``minLength``/``maxLength``; ``number`` and
    ``slider`` fields get ``min``/``max``.  When the rules carry a
    ``message``, any failure is reported with that single message instead
    of pydantic's own.

    Parameters
    ----------
    rules:
        The rule object, camelCase keys as in node documents.
    field_type:
        The property field type the rules apply to.
    language:
        Language used to resolve a multilingual ``message``.

    Raises
    ------
    ValueError:
        When the rules cannot be compiled, e.g. a malformed ``pattern``.
    """

    def __init__(
        self,
        rules: dict[str, object],
        field_type: str = "text",
        language: str = "en",
    ) -> None:
        self.rules = dict(rules)
        self.field_type = field_type
        message: MultilingualText | None = rules.get("message")  # type: ignore[assignment]
        self.message = resolve_text(message, language) if message else None
        try:
            self._adapter: TypeAdapter[Any] = TypeAdapter(self._build_annotation())
        except SchemaError as exc:
            raise ValueError(f"Invalid validation rules {self.rules!r}: {exc}") from exc

    def _build_annotation(self) -> Any:
        if self.field_type in NUMERIC_FIELD_TYPES:
            return Annotated[float, Field(ge=self.rules.get("min"), le=self.rules.get("max"))]
        return Annotated[
            str,
            StringConstraints(
                pattern=self.rules.get("pattern"),  # type: ignore[arg-type]
                min_length=self.rules.get("minLength"),  # type: ignore[arg-type]
                max_length=self.rules.get("maxLength"),  # type: ignore[arg-type]
            ),
        ]

    def parse(self, value: object) -> object:
        try:
            return self._adapter.validate_python(value)
        except ValidationError as exc:
            if self.message is None:
                raise
            raise ValidationError.from_exception_data(
                "RuleValidator",
                [
                    {
                        "type": PydanticCustomError("rule_violation", self.message),
                        "loc": (),
                        "input": value,
                    }
                ],
            ) from exc

    def __repr__(self) -> str:
        return f"RuleValidator({self.rules!r}, field_type={self.field_type!r})"


def optional_text() -> TypeAdapterValidator:
    """Validator accepting a string or ``None``."""
    return TypeAdapterValidator(Optional[str])
