"""Helpers for multilingual text values.

Every text field in node and plugin documents is either a plain string or
a map of language code to string that contains at least ``"en"``.
"""
from __future__ import annotations

from typing import Union

MultilingualText = Union[str, dict[str, str]]

DEFAULT_LANGUAGE = "en"


def resolve_text(value: object, language: str = DEFAULT_LANGUAGE) -> str:
    """Return the plain string for *language*, falling back to English.

    Plain strings are returned unchanged; ``None`` becomes ``""``.
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        text = value.get(language)
        if text is None:
            text = value.get(DEFAULT_LANGUAGE)
        if text is None and value:
            text = next(iter(value.values()))
        return str(text) if text is not None else ""
    return str(value)


def text_values(value: object) -> list[str]:
    """Return every string carried by a text value (all languages)."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [str(v) for v in value.values()]
    return [str(value)]


def capitalize_id(identifier: str) -> str:
    """``"basic"`` -> ``"Basic"``; used for default group labels."""
    return identifier[:1].upper() + identifier[1:]
