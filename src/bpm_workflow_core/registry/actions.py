"""Named actions shared by context menus (select, duplicate, delete...).

The rendering layer registers its callbacks here; menu items built from
JSON reference them by name through ``ContextMenuItem.action_name``.
"""
from __future__ import annotations

from typing import Callable


class ContextMenuActionsRegistry:
    """Mutable map of action name to callable."""

    def __init__(self) -> None:
        self._actions: dict[str, Callable[..., object]] = {}

    def register_actions(self, **actions: Callable[..., object]) -> None:
        """Merge *actions* into the registry; later names win."""
        self._actions = {**self._actions, **actions}

    def get_actions(self) -> dict[str, Callable[..., object]]:
        return dict(self._actions)

    def get_action(self, action_name: str) -> Callable[..., object] | None:
        return self._actions.get(action_name)

    def clear_actions(self) -> None:
        self._actions = {}

    def __contains__(self, action_name: object) -> bool:
        return action_name in self._actions

    def __len__(self) -> int:
        return len(self._actions)
