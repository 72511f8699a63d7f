"""Theme registry with a current-theme selection."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bpm_workflow_core.events.bus import EventBus
from bpm_workflow_core.registry.base import Registry

logger = logging.getLogger(__name__)


@dataclass
class ThemeConfig:
    """Colors and style overrides for one theme."""

    name: str
    colors: dict[str, str] = field(default_factory=dict)
    styles: dict[str, object] | None = None


class ThemeRegistry(Registry[ThemeConfig]):
    """Registry of :class:`ThemeConfig` objects.

    The current theme id starts as ``"default"`` and only changes to ids
    that are registered.
    """

    def __init__(self, event_bus: EventBus) -> None:
        super().__init__("ThemeRegistry", event_bus)
        self._current_theme = "default"

    @property
    def current_theme_id(self) -> str:
        return self._current_theme

    def set_current_theme(self, theme_id: str) -> bool:
        """Select *theme_id*; returns ``False`` when it is not registered."""
        if not self.has(theme_id):
            logger.error("Theme '%s' not found in registry", theme_id)
            return False
        self._current_theme = theme_id
        return True

    def get_current_theme(self) -> ThemeConfig | None:
        return self.get_config(self._current_theme)

    def get_color(self, color_key: str) -> str | None:
        theme = self.get_current_theme()
        return theme.colors.get(color_key) if theme else None

    def get_style(self) -> dict[str, object] | None:
        theme = self.get_current_theme()
        return theme.styles if theme else None
