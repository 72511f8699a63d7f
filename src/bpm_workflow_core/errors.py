"""Exception hierarchy for bpm-workflow-core.

Only failures that would leave the engine in an inconsistent state are
raised.  Registration conflicts are logged and proceed, unknown base
archetypes return ``None``, and field validation failures are collected
into result objects.

Example
-------
>>> try:
...     await manager.install(plugin)
... except MissingDependencyError as exc:
...     print(exc.dependency_id)
"""
from __future__ import annotations


class WorkflowCoreError(Exception):
    """Root of every exception raised by bpm-workflow-core."""


class ConfigValidationError(WorkflowCoreError, ValueError):
    """Raised when a JSON node or plugin document violates its schema.

    Attributes
    ----------
    errors:
        Aggregated ``"path: message"`` strings.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors: list[str] = list(errors or [])
        super().__init__(message)


class MenuDepthExceededError(ConfigValidationError):
    """Raised when nested context-menu submenus exceed the depth guard."""

    def __init__(self, item_id: str, max_depth: int) -> None:
        self.item_id = item_id
        self.max_depth = max_depth
        super().__init__(
            f"Context menu item '{item_id}' exceeds the maximum submenu depth of {max_depth}",
            [f"contextMenuItems.{item_id}: submenu depth exceeds {max_depth}"],
        )


class PluginLifecycleError(WorkflowCoreError):
    """Base class for plugin install/activate/deactivate/uninstall failures."""

    def __init__(self, plugin_id: str, message: str) -> None:
        self.plugin_id = plugin_id
        super().__init__(message)


class DuplicateInstallError(PluginLifecycleError):
    """Raised when installing a plugin id that is already installed."""

    def __init__(self, plugin_id: str) -> None:
        super().__init__(plugin_id, f"Plugin '{plugin_id}' is already installed")


class MissingDependencyError(PluginLifecycleError):
    """Raised when a plugin declares a dependency that is not installed."""

    def __init__(self, plugin_id: str, dependency_id: str) -> None:
        self.dependency_id = dependency_id
        super().__init__(
            plugin_id,
            f"Plugin '{plugin_id}' requires plugin '{dependency_id}' to be installed first",
        )


class PluginNotInstalledError(PluginLifecycleError, KeyError):
    """Raised when operating on a plugin id the manager does not know."""

    def __init__(self, plugin_id: str) -> None:
        super().__init__(plugin_id, f"Plugin '{plugin_id}' is not installed")

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class TransportError(WorkflowCoreError):
    """Raised when fetching or parsing a remote document fails.

    Attributes
    ----------
    url:
        The URL that could not be loaded.
    """

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)
