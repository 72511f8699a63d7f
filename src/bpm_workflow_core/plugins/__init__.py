"""Plugin subsystem for bpm-workflow-core.

Plugins are built in code (:class:`Plugin`) or loaded from JSON documents
through :class:`~bpm_workflow_core.factory.PluginJSONLoader`, then driven
through :class:`PluginManager`.
"""
from __future__ import annotations

from bpm_workflow_core.plugins.manager import Plugin, PluginConfig, PluginManager, PluginMetadata

__all__ = ["Plugin", "PluginConfig", "PluginManager", "PluginMetadata"]
