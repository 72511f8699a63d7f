"""Event bus package for bpm-workflow-core."""
from __future__ import annotations

from bpm_workflow_core.events.bus import (
    EventBus,
    EventListener,
    Subscription,
    WorkflowEvent,
    WorkflowEventTypes,
)

__all__ = [
    "EventBus",
    "EventListener",
    "Subscription",
    "WorkflowEvent",
    "WorkflowEventTypes",
]
