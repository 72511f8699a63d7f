"""Synchronous publish/subscribe event bus.

Every registry, the plugin manager and the JSON config bridge publish
notifications through one :class:`EventBus` instance.  Dispatch is
synchronous and happens in listener-registration order; a listener that
raises is logged and the remaining listeners still run.

Example
-------
>>> bus = EventBus()
>>> seen = []
>>> sub = bus.on("node:added", lambda event: seen.append(event.payload))
>>> bus.emit("node:added", {"id": "task-1"})
>>> seen
[{'id': 'task-1'}]
>>> sub.unsubscribe()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class WorkflowEvent:
    """A single event delivered to listeners."""

    type: str
    payload: object = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str | None = None


EventListener = Callable[[WorkflowEvent], object]


class WorkflowEventTypes:
    """Well-known event names published by the engine and the rendering layer."""

    # Node events
    NODE_ADDED = "node:added"
    NODE_CREATED = "node:created"
    NODE_UPDATED = "node:updated"
    NODE_DELETED = "node:deleted"
    NODE_SELECTED = "node:selected"
    NODE_DESELECTED = "node:deselected"
    NODE_COLLAPSED = "node:collapsed"
    NODE_EXPANDED = "node:expanded"

    # Edge events
    EDGE_ADDED = "edge:added"
    EDGE_UPDATED = "edge:updated"
    EDGE_DELETED = "edge:deleted"
    EDGE_SELECTED = "edge:selected"
    EDGE_DESELECTED = "edge:deselected"

    # Workflow events
    WORKFLOW_LOADED = "workflow:loaded"
    WORKFLOW_SAVED = "workflow:saved"
    WORKFLOW_VALIDATED = "workflow:validated"
    WORKFLOW_EXECUTED = "workflow:executed"
    WORKFLOW_CLEARED = "workflow:cleared"

    # Validation events
    VALIDATION_ERROR = "validation:error"
    VALIDATION_WARNING = "validation:warning"
    VALIDATION_SUCCESS = "validation:success"

    # Layout events
    LAYOUT_CHANGED = "layout:changed"
    ZOOM_CHANGED = "zoom:changed"

    # Property events
    PROPERTY_CHANGED = "property:changed"

    # Registry events
    REGISTRY_ITEM_REGISTERED = "registry:item:registered"
    REGISTRY_ITEM_UNREGISTERED = "registry:item:unregistered"

    # Plugin events
    PLUGIN_LOADED = "plugin:loaded"
    PLUGIN_UNLOADED = "plugin:unloaded"


class Subscription:
    """Handle returned by :meth:`EventBus.on`."""

    def __init__(self, bus: "EventBus", event_type: str, listener: EventListener) -> None:
        self._bus = bus
        self.event_type = event_type
        self.listener = listener

    def unsubscribe(self) -> None:
        """Remove the listener from the bus.  Safe to call more than once."""
        self._bus.off(self.event_type, self.listener)

    def __repr__(self) -> str:
        return f"Subscription(event_type={self.event_type!r})"


class EventBus:
    """In-process synchronous event bus.

    Listeners for one event type are kept in registration order.  Adding the
    same callable twice to the same event type keeps a single subscription.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventListener]] = {}

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def on(self, event_type: str, listener: EventListener) -> Subscription:
        """Subscribe *listener* to *event_type*.

        Parameters
        ----------
        event_type:
            Event name, e.g. ``"node:created"``.
        listener:
            Callable receiving a :class:`WorkflowEvent`.

        Returns
        -------
        Subscription
            Handle whose ``unsubscribe()`` removes the listener.
        """
        listeners = self._listeners.setdefault(event_type, [])
        if listener not in listeners:
            listeners.append(listener)
        return Subscription(self, event_type, listener)

    def once(self, event_type: str, listener: EventListener) -> Subscription:
        """Subscribe *listener* for a single delivery."""

        def _once(event: WorkflowEvent) -> None:
            self.off(event_type, _once)
            listener(event)

        return self.on(event_type, _once)

    def off(self, event_type: str, listener: EventListener) -> None:
        """Unsubscribe *listener*; unknown listeners are ignored."""
        listeners = self._listeners.get(event_type)
        if not listeners:
            return
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            del self._listeners[event_type]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def emit(self, event_type: str, payload: object = None, source: str | None = None) -> None:
        """Deliver an event to every listener of *event_type*.

        Runs over a snapshot of the listener list so listeners may
        subscribe or unsubscribe during dispatch.  Exceptions are logged
        and do not interrupt delivery to the remaining listeners.
        """
        listeners = self._listeners.get(event_type)
        if not listeners:
            return

        event = WorkflowEvent(type=event_type, payload=payload, source=source)
        for listener in list(listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                logger.exception("Error in event listener for %s", event_type)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def clear(self, event_type: str | None = None) -> None:
        """Drop the listeners of one event type, or of all types."""
        if event_type is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event_type, None)

    def listener_count(self, event_type: str) -> int:
        """Return the number of listeners subscribed to *event_type*."""
        return len(self._listeners.get(event_type, ()))

    def event_types(self) -> list[str]:
        """Return every event type with at least one listener."""
        return list(self._listeners)

    def __repr__(self) -> str:
        return f"EventBus(event_types={len(self._listeners)})"
