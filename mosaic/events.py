"""In-process event bus for engine notifications.

The engine never performs presentation side effects itself (sounds,
highlights, toasts). It emits events and the presentation layer subscribes.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EngineEvent(str, Enum):
    """Types of engine events."""

    # Snapping
    SNAP_APPLIED = "snap-applied"

    # Placement lifecycle
    PLACEMENT_CREATED = "placement.created"
    PLACEMENT_REJECTED = "placement.rejected"
    PLACEMENT_DELETED = "placement.deleted"
    MOSAIC_CLEARED = "mosaic.cleared"


@dataclass
class EventPayload:
    """Event payload delivered to handlers."""

    event: EngineEvent
    data: dict
    timestamp: datetime = field(default_factory=datetime.utcnow)
    event_id: str = ""

    def __post_init__(self):
        if not self.event_id:
            self.event_id = secrets.token_hex(8)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.event_id,
            "event": self.event.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


Handler = Callable[[EventPayload], Any]


class EventBus:
    """Synchronous publish/subscribe for engine events.

    Handlers run in the emitting thread, in registration order. A failing
    handler is logged and does not affect the operation that emitted.
    """

    def __init__(self):
        self._handlers: dict[EngineEvent, list[Handler]] = {}

    def subscribe(self, event: EngineEvent, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: EngineEvent, handler: Handler) -> bool:
        """Remove a handler. Returns False if it was not registered."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def on_event(self, event: EngineEvent) -> Callable[[Handler], Handler]:
        """
        Decorator to register a handler.

        Usage:
            @bus.on_event(EngineEvent.SNAP_APPLIED)
            def play_click(payload):
                ...
        """
        def decorator(func: Handler) -> Handler:
            self.subscribe(event, func)
            return func
        return decorator

    def emit(self, event: EngineEvent, data: dict | None = None) -> EventPayload:
        """
        Emit an event to all subscribed handlers.

        Args:
            event: The type of event
            data: Event data payload

        Returns:
            The delivered payload
        """
        payload = EventPayload(event=event, data=data or {})

        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler %r failed for %s", handler, event.value)

        return payload

    def clear(self) -> None:
        """Drop all handlers."""
        self._handlers.clear()


# Global instance for convenience
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus
