"""Event system for the pizza order form.

This module provides the event record and the event emitter used to tell the
rendering layer (and tests) what happened to the form. Field edits, topping
toggles, validation passes, and submit state transitions each emit a typed
FormEvent.

Events are immutable. The store keeps them in an append-only log that can be
serialized to JSONL.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from dateutil import parser as date_parser

from .types import EventType, SubmissionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single event in the life of an order form.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        type: Event type from EventType enum
        form_id: ID of the form that emitted the event
        ts: UTC timestamp when the event occurred
        state: Submit state after this event
        payload: Optional event-specific data (field name, errors, message)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=EventType.FIELD_UPDATED,
        ...     form_id="form_001",
        ...     ts=datetime.now(timezone.utc),
        ...     state=SubmissionState.IDLE,
        ...     payload={"field": "fullName"},
        ... )
        >>> event.type.value
        'field.updated'
    """
    event_id: str
    type: EventType
    form_id: str
    ts: datetime
    state: SubmissionState
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Normalize enum fields given as strings."""
        if isinstance(self.state, str):
            object.__setattr__(self, "state", SubmissionState(self.state))
        if isinstance(self.type, str):
            object.__setattr__(self, "type", EventType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as an ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "formId": self.form_id,
            "ts": self.ts.isoformat(),
            "state": self.state.value,
        }
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Convert event to a single-line JSON string."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormEvent":
        """Create FormEvent from dictionary (camelCase keys)."""
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            form_id=data["formId"],
            ts=date_parser.isoparse(data["ts"]),
            state=SubmissionState(data["state"]),
            payload=data.get("payload"),
        )


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously, on the same call stack as the edit or
submit that produced the event.
"""


class EventEmitter:
    """Dispatches form events to subscribed listeners.

    Features:
    - Type-specific subscriptions
    - Wildcard subscriptions (all events)
    - Synchronous dispatch in registration order
    - Error isolation: a failing listener is logged and skipped

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.FIELD_UPDATED, seen.append)
        >>> emitter.listener_count()
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to every event type."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type. Unknown listeners are ignored."""
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        """Remove a wildcard subscription. Unknown listeners are ignored."""
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to type-specific listeners, then wildcard listeners.

        A listener that raises is logged with its traceback; the remaining
        listeners still run and the caller never sees the exception.
        """
        for listener in list(self._listeners.get(event.type, [])) + list(self._any_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, event.type.value)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count listeners for one type, or all listeners including wildcards."""
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(v) for v in self._listeners.values())


__all__ = [
    "FormEvent",
    "EventType",
    "EventListener",
    "EventEmitter",
]
