"""Submit state machine for the pizza order form.

A submit attempt walks a short, fixed path:

    idle -> validating -> succeeded -> idle
                       -> failed    -> idle

The machine enforces those transitions, records a FormEvent for each one and
forwards it to an optional EventEmitter.

Usage:
    >>> from pizzaform.state_machine import SubmissionStateMachine
    >>> from pizzaform.types import SubmissionState
    >>> sm = SubmissionStateMachine(form_id="form_123")
    >>> sm.state
    <SubmissionState.IDLE: 'idle'>
    >>> sm.transition_to(SubmissionState.VALIDATING)
    >>> sm.state
    <SubmissionState.VALIDATING: 'validating'>
    >>> len(sm.get_events())
    1
"""

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Set

from pizzaform.events import EventEmitter, FormEvent
from pizzaform.types import EventType, SubmissionState

logger = logging.getLogger(__name__)

# Events retained per form; older ones are dropped first
MAX_EVENTS = 500


class InvalidStateTransitionError(Exception):
    """Raised when attempting a transition the submit lifecycle does not allow.

    Attributes:
        current_state: The state before the attempted transition
        target_state: The target state that was attempted
    """

    def __init__(self, current_state: SubmissionState, target_state: SubmissionState, message: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(message)


STATE_TO_EVENT_TYPE: Dict[SubmissionState, EventType] = {
    SubmissionState.IDLE: EventType.FORM_IDLE,
    SubmissionState.VALIDATING: EventType.SUBMISSION_STARTED,
    SubmissionState.SUCCEEDED: EventType.SUBMISSION_SUCCEEDED,
    SubmissionState.FAILED: EventType.SUBMISSION_FAILED,
}


VALID_TRANSITIONS: Dict[SubmissionState, Set[SubmissionState]] = {
    SubmissionState.IDLE: {SubmissionState.VALIDATING},
    # validating -> idle only when an attempt is aborted by an exception
    SubmissionState.VALIDATING: {
        SubmissionState.SUCCEEDED,
        SubmissionState.FAILED,
        SubmissionState.IDLE,
    },
    SubmissionState.SUCCEEDED: {SubmissionState.IDLE},
    SubmissionState.FAILED: {SubmissionState.IDLE},
}


@dataclass
class SubmissionStateMachine:
    """Tracks where a form is in its submit lifecycle.

    Attributes:
        form_id: Identifier of the form this machine belongs to
        state: Current submit state
        emitter: Optional emitter that receives every transition event
        max_events: How many recent events the in-memory log keeps

    Examples:
        >>> sm = SubmissionStateMachine(form_id="form_123")
        >>> sm.can_transition_to(SubmissionState.VALIDATING)
        True
        >>> sm.can_transition_to(SubmissionState.SUCCEEDED)
        False
    """

    form_id: str
    state: SubmissionState = SubmissionState.IDLE
    emitter: Optional[EventEmitter] = field(default=None, repr=False, compare=False)
    max_events: int = field(default=MAX_EVENTS, repr=False, compare=False)
    _events: Deque[FormEvent] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._events = deque(maxlen=self.max_events)

    def can_transition_to(self, target_state: SubmissionState) -> bool:
        """Check if a transition to target_state is allowed from the current state."""
        return target_state in VALID_TRANSITIONS.get(self.state, set())

    def transition_to(self, target_state: SubmissionState, payload: Optional[Dict[str, Any]] = None) -> None:
        """Move to target_state and emit the matching event.

        Args:
            target_state: The state to transition to
            payload: Extra event data merged into the transition payload

        Raises:
            InvalidStateTransitionError: If the transition is not allowed
        """
        if not self.can_transition_to(target_state):
            raise InvalidStateTransitionError(
                current_state=self.state,
                target_state=target_state,
                message=(
                    f"Invalid state transition: cannot transition from "
                    f"'{self.state.value}' to '{target_state.value}'. "
                    f"Valid transitions from '{self.state.value}' are: "
                    f"{', '.join(sorted(s.value for s in VALID_TRANSITIONS[self.state]))}"
                ),
            )

        old_state = self.state
        self.state = target_state
        logger.debug("Form %s: %s -> %s", self.form_id, old_state.value, target_state.value)

        event_payload: Dict[str, Any] = {"from_state": old_state.value, "to_state": target_state.value}
        if payload:
            event_payload.update(payload)
        self.record_event(STATE_TO_EVENT_TYPE[target_state], event_payload)

    def is_busy(self) -> bool:
        """True while a submit is between idle and its outcome."""
        return self.state == SubmissionState.VALIDATING

    def record_event(self, event_type: EventType, payload: Optional[Dict[str, Any]] = None) -> FormEvent:
        """Append an event stamped with the current state and forward it to the emitter."""
        event = FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            form_id=self.form_id,
            ts=datetime.now(timezone.utc),
            state=self.state,
            payload=payload,
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)
        return event

    def get_events(self) -> List[FormEvent]:
        """Return the retained events, oldest first. Only the newest max_events are kept."""
        return list(self._events)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the state machine to a dictionary.

        Examples:
            >>> SubmissionStateMachine(form_id="form_123").to_dict()
            {'formId': 'form_123', 'state': 'idle'}
        """
        return {
            "formId": self.form_id,
            "state": self.state.value if isinstance(self.state, SubmissionState) else self.state,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubmissionStateMachine":
        """Deserialize a state machine from a dictionary."""
        state = data["state"]
        if isinstance(state, str):
            state = SubmissionState(state)
        return cls(form_id=data["formId"], state=state)


__all__ = [
    "SubmissionStateMachine",
    "InvalidStateTransitionError",
    "VALID_TRANSITIONS",
    "MAX_EVENTS",
]
