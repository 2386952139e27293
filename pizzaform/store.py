"""Form state store for the pizza order form.

The FormStateStore owns everything the rendering layer reads: the current
OrderDraft, the error map, the submitting flag, the last success message and
the submit state machine. All changes go through its methods, which keep
those pieces consistent and emit a FormEvent for each of them.

Two validation modes are supported (see ValidationMode):
- on_submit: edits never touch the error map; only a submit fills it
- on_change: each edit re-validates the edited field and inserts or clears
  that field's key in the error map, leaving the other keys alone

Usage:
    >>> from pizzaform.store import FormStateStore
    >>> store = FormStateStore()
    >>> store.set_field("fullName", "Bob")
    >>> store.compute_eligibility()
    False
    >>> store.set_field("size", "M")
    >>> store.compute_eligibility()
    True
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from pizzaform.config import DEFAULT_CONFIG, FormConfig
from pizzaform.draft import OrderDraft
from pizzaform.errors import UnknownFieldError, UnknownToppingError
from pizzaform.events import EventEmitter, FormEvent
from pizzaform.schema import FULL_NAME_MIN_LENGTH
from pizzaform.state_machine import SubmissionStateMachine
from pizzaform.types import (
    FORM_FIELDS,
    FULL_NAME,
    SIZE,
    TOPPINGS,
    EventType,
    Size,
    SubmissionState,
    ValidationMode,
)
from pizzaform.validation import ValidationEngine, ValidationResult

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Something went wrong"

_ELIGIBLE_SIZES = frozenset(s.value for s in Size)


class FormStateStore:
    """Single owner of the order form's mutable state.

    Attributes:
        form_id: Identifier stamped on every event
        config: Immutable form configuration
        engine: Validation engine built from config.schema
        state_machine: Submit lifecycle tracker
        success_message: Message from the last successful submit ("" if none)
        last_outcome: SUCCEEDED or FAILED after a submit, None before any
    """

    def __init__(
        self,
        config: FormConfig = DEFAULT_CONFIG,
        engine: Optional[ValidationEngine] = None,
        emitter: Optional[EventEmitter] = None,
        form_id: Optional[str] = None,
    ) -> None:
        self.form_id = form_id or f"form_{uuid.uuid4().hex[:16]}"
        self.config = config
        self.engine = engine or ValidationEngine(config.schema)
        self.state_machine = SubmissionStateMachine(form_id=self.form_id, emitter=emitter)
        self.success_message = ""
        self.last_outcome: Optional[SubmissionState] = None
        self.submitting = False
        self._draft = OrderDraft()
        self._errors: Dict[str, str] = {}
        self._revisions: Dict[str, int] = {name: 0 for name in FORM_FIELDS}

    @property
    def mode(self) -> ValidationMode:
        return self.config.mode

    @property
    def draft(self) -> OrderDraft:
        """A copy of the current draft; edit through set_field/toggle_topping."""
        return self._draft.copy()

    @property
    def errors(self) -> Dict[str, str]:
        """A copy of the current error map."""
        return dict(self._errors)

    @property
    def state(self) -> SubmissionState:
        return self.state_machine.state

    @property
    def failure_message(self) -> Optional[str]:
        """Banner text shown when the last submit failed and its errors are still up."""
        if not self.submitting and self.last_outcome == SubmissionState.FAILED and self._errors:
            return FAILURE_MESSAGE
        return None

    def get_events(self) -> List[FormEvent]:
        return self.state_machine.get_events()

    def set_field(self, name: str, value: Any) -> None:
        """Overwrite one field of the draft.

        fullName and size take strings. toppings takes an iterable of topping
        names, or a single name as a plain string, and replaces the whole
        selection.

        In on_change mode the field is re-validated and only its key in the
        error map changes.

        Raises:
            UnknownFieldError: If name is not a form field
            UnknownToppingError: If a topping is outside the catalog
        """
        if name == FULL_NAME:
            self._draft.full_name = "" if value is None else str(value)
        elif name == SIZE:
            self._draft.size = "" if value is None else str(value)
        elif name == TOPPINGS:
            if isinstance(value, str):
                toppings = [value] if value else []
            else:
                toppings = list(value or ())
            for topping in toppings:
                self._check_topping(topping)
            self._draft.toppings = tuple(dict.fromkeys(toppings))
        else:
            raise UnknownFieldError(name)

        self._revisions[name] += 1
        self.state_machine.record_event(
            EventType.FIELD_UPDATED, {"field": name, "value": self._draft.get(name)}
        )
        if self.mode == ValidationMode.ON_CHANGE:
            self._revalidate(name)

    def toggle_topping(self, name: str, selected: bool) -> None:
        """Select or deselect one topping.

        Selecting a topping that is already selected, or deselecting one that
        is not, leaves the selection unchanged and emits nothing.

        Raises:
            UnknownToppingError: If name is outside the catalog
        """
        self._check_topping(name)
        current = self._draft.toppings
        if selected and name not in current:
            self._draft.toppings = current + (name,)
        elif not selected and name in current:
            self._draft.toppings = tuple(t for t in current if t != name)
        else:
            return

        self._revisions[TOPPINGS] += 1
        self.state_machine.record_event(
            EventType.TOPPING_TOGGLED, {"topping": name, "selected": bool(selected)}
        )
        if self.mode == ValidationMode.ON_CHANGE:
            self._revalidate(TOPPINGS)

    def compute_eligibility(self) -> bool:
        """Whether the submit control should be enabled.

        Only checks the name length and the size. Topping count and the name's
        upper bound are left to schema validation at submit time, so an
        eligible form can still fail to submit.
        """
        return (
            len(self._draft.full_name.strip()) >= FULL_NAME_MIN_LENGTH
            and self._draft.size in _ELIGIBLE_SIZES
        )

    def begin_field_validation(self, name: str) -> int:
        """Return the revision a deferred validation of this field is based on."""
        if name not in self._revisions:
            raise UnknownFieldError(name)
        return self._revisions[name]

    def apply_field_result(self, name: str, revision: int, result: ValidationResult) -> bool:
        """Apply a per-field result unless a newer edit has superseded it.

        Args:
            name: Field the result belongs to
            revision: Value returned by begin_field_validation
            result: Outcome of validating that field

        Returns:
            True if the error map was updated, False if the result was stale
        """
        if revision != self.begin_field_validation(name):
            logger.debug("Discarding stale validation of %s (revision %d)", name, revision)
            return False
        if result.is_valid:
            self._errors.pop(name, None)
        else:
            self._errors[name] = result.message
        self.state_machine.record_event(
            EventType.FIELD_VALIDATED, {"field": name, "error": self._errors.get(name)}
        )
        return True

    def replace_errors(self, errors: Mapping[str, str]) -> None:
        """Replace the whole error map."""
        self._errors = dict(errors)

    def clear_errors(self) -> None:
        self._errors = {}

    def reset_draft(self) -> None:
        """Return every field to its default value."""
        self._draft = OrderDraft()
        for name in self._revisions:
            self._revisions[name] += 1
        self.state_machine.record_event(EventType.FORM_RESET)

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the store for the rendering layer."""
        return {
            "formId": self.form_id,
            "draft": self._draft.to_record(),
            "errors": dict(self._errors),
            "state": self.state.value,
            "submitting": self.submitting,
            "lastOutcome": self.last_outcome.value if self.last_outcome else None,
            "successMessage": self.success_message,
            "failureMessage": self.failure_message,
            "canSubmit": self.compute_eligibility(),
        }

    def _revalidate(self, name: str) -> None:
        revision = self.begin_field_validation(name)
        result = self.engine.validate_field(name, self._draft.get(name), self._draft)
        self.apply_field_result(name, revision, result)

    def _check_topping(self, name: str) -> None:
        available = list(self.config.topping_names)
        if available and name not in available:
            raise UnknownToppingError(name, available)


__all__ = [
    "FormStateStore",
    "FAILURE_MESSAGE",
]
