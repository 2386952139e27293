"""Submit workflow for the pizza order form.

SubmissionWorkflow.submit runs one submit attempt against a FormStateStore:

1. Move to ``validating`` and clear the visible errors and success message.
2. Validate the whole draft, collecting every failure.
3. On success, build the thank-you message, reset the draft, clear errors,
   and move to ``succeeded``.
4. On failure, fill the error map in schema field order, keep the draft,
   and move to ``failed``.
5. In every case, return to ``idle`` and drop the submitting flag.

Usage:
    >>> from pizzaform.store import FormStateStore
    >>> from pizzaform.submission import SubmissionWorkflow
    >>> store = FormStateStore()
    >>> store.set_field("fullName", "Al")
    >>> store.set_field("size", "M")
    >>> result = SubmissionWorkflow(store).submit()
    >>> result.state.value
    'failed'
    >>> store.errors
    {'fullName': 'full name must be at least 3 characters', 'toppings': 'At least one topping must be selected'}
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pizzaform.config import SIZE_LABELS
from pizzaform.draft import OrderDraft
from pizzaform.errors import SubmissionInProgressError
from pizzaform.store import FormStateStore
from pizzaform.types import EventType, SubmissionState
from pizzaform.validation import ValidationEngine

logger = logging.getLogger(__name__)


def describe_toppings(count: int) -> str:
    """Topping clause of the success message.

    Examples:
        >>> describe_toppings(0), describe_toppings(1), describe_toppings(3)
        ('no toppings', '1 topping', '3 toppings')
    """
    if count == 0:
        return "no toppings"
    return f"{count} topping{'s' if count > 1 else ''}"


def build_success_message(draft: OrderDraft) -> str:
    """Build the thank-you message for a validated draft.

    Examples:
        >>> build_success_message(OrderDraft(full_name=" Alice ", size="L", toppings=("Ham",)))
        'Thank you for your order, Alice! Your large pizza with 1 topping'
    """
    size_label = SIZE_LABELS.get(draft.size, draft.size)
    return (
        f"Thank you for your order, {draft.full_name.strip()}! "
        f"Your {size_label} pizza with {describe_toppings(len(draft.toppings))}"
    )


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submit attempt.

    Attributes:
        state: SUCCEEDED or FAILED
        message: Success message, or None on failure
        errors: Error map produced by the attempt (empty on success)
        order: The draft that was submitted
    """
    state: SubmissionState
    message: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)
    order: Optional[OrderDraft] = None

    @property
    def ok(self) -> bool:
        return self.state == SubmissionState.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "ok": self.ok,
            "state": self.state.value,
            "errors": dict(self.errors),
        }
        if self.message is not None:
            result["message"] = self.message
        if self.order is not None:
            result["order"] = self.order.to_record()
        return result


class SubmissionWorkflow:
    """Runs submit attempts against a form store.

    Attributes:
        store: The FormStateStore being submitted
        engine: Validation engine used for the full-record pass
    """

    def __init__(self, store: FormStateStore, engine: Optional[ValidationEngine] = None) -> None:
        self.store = store
        self.engine = engine or store.engine

    def submit(self) -> SubmissionResult:
        """Validate the current draft and apply the outcome to the store.

        Returns:
            SubmissionResult describing the attempt. The store itself is back
            in the ``idle`` state when this returns.

        Raises:
            SubmissionInProgressError: If a submit is already running on this
                store (for example one started from an event listener)
        """
        store = self.store
        if store.submitting or store.state_machine.is_busy():
            raise SubmissionInProgressError(
                f"Form {store.form_id} is already submitting"
            )

        store.submitting = True
        try:
            store.state_machine.transition_to(SubmissionState.VALIDATING)
            store.clear_errors()
            store.success_message = ""

            draft = store.draft
            validation = self.engine.validate_record(draft)

            if validation.is_valid:
                message = build_success_message(draft)
                store.state_machine.record_event(EventType.VALIDATION_PASSED)
                store.success_message = message
                store.reset_draft()
                store.clear_errors()
                store.last_outcome = SubmissionState.SUCCEEDED
                store.state_machine.transition_to(
                    SubmissionState.SUCCEEDED, {"message": message}
                )
                logger.info("Form %s submitted: %s", store.form_id, message)
                return SubmissionResult(state=SubmissionState.SUCCEEDED, message=message, order=draft)

            errors = validation.to_error_map()
            store.state_machine.record_event(
                EventType.VALIDATION_FAILED, {"errors": [e.to_dict() for e in validation.errors]}
            )
            store.replace_errors(errors)
            store.last_outcome = SubmissionState.FAILED
            store.state_machine.transition_to(SubmissionState.FAILED, {"fields": list(errors)})
            logger.info("Form %s rejected on %s", store.form_id, ", ".join(errors))
            return SubmissionResult(state=SubmissionState.FAILED, errors=errors, order=draft)
        finally:
            if store.state != SubmissionState.IDLE:
                store.state_machine.transition_to(SubmissionState.IDLE)
            store.submitting = False


__all__ = [
    "SubmissionWorkflow",
    "SubmissionResult",
    "build_success_message",
    "describe_toppings",
]
