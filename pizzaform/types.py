"""Core type definitions for the pizza order form.

This module defines the fundamental types used throughout the package:
- SubmissionState: Lifecycle states of a submit attempt
- ConstraintKind: Kinds of per-field schema constraints
- FieldErrorCode: Codes attached to individual constraint violations
- ValidationMode: When the form re-validates its fields
- EventType: Event types emitted by the form
- Size: Allowed pizza sizes

These types form the contract between the rendering layer and the form
engine.
"""

from enum import Enum
from typing import List

from typing_extensions import TypedDict


FULL_NAME = "fullName"
SIZE = "size"
TOPPINGS = "toppings"

# Every field the order form renders, in display order
FORM_FIELDS = (FULL_NAME, SIZE, TOPPINGS)


class SubmissionState(str, Enum):
    """Submit lifecycle states.

    Idle -> Validating -> Succeeded | Failed -> Idle.
    """
    IDLE = "idle"
    VALIDATING = "validating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ConstraintKind(str, Enum):
    """Kinds of constraint a schema field can declare."""
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    REQUIRED = "required"
    ONE_OF = "one_of"
    MIN_COUNT = "min_count"


class FieldErrorCode(str, Enum):
    """Codes for individual constraint violations.

    Each constraint kind maps to exactly one code (see CONSTRAINT_ERROR_CODES).
    """
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    REQUIRED = "required"
    INVALID_VALUE = "invalid_value"
    TOO_FEW = "too_few"


CONSTRAINT_ERROR_CODES = {
    ConstraintKind.MIN_LENGTH: FieldErrorCode.TOO_SHORT,
    ConstraintKind.MAX_LENGTH: FieldErrorCode.TOO_LONG,
    ConstraintKind.REQUIRED: FieldErrorCode.REQUIRED,
    ConstraintKind.ONE_OF: FieldErrorCode.INVALID_VALUE,
    ConstraintKind.MIN_COUNT: FieldErrorCode.TOO_FEW,
}


class ValidationMode(str, Enum):
    """When field errors are computed.

    ON_SUBMIT: the error map stays empty until a submit attempt.
    ON_CHANGE: every edit re-validates the edited field only.
    """
    ON_SUBMIT = "on_submit"
    ON_CHANGE = "on_change"


class EventType(str, Enum):
    """Event types emitted by the form store and submission workflow."""
    FIELD_UPDATED = "field.updated"
    TOPPING_TOGGLED = "topping.toggled"
    FIELD_VALIDATED = "field.validated"
    VALIDATION_PASSED = "validation.passed"
    VALIDATION_FAILED = "validation.failed"
    SUBMISSION_STARTED = "submission.started"
    SUBMISSION_SUCCEEDED = "submission.succeeded"
    SUBMISSION_FAILED = "submission.failed"
    FORM_IDLE = "form.idle"
    FORM_RESET = "form.reset"


class Size(str, Enum):
    """Pizza sizes offered by the form."""
    SMALL = "S"
    MEDIUM = "M"
    LARGE = "L"


# Unselected size, as rendered by the empty select option
SIZE_UNSET = ""


class OrderRecord(TypedDict, total=False):
    """Plain-data view of an order draft, keyed by form field name."""
    fullName: str
    size: str
    toppings: List[str]


__all__ = [
    "FULL_NAME",
    "SIZE",
    "TOPPINGS",
    "FORM_FIELDS",
    "SubmissionState",
    "ConstraintKind",
    "FieldErrorCode",
    "CONSTRAINT_ERROR_CODES",
    "ValidationMode",
    "EventType",
    "Size",
    "SIZE_UNSET",
    "OrderRecord",
]
