"""Structured error types for the pizza order form.

Validation failures are ordinary results, not exceptions: a single field
failing one schema rule is a ConstraintViolation, and a full-record pass
produces an AggregateValidationFailure holding all of them. Both are
recoverable and end up as messages next to the offending fields.

The exception classes at the bottom of this module are raised only for
misuse of the API (unknown fields, malformed schema or config data, a second
submit while one is running).
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pizzaform.types import FieldErrorCode


@dataclass(frozen=True)
class ConstraintViolation:
    """A single field failing a single schema constraint.

    Attributes:
        field: Form field name (e.g., "fullName")
        code: Error code derived from the failed constraint kind
        message: Human-readable message declared on the constraint
        received: Optional - the value that was checked

    Examples:
        >>> violation = ConstraintViolation(
        ...     field="fullName",
        ...     code=FieldErrorCode.TOO_SHORT,
        ...     message="full name must be at least 3 characters",
        ...     received="Al",
        ... )
        >>> violation.field
        'fullName'
    """
    field: str
    code: FieldErrorCode
    message: str
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "field": self.field,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.received is not None:
            result["received"] = self.received
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConstraintViolation":
        """Create ConstraintViolation from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        return cls(
            field=data["field"],
            code=code,
            message=data["message"],
            received=data.get("received"),
        )


class AggregateValidationFailure(Exception):
    """All constraint violations found by one full-record validation pass.

    Violations are kept in schema field order, then constraint order within a
    field. It can be raised (see ValidationResult.raise_for_errors) but is
    normally handed around as data.

    Attributes:
        violations: Ordered violations
    """

    def __init__(self, violations: Iterable[ConstraintViolation]):
        self.violations: Tuple[ConstraintViolation, ...] = tuple(violations)
        super().__init__(str(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AggregateValidationFailure):
            return NotImplemented
        return self.violations == other.violations

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self.violations)

    def __str__(self) -> str:
        return "; ".join(f"{v.field}: {v.message}" for v in self.violations)

    @property
    def fields(self) -> List[str]:
        """Distinct failing field names in the order they first failed."""
        seen: List[str] = []
        for violation in self.violations:
            if violation.field not in seen:
                seen.append(violation.field)
        return seen

    def to_error_map(self) -> Dict[str, str]:
        """Collapse to one message per field.

        The first violation of a field wins, matching what per-field
        validation surfaces for the same value.
        """
        error_map: Dict[str, str] = {}
        for violation in self.violations:
            error_map.setdefault(violation.field, violation.message)
        return error_map

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"violations": [v.to_dict() for v in self.violations]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregateValidationFailure":
        """Create AggregateValidationFailure from dict."""
        return cls(ConstraintViolation.from_dict(v) for v in data["violations"])


class SchemaDefinitionError(ValueError):
    """Raised when a schema or one of its constraints is malformed."""


class ConfigurationError(ValueError):
    """Raised when form configuration data fails validation.

    Attributes:
        path: Dot-notation location of the offending value, if known
    """

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)


class UnknownFieldError(KeyError):
    """Raised when an edit targets a field the form does not have."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown form field '{self.name}'"


class UnknownToppingError(ValueError):
    """Raised when a topping outside the configured catalog is toggled."""

    def __init__(self, name: str, available: List[str]):
        self.name = name
        self.available = available
        super().__init__(
            f"Unknown topping '{name}'. Available toppings are: {', '.join(available)}"
        )


class SubmissionInProgressError(RuntimeError):
    """Raised when submit is invoked while another submit is still running."""


__all__ = [
    "ConstraintViolation",
    "AggregateValidationFailure",
    "SchemaDefinitionError",
    "ConfigurationError",
    "UnknownFieldError",
    "UnknownToppingError",
    "SubmissionInProgressError",
]
