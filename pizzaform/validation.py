"""Validation engine for the pizza order form.

This module provides a ValidationEngine that evaluates a Schema against single
field values or whole order records and produces structured results made of
ConstraintViolation objects.

Two entry points share one set of constraint checks:
- validate_field: first failing constraint of one field, declaration order
- validate_record: every failure of every field, schema order, no fail-fast

Validation never mutates its input. Names are trimmed before their length is
measured, but the trimmed value is never written back to the draft.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pizzaform.draft import OrderDraft
from pizzaform.errors import AggregateValidationFailure, ConstraintViolation
from pizzaform.schema import FieldConstraint, Schema
from pizzaform.types import CONSTRAINT_ERROR_CODES, ConstraintKind

logger = logging.getLogger(__name__)

Record = Union[OrderDraft, Mapping[str, Any]]


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a field or a record against a Schema.

    Attributes:
        is_valid: Whether every checked constraint passed
        errors: Violations in schema field order, then constraint order

    Examples:
        >>> from pizzaform.schema import ORDER_SCHEMA
        >>> engine = ValidationEngine(ORDER_SCHEMA)
        >>> engine.validate_field("fullName", "Alice").is_valid
        True
        >>> engine.validate_field("fullName", "Al").message
        'full name must be at least 3 characters'
    """
    is_valid: bool
    errors: Tuple[ConstraintViolation, ...]

    @property
    def message(self) -> Optional[str]:
        """Message of the first violation, or None if valid."""
        return self.errors[0].message if self.errors else None

    def to_error_map(self) -> Dict[str, str]:
        """One message per failing field, first violation wins."""
        if self.is_valid:
            return {}
        return AggregateValidationFailure(self.errors).to_error_map()

    def raise_for_errors(self) -> None:
        """Raise AggregateValidationFailure if any constraint failed."""
        if not self.is_valid:
            raise AggregateValidationFailure(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }


def _measure(value: Any) -> int:
    if isinstance(value, str):
        return len(value.strip())
    return len(value)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def _check_required(constraint: FieldConstraint, value: Any) -> bool:
    return not _is_blank(value)


def _check_min_length(constraint: FieldConstraint, value: Any) -> bool:
    return _measure(value) >= constraint.bound


def _check_max_length(constraint: FieldConstraint, value: Any) -> bool:
    return _measure(value) <= constraint.bound


def _check_one_of(constraint: FieldConstraint, value: Any) -> bool:
    return value in constraint.allowed


def _check_min_count(constraint: FieldConstraint, value: Any) -> bool:
    return len(set(value)) >= constraint.bound


_CHECKS: Dict[ConstraintKind, Callable[[FieldConstraint, Any], bool]] = {
    ConstraintKind.REQUIRED: _check_required,
    ConstraintKind.MIN_LENGTH: _check_min_length,
    ConstraintKind.MAX_LENGTH: _check_max_length,
    ConstraintKind.ONE_OF: _check_one_of,
    ConstraintKind.MIN_COUNT: _check_min_count,
}


class ValidationEngine:
    """Evaluates a Schema against order form values.

    The engine is stateless apart from the schema it was built with, so one
    instance can be shared by every form using that schema.

    Attributes:
        schema: The Schema to validate against

    Examples:
        >>> from pizzaform.schema import ORDER_SCHEMA
        >>> engine = ValidationEngine(ORDER_SCHEMA)
        >>> result = engine.validate_record({"fullName": "Al", "size": "M", "toppings": ["Ham"]})
        >>> result.to_error_map()
        {'fullName': 'full name must be at least 3 characters'}
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def check(self, field: str, constraint: FieldConstraint, value: Any) -> Optional[ConstraintViolation]:
        """Evaluate one constraint against one value.

        Absent values (None) only fail ``required``; every other kind lets
        them through so a missing field reports the required message instead
        of failing on a value it cannot measure.

        Returns:
            A ConstraintViolation, or None if the constraint holds
        """
        if value is None and constraint.kind != ConstraintKind.REQUIRED:
            return None
        if _CHECKS[constraint.kind](constraint, value):
            return None
        return ConstraintViolation(
            field=field,
            code=CONSTRAINT_ERROR_CODES[constraint.kind],
            message=constraint.message,
            received=list(value) if isinstance(value, (set, frozenset, tuple)) else value,
        )

    def validate_field(self, name: str, value: Any, record: Optional[Record] = None) -> ValidationResult:
        """Validate one field value, stopping at the first failing constraint.

        Args:
            name: Form field name
            value: Candidate value for that field
            record: The rest of the record, for constraints that look at
                sibling fields (none of the built-in kinds do)

        Returns:
            ValidationResult holding at most one violation
        """
        for constraint in self.schema.constraints_for(name):
            violation = self.check(name, constraint, value)
            if violation is not None:
                logger.debug("Field %s failed %s", name, constraint.kind.value)
                return ValidationResult(is_valid=False, errors=(violation,))
        return ValidationResult(is_valid=True, errors=())

    def validate_record(self, record: Record) -> ValidationResult:
        """Validate every constrained field of a record, collecting all failures.

        Args:
            record: An OrderDraft or a mapping keyed by form field name.
                Missing keys count as absent values.

        Returns:
            ValidationResult with every violation, in schema field order and
            constraint order within a field
        """
        values = record.to_record() if isinstance(record, OrderDraft) else record
        errors: List[ConstraintViolation] = []

        for name, constraints in self.schema.items():
            value = values.get(name)
            for constraint in constraints:
                violation = self.check(name, constraint, value)
                if violation is not None:
                    errors.append(violation)

        if errors:
            logger.debug(
                "Record failed validation on %s", ", ".join(AggregateValidationFailure(errors).fields)
            )
        return ValidationResult(is_valid=not errors, errors=tuple(errors))


__all__ = [
    "ValidationEngine",
    "ValidationResult",
]
