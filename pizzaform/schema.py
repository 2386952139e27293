"""Declarative field schema for the pizza order form.

A Schema maps each form field to an ordered tuple of FieldConstraint objects.
Constraints are pure data: a kind, an optional bound or allowed-value set, and
the message surfaced when the constraint fails. Evaluation lives in
pizzaform.validation.

Declaration order matters. Only the first failing constraint of a field is
shown next to it, so ``min_length`` declared before ``required`` means an
empty name reports "too short" rather than "required".

Schemas can also be loaded from plain data (for example a JSON config file)
with Schema.from_dict. The data is checked against SCHEMA_DEFINITION_SCHEMA,
a JSON Schema, before any constraint is built.

Usage:
    >>> from pizzaform.schema import ORDER_SCHEMA
    >>> [c.kind.value for c in ORDER_SCHEMA.constraints_for("fullName")]
    ['min_length', 'max_length', 'required']
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

import jsonschema
from jsonschema import Draft7Validator

from pizzaform.errors import SchemaDefinitionError
from pizzaform.types import FORM_FIELDS, FULL_NAME, SIZE, TOPPINGS, ConstraintKind, Size


# Messages shown to the customer, keyed by the rule that produced them
VALIDATION_MESSAGES: Mapping[str, str] = MappingProxyType({
    "fullNameTooShort": "full name must be at least 3 characters",
    "fullNameTooLong": "full name must be at most 20 characters",
    "fullNameRequired": "Full name is required",
    "sizeIncorrect": "size must be S or M or L",
    "sizeRequired": "Size is required",
    "toppingsTooFew": "At least one topping must be selected",
})

FULL_NAME_MIN_LENGTH = 3
FULL_NAME_MAX_LENGTH = 20
MIN_TOPPINGS = 1

_BOUNDED_KINDS = (ConstraintKind.MIN_LENGTH, ConstraintKind.MAX_LENGTH, ConstraintKind.MIN_COUNT)


@dataclass(frozen=True)
class FieldConstraint:
    """A single rule attached to a form field.

    Attributes:
        kind: What the rule checks
        message: Message reported when the rule fails
        bound: Length or count bound (min_length, max_length, min_count only)
        allowed: Allowed values (one_of only)

    Examples:
        >>> rule = FieldConstraint(ConstraintKind.MIN_LENGTH, "too short", bound=3)
        >>> rule.bound
        3
        >>> FieldConstraint(ConstraintKind.ONE_OF, "bad size", allowed=("S", "M")).allowed
        ('S', 'M')
    """
    kind: ConstraintKind
    message: str
    bound: Optional[int] = None
    allowed: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        """Normalize the kind and reject inconsistent rule definitions."""
        if isinstance(self.kind, str) and not isinstance(self.kind, ConstraintKind):
            object.__setattr__(self, "kind", ConstraintKind(self.kind))
        if self.allowed is not None and not isinstance(self.allowed, tuple):
            object.__setattr__(self, "allowed", tuple(self.allowed))

        if not self.message:
            raise SchemaDefinitionError(f"Constraint '{self.kind.value}' needs a message")

        if self.kind in _BOUNDED_KINDS:
            if not isinstance(self.bound, int) or isinstance(self.bound, bool) or self.bound < 0:
                raise SchemaDefinitionError(
                    f"Constraint '{self.kind.value}' needs a non-negative integer bound, "
                    f"got {self.bound!r}"
                )
        elif self.bound is not None:
            raise SchemaDefinitionError(f"Constraint '{self.kind.value}' does not take a bound")

        if self.kind == ConstraintKind.ONE_OF:
            if not self.allowed:
                raise SchemaDefinitionError("Constraint 'one_of' needs at least one allowed value")
        elif self.allowed is not None:
            raise SchemaDefinitionError(
                f"Constraint '{self.kind.value}' does not take allowed values"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.bound is not None:
            result["bound"] = self.bound
        if self.allowed is not None:
            result["allowed"] = list(self.allowed)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldConstraint":
        """Create FieldConstraint from dict."""
        allowed = data.get("allowed")
        return cls(
            kind=ConstraintKind(data["kind"]),
            message=data["message"],
            bound=data.get("bound"),
            allowed=tuple(allowed) if allowed is not None else None,
        )


def min_length(bound: int, message: str) -> FieldConstraint:
    return FieldConstraint(ConstraintKind.MIN_LENGTH, message, bound=bound)


def max_length(bound: int, message: str) -> FieldConstraint:
    return FieldConstraint(ConstraintKind.MAX_LENGTH, message, bound=bound)


def required(message: str) -> FieldConstraint:
    return FieldConstraint(ConstraintKind.REQUIRED, message)


def one_of(allowed: Iterable[str], message: str) -> FieldConstraint:
    return FieldConstraint(ConstraintKind.ONE_OF, message, allowed=tuple(allowed))


def min_count(bound: int, message: str) -> FieldConstraint:
    return FieldConstraint(ConstraintKind.MIN_COUNT, message, bound=bound)


# JSON Schema for schema definitions loaded from config data
SCHEMA_DEFINITION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "fields": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "enum": list(FORM_FIELDS)},
                    "constraints": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "kind": {"type": "string", "enum": [k.value for k in ConstraintKind]},
                                "message": {"type": "string", "minLength": 1},
                                "bound": {"type": "integer", "minimum": 0},
                                "allowed": {
                                    "type": "array",
                                    "items": {"type": "string"},
                                    "minItems": 1,
                                },
                            },
                            "required": ["kind", "message"],
                            "additionalProperties": False,
                        },
                    },
                },
                "required": ["name", "constraints"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["fields"],
    "additionalProperties": False,
}

_definition_validator = Draft7Validator(SCHEMA_DEFINITION_SCHEMA)


class Schema:
    """Ordered, immutable mapping from field name to its constraints.

    Field iteration follows declaration order, which is also the order in
    which full-record validation reports failures.

    Attributes:
        field_names: Constrained fields in declaration order

    Examples:
        >>> schema = Schema({"fullName": [required("name please")]})
        >>> schema.field_names
        ('fullName',)
        >>> schema.constraints_for("size")
        ()
    """

    def __init__(self, fields: Mapping[str, Sequence[FieldConstraint]]) -> None:
        """Build a schema from a field -> constraints mapping.

        Args:
            fields: Constraints per field; insertion order is kept

        Raises:
            SchemaDefinitionError: If a key is not one of the form's fields or
                a value is not a FieldConstraint
        """
        built: Dict[str, Tuple[FieldConstraint, ...]] = {}
        for name, constraints in fields.items():
            if name not in FORM_FIELDS:
                raise SchemaDefinitionError(
                    f"Schema field '{name}' is not a form field. "
                    f"Form fields are: {', '.join(FORM_FIELDS)}"
                )
            constraints = tuple(constraints)
            for constraint in constraints:
                if not isinstance(constraint, FieldConstraint):
                    raise SchemaDefinitionError(
                        f"Schema field '{name}' holds {constraint!r}, expected FieldConstraint"
                    )
            built[name] = constraints
        self._fields = MappingProxyType(built)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(self._fields)

    def constraints_for(self, name: str) -> Tuple[FieldConstraint, ...]:
        """Return the ordered constraints of a field (empty if unconstrained)."""
        return self._fields.get(name, ())

    def items(self) -> Iterator[Tuple[str, Tuple[FieldConstraint, ...]]]:
        return iter(self._fields.items())

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return list(self._fields.items()) == list(other._fields.items())

    def __hash__(self) -> int:
        return hash(tuple(self._fields.items()))

    def __repr__(self) -> str:
        return f"Schema(fields={list(self._fields)!r})"

    def without(self, name: str) -> "Schema":
        """Return a copy of this schema with one field left unconstrained."""
        return Schema({k: v for k, v in self._fields.items() if k != name})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the definition format accepted by from_dict."""
        return {
            "fields": [
                {"name": name, "constraints": [c.to_dict() for c in constraints]}
                for name, constraints in self._fields.items()
            ]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schema":
        """Load a schema from plain definition data.

        Args:
            data: {"fields": [{"name": ..., "constraints": [...]}, ...]}

        Returns:
            A new Schema

        Raises:
            SchemaDefinitionError: If the data does not match
                SCHEMA_DEFINITION_SCHEMA, repeats a field, or describes an
                inconsistent constraint
        """
        try:
            _definition_validator.validate(data)
        except jsonschema.ValidationError as exc:
            location = ".".join(str(p) for p in exc.absolute_path)
            raise SchemaDefinitionError(
                f"Invalid schema definition at '{location or '<root>'}': {exc.message}"
            ) from exc

        fields: Dict[str, Tuple[FieldConstraint, ...]] = {}
        for entry in data["fields"]:
            name = entry["name"]
            if name in fields:
                raise SchemaDefinitionError(f"Schema field '{name}' is declared more than once")
            fields[name] = tuple(FieldConstraint.from_dict(c) for c in entry["constraints"])
        return cls(fields)


ORDER_SCHEMA = Schema({
    FULL_NAME: (
        min_length(FULL_NAME_MIN_LENGTH, VALIDATION_MESSAGES["fullNameTooShort"]),
        max_length(FULL_NAME_MAX_LENGTH, VALIDATION_MESSAGES["fullNameTooLong"]),
        required(VALIDATION_MESSAGES["fullNameRequired"]),
    ),
    SIZE: (
        one_of((s.value for s in Size), VALIDATION_MESSAGES["sizeIncorrect"]),
        required(VALIDATION_MESSAGES["sizeRequired"]),
    ),
    TOPPINGS: (
        min_count(MIN_TOPPINGS, VALIDATION_MESSAGES["toppingsTooFew"]),
    ),
})

# Same rules without the topping minimum
LENIENT_ORDER_SCHEMA = ORDER_SCHEMA.without(TOPPINGS)


__all__ = [
    "FieldConstraint",
    "Schema",
    "SCHEMA_DEFINITION_SCHEMA",
    "VALIDATION_MESSAGES",
    "ORDER_SCHEMA",
    "LENIENT_ORDER_SCHEMA",
    "min_length",
    "max_length",
    "required",
    "one_of",
    "min_count",
]
