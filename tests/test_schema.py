"""Unit tests for schema definitions.

Tests cover:
- FieldConstraint consistency checks
- Schema field ordering and lookup
- Built-in order schemas
- Loading schemas from plain data
"""

import pytest

from pizzaform.errors import SchemaDefinitionError
from pizzaform.schema import (
    LENIENT_ORDER_SCHEMA,
    ORDER_SCHEMA,
    VALIDATION_MESSAGES,
    FieldConstraint,
    Schema,
    max_length,
    min_count,
    min_length,
    one_of,
    required,
)
from pizzaform.types import ConstraintKind


class TestFieldConstraint:
    """Test constraint construction rules."""

    def test_bounded_constraint_keeps_bound(self):
        """Should keep the bound of a length constraint."""
        constraint = min_length(3, "too short")
        assert constraint.kind == ConstraintKind.MIN_LENGTH
        assert constraint.bound == 3
        assert constraint.allowed is None

    def test_kind_given_as_string_is_normalized(self):
        """Should accept the kind as its string value."""
        constraint = FieldConstraint("max_length", "too long", bound=20)
        assert constraint.kind == ConstraintKind.MAX_LENGTH

    def test_one_of_converts_allowed_to_tuple(self):
        """Should store allowed values as a tuple."""
        constraint = FieldConstraint(ConstraintKind.ONE_OF, "bad", allowed=["S", "M"])
        assert constraint.allowed == ("S", "M")

    def test_missing_bound_rejected(self):
        """Should reject a bounded kind without a bound."""
        with pytest.raises(SchemaDefinitionError, match="bound"):
            FieldConstraint(ConstraintKind.MIN_COUNT, "too few")

    def test_negative_bound_rejected(self):
        """Should reject a negative bound."""
        with pytest.raises(SchemaDefinitionError):
            min_length(-1, "too short")

    def test_bound_on_required_rejected(self):
        """Should reject a bound on a kind that does not take one."""
        with pytest.raises(SchemaDefinitionError, match="does not take a bound"):
            FieldConstraint(ConstraintKind.REQUIRED, "required", bound=1)

    def test_empty_allowed_rejected(self):
        """Should reject one_of without allowed values."""
        with pytest.raises(SchemaDefinitionError):
            one_of([], "bad size")

    def test_allowed_on_min_length_rejected(self):
        """Should reject allowed values on a non one_of kind."""
        with pytest.raises(SchemaDefinitionError, match="allowed values"):
            FieldConstraint(ConstraintKind.MIN_LENGTH, "short", bound=1, allowed=("x",))

    def test_empty_message_rejected(self):
        """Should require a failure message."""
        with pytest.raises(SchemaDefinitionError, match="message"):
            required("")

    def test_to_dict_from_dict(self):
        """Should serialize and restore a constraint."""
        constraint = one_of(["S", "M", "L"], "size must be S or M or L")
        data = constraint.to_dict()
        assert data == {
            "kind": "one_of",
            "message": "size must be S or M or L",
            "allowed": ["S", "M", "L"],
        }
        assert FieldConstraint.from_dict(data) == constraint


class TestSchema:
    """Test the Schema container."""

    def test_field_order_is_declaration_order(self):
        """Should iterate fields in the order they were declared."""
        schema = Schema({
            "toppings": [min_count(1, "pick one")],
            "fullName": [required("name")],
        })
        assert schema.field_names == ("toppings", "fullName")

    def test_constraints_for_unconstrained_field(self):
        """Should return an empty tuple for a field without constraints."""
        schema = Schema({"fullName": [required("name")]})
        assert schema.constraints_for("toppings") == ()
        assert "toppings" not in schema

    def test_unknown_field_rejected(self):
        """Should refuse keys that are not form fields."""
        with pytest.raises(SchemaDefinitionError, match="not a form field"):
            Schema({"email": [required("email")]})

    def test_non_constraint_value_rejected(self):
        """Should refuse values that are not FieldConstraint objects."""
        with pytest.raises(SchemaDefinitionError, match="expected FieldConstraint"):
            Schema({"fullName": ["required"]})

    def test_without_drops_one_field(self):
        """Should derive a copy with one field unconstrained."""
        schema = ORDER_SCHEMA.without("toppings")
        assert schema.field_names == ("fullName", "size")
        assert ORDER_SCHEMA.field_names == ("fullName", "size", "toppings")

    def test_schemas_compare_by_content(self):
        """Should compare equal when fields and constraints match."""
        assert ORDER_SCHEMA.without("toppings") == LENIENT_ORDER_SCHEMA
        assert ORDER_SCHEMA != LENIENT_ORDER_SCHEMA


class TestOrderSchema:
    """Test the built-in order schemas."""

    def test_full_name_constraint_order(self):
        """Should check min length, then max length, then required."""
        kinds = [c.kind for c in ORDER_SCHEMA.constraints_for("fullName")]
        assert kinds == [
            ConstraintKind.MIN_LENGTH,
            ConstraintKind.MAX_LENGTH,
            ConstraintKind.REQUIRED,
        ]

    def test_full_name_bounds_and_messages(self):
        """Should carry the 3..20 bounds and their messages."""
        short, long_, req = ORDER_SCHEMA.constraints_for("fullName")
        assert (short.bound, short.message) == (3, "full name must be at least 3 characters")
        assert (long_.bound, long_.message) == (20, "full name must be at most 20 characters")
        assert req.message == "Full name is required"

    def test_size_constraints(self):
        """Should restrict size to S, M, L before checking presence."""
        size_rule, req = ORDER_SCHEMA.constraints_for("size")
        assert size_rule.allowed == ("S", "M", "L")
        assert size_rule.message == VALIDATION_MESSAGES["sizeIncorrect"]
        assert req.kind == ConstraintKind.REQUIRED

    def test_topping_minimum(self):
        """Should require at least one topping in the strict schema only."""
        (rule,) = ORDER_SCHEMA.constraints_for("toppings")
        assert rule.kind == ConstraintKind.MIN_COUNT
        assert rule.bound == 1
        assert LENIENT_ORDER_SCHEMA.constraints_for("toppings") == ()


class TestSchemaFromDict:
    """Test loading schemas from plain data."""

    def test_round_trip_of_order_schema(self):
        """Should rebuild an equal schema from its own definition."""
        assert Schema.from_dict(ORDER_SCHEMA.to_dict()) == ORDER_SCHEMA

    def test_load_custom_definition(self):
        """Should build constraints from a hand-written definition."""
        schema = Schema.from_dict({
            "fields": [
                {
                    "name": "fullName",
                    "constraints": [
                        {"kind": "max_length", "bound": 10, "message": "ten at most"},
                    ],
                },
                {"name": "toppings", "constraints": []},
            ]
        })
        assert schema.field_names == ("fullName", "toppings")
        assert schema.constraints_for("fullName")[0].bound == 10

    def test_unknown_kind_rejected(self):
        """Should reject a constraint kind that does not exist."""
        with pytest.raises(SchemaDefinitionError, match="fields.0.constraints.0.kind"):
            Schema.from_dict({
                "fields": [
                    {"name": "fullName", "constraints": [{"kind": "regex", "message": "x"}]},
                ]
            })

    def test_unknown_field_name_rejected(self):
        """Should reject a field name outside the form."""
        with pytest.raises(SchemaDefinitionError, match="Invalid schema definition"):
            Schema.from_dict({"fields": [{"name": "email", "constraints": []}]})

    def test_missing_fields_key_rejected(self):
        """Should report the root when the fields key is missing."""
        with pytest.raises(SchemaDefinitionError, match="<root>"):
            Schema.from_dict({})

    def test_duplicate_field_rejected(self):
        """Should reject a field declared twice."""
        with pytest.raises(SchemaDefinitionError, match="more than once"):
            Schema.from_dict({
                "fields": [
                    {"name": "size", "constraints": []},
                    {"name": "size", "constraints": []},
                ]
            })

    def test_inconsistent_constraint_rejected(self):
        """Should reject a structurally valid but inconsistent constraint."""
        with pytest.raises(SchemaDefinitionError, match="bound"):
            Schema.from_dict({
                "fields": [
                    {"name": "fullName", "constraints": [{"kind": "min_length", "message": "x"}]},
                ]
            })
