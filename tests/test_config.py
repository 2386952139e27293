"""Unit tests for form configuration.

Tests cover:
- Defaults (mode, schema, topping catalog, size labels)
- Loading configuration from plain data
- Rejection of malformed configuration
"""

import pytest

from pizzaform.config import (
    DEFAULT_CONFIG,
    SIZE_LABELS,
    TOPPING_CATALOG,
    FormConfig,
    ToppingOption,
)
from pizzaform.errors import ConfigurationError
from pizzaform.schema import LENIENT_ORDER_SCHEMA, ORDER_SCHEMA
from pizzaform.types import ValidationMode


class TestDefaults:
    """Test the built-in configuration."""

    def test_default_config(self):
        """Should validate on submit with the strict schema."""
        assert DEFAULT_CONFIG.mode == ValidationMode.ON_SUBMIT
        assert DEFAULT_CONFIG.schema == ORDER_SCHEMA
        assert DEFAULT_CONFIG.toppings == TOPPING_CATALOG

    def test_topping_catalog(self):
        """Should offer the five toppings with stable ids."""
        assert [(t.topping_id, t.text) for t in TOPPING_CATALOG] == [
            ("1", "Pepperoni"),
            ("2", "Green Peppers"),
            ("3", "Pineapple"),
            ("4", "Mushrooms"),
            ("5", "Ham"),
        ]

    def test_size_labels(self):
        """Should label each size for the success message."""
        assert dict(SIZE_LABELS) == {"S": "small", "M": "medium", "L": "large"}

    def test_size_labels_are_read_only(self):
        """Should refuse runtime mutation."""
        with pytest.raises(TypeError):
            SIZE_LABELS["XL"] = "extra large"

    def test_config_is_frozen(self):
        """Should refuse attribute assignment."""
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.mode = ValidationMode.ON_CHANGE

    def test_duplicate_topping_names_rejected(self):
        """Should reject a catalog that repeats a name."""
        with pytest.raises(ConfigurationError, match="unique"):
            FormConfig(toppings=(ToppingOption("1", "Ham"), ToppingOption("2", "Ham")))


class TestFromDict:
    """Test loading configuration data."""

    def test_empty_data_gives_defaults(self):
        """Should fall back to defaults for missing settings."""
        assert FormConfig.from_dict({}) == DEFAULT_CONFIG
        assert FormConfig.from_dict(None) == DEFAULT_CONFIG

    def test_on_change_mode(self):
        """Should read the validation mode."""
        config = FormConfig.from_dict({"validationMode": "on_change"})
        assert config.mode == ValidationMode.ON_CHANGE

    def test_require_topping_false_uses_lenient_schema(self):
        """Should pick the schema without a topping minimum."""
        assert FormConfig.from_dict({"requireTopping": False}).schema == LENIENT_ORDER_SCHEMA
        assert FormConfig.from_dict({"requireTopping": True}).schema == ORDER_SCHEMA

    def test_inline_schema(self):
        """Should build an inline schema definition."""
        config = FormConfig.from_dict({
            "requireTopping": True,
            "schema": {
                "fields": [
                    {"name": "size", "constraints": [
                        {"kind": "one_of", "allowed": ["M", "L"], "message": "M or L only"},
                    ]},
                ]
            },
        })
        assert config.schema.field_names == ("size",)
        assert config.schema.constraints_for("size")[0].allowed == ("M", "L")

    def test_custom_toppings(self):
        """Should read a custom catalog, accepting numeric ids."""
        config = FormConfig.from_dict({"toppings": [{"id": 7, "text": "Olives"}]})
        assert config.toppings == (ToppingOption("7", "Olives"),)
        assert config.topping_names == ("Olives",)

    def test_round_trip(self):
        """Should rebuild an equal config from its own data."""
        config = FormConfig(mode=ValidationMode.ON_CHANGE, schema=LENIENT_ORDER_SCHEMA)
        assert FormConfig.from_dict(config.to_dict()) == config

    def test_unknown_mode_rejected(self):
        """Should reject an unknown validation mode."""
        with pytest.raises(ConfigurationError) as exc_info:
            FormConfig.from_dict({"validationMode": "on_blur"})
        assert exc_info.value.path == "validationMode"

    def test_unknown_key_rejected(self):
        """Should reject settings it does not know."""
        with pytest.raises(ConfigurationError, match="<root>"):
            FormConfig.from_dict({"theme": "dark"})

    def test_bad_topping_entry_rejected(self):
        """Should point at the offending topping entry."""
        with pytest.raises(ConfigurationError) as exc_info:
            FormConfig.from_dict({"toppings": [{"id": "1"}]})
        assert exc_info.value.path == "toppings.0"

    def test_inconsistent_inline_schema_rejected(self):
        """Should wrap schema definition errors."""
        with pytest.raises(ConfigurationError) as exc_info:
            FormConfig.from_dict({
                "schema": {"fields": [
                    {"name": "size", "constraints": [{"kind": "one_of", "message": "x"}]},
                ]},
            })
        assert exc_info.value.path == "schema"
