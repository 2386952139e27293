"""Process-wide configuration for the pizza order form.

The topping catalog, size labels, validation mode and schema are built once
at startup and never mutated afterwards. FormConfig.from_dict accepts the
same settings as plain data (for example parsed from JSON) and checks them
against CONFIG_SCHEMA with jsonschema before building anything.

Usage:
    >>> from pizzaform.config import FormConfig
    >>> config = FormConfig.from_dict({"validationMode": "on_change", "requireTopping": False})
    >>> config.mode.value
    'on_change'
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import jsonschema
from jsonschema import Draft7Validator

from pizzaform.errors import ConfigurationError, SchemaDefinitionError
from pizzaform.schema import LENIENT_ORDER_SCHEMA, ORDER_SCHEMA, SCHEMA_DEFINITION_SCHEMA, Schema
from pizzaform.types import Size, ValidationMode


@dataclass(frozen=True)
class ToppingOption:
    """One checkbox in the topping list.

    Attributes:
        topping_id: Stable identifier used as the checkbox key
        text: Display name, also the value stored in the draft
    """
    topping_id: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"id": self.topping_id, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToppingOption":
        """Create ToppingOption from dict."""
        return cls(topping_id=str(data["id"]), text=data["text"])


TOPPING_CATALOG: Tuple[ToppingOption, ...] = (
    ToppingOption("1", "Pepperoni"),
    ToppingOption("2", "Green Peppers"),
    ToppingOption("3", "Pineapple"),
    ToppingOption("4", "Mushrooms"),
    ToppingOption("5", "Ham"),
)

SIZE_LABELS: Mapping[str, str] = MappingProxyType({
    Size.SMALL.value: "small",
    Size.MEDIUM.value: "medium",
    Size.LARGE.value: "large",
})


CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "validationMode": {"type": "string", "enum": [m.value for m in ValidationMode]},
        "requireTopping": {"type": "boolean"},
        "schema": SCHEMA_DEFINITION_SCHEMA,
        "toppings": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": ["string", "integer"]},
                    "text": {"type": "string", "minLength": 1},
                },
                "required": ["id", "text"],
                "additionalProperties": False,
            },
            "minItems": 1,
        },
    },
    "additionalProperties": False,
}

_config_validator = Draft7Validator(CONFIG_SCHEMA)


@dataclass(frozen=True)
class FormConfig:
    """Immutable settings for one order form.

    Attributes:
        mode: When field errors are computed
        schema: Field constraints used for validation
        toppings: Topping catalog offered as checkboxes

    Examples:
        >>> FormConfig().mode
        <ValidationMode.ON_SUBMIT: 'on_submit'>
        >>> [t.text for t in FormConfig().toppings][:2]
        ['Pepperoni', 'Green Peppers']
    """
    mode: ValidationMode = ValidationMode.ON_SUBMIT
    schema: Schema = ORDER_SCHEMA
    toppings: Tuple[ToppingOption, ...] = TOPPING_CATALOG

    def __post_init__(self):
        if isinstance(self.mode, str) and not isinstance(self.mode, ValidationMode):
            object.__setattr__(self, "mode", ValidationMode(self.mode))
        object.__setattr__(self, "toppings", tuple(self.toppings))
        names = self.topping_names
        if len(set(names)) != len(names):
            raise ConfigurationError("Topping names must be unique", path="toppings")

    @property
    def topping_names(self) -> Tuple[str, ...]:
        return tuple(t.text for t in self.toppings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the format accepted by from_dict."""
        return {
            "validationMode": self.mode.value,
            "schema": self.schema.to_dict(),
            "toppings": [t.to_dict() for t in self.toppings],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FormConfig":
        """Build a FormConfig from plain data.

        Args:
            data: Settings with optional keys validationMode, requireTopping,
                schema and toppings. An inline schema wins over requireTopping.

        Returns:
            A new FormConfig; omitted settings keep their defaults

        Raises:
            ConfigurationError: If the data does not match CONFIG_SCHEMA or
                the inline schema is inconsistent
        """
        data = data or {}
        try:
            _config_validator.validate(data)
        except jsonschema.ValidationError as exc:
            path = ".".join(str(p) for p in exc.absolute_path)
            raise ConfigurationError(
                f"Invalid form configuration at '{path or '<root>'}': {exc.message}",
                path=path,
            ) from exc

        if "schema" in data:
            try:
                schema = Schema.from_dict(data["schema"])
            except SchemaDefinitionError as exc:
                raise ConfigurationError(str(exc), path="schema") from exc
        elif data.get("requireTopping", True):
            schema = ORDER_SCHEMA
        else:
            schema = LENIENT_ORDER_SCHEMA

        toppings = TOPPING_CATALOG
        if "toppings" in data:
            toppings = tuple(ToppingOption.from_dict(t) for t in data["toppings"])

        return cls(
            mode=ValidationMode(data.get("validationMode", ValidationMode.ON_SUBMIT.value)),
            schema=schema,
            toppings=toppings,
        )


DEFAULT_CONFIG = FormConfig()


__all__ = [
    "ToppingOption",
    "TOPPING_CATALOG",
    "SIZE_LABELS",
    "CONFIG_SCHEMA",
    "FormConfig",
    "DEFAULT_CONFIG",
]
