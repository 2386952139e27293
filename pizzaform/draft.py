"""The in-progress order record edited by the form."""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Tuple

from pizzaform.types import FULL_NAME, SIZE, SIZE_UNSET, TOPPINGS, OrderRecord


def _unique(names: Iterable[str]) -> Tuple[str, ...]:
    # Set semantics, first-seen order
    return tuple(dict.fromkeys(names))


@dataclass
class OrderDraft:
    """Current values of the order form.

    Toppings behave as a set (no duplicates) but keep the order in which they
    were selected, so rendering and success messages are stable.

    Attributes:
        full_name: Customer name exactly as typed
        size: "S", "M", "L", or "" when no size is chosen
        toppings: Selected topping names

    Examples:
        >>> draft = OrderDraft(full_name="Alice", size="L", toppings=("Ham", "Ham"))
        >>> draft.toppings
        ('Ham',)
        >>> draft.to_record()
        {'fullName': 'Alice', 'size': 'L', 'toppings': ['Ham']}
    """
    full_name: str = ""
    size: str = SIZE_UNSET
    toppings: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        self.toppings = _unique(self.toppings)

    def is_empty(self) -> bool:
        """True when every field still holds its default."""
        return self == OrderDraft()

    def copy(self) -> "OrderDraft":
        return OrderDraft(full_name=self.full_name, size=self.size, toppings=self.toppings)

    def get(self, name: str) -> Any:
        """Return a field value by its form field name."""
        return self.to_record()[name]

    def to_record(self) -> OrderRecord:
        """Convert to the form-field keyed record used by validation."""
        return {
            FULL_NAME: self.full_name,
            SIZE: self.size,
            TOPPINGS: list(self.toppings),
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "OrderDraft":
        """Create OrderDraft from a form-field keyed record.

        Missing keys fall back to the field defaults.
        """
        return cls(
            full_name=record.get(FULL_NAME) or "",
            size=record.get(SIZE) or SIZE_UNSET,
            toppings=tuple(record.get(TOPPINGS) or ()),
        )


__all__ = [
    "OrderDraft",
]
