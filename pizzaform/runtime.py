"""OrderFormRuntime orchestrator for the pizza order form.

This module provides the OrderFormRuntime class that wires configuration,
validation engine, form state store and submission workflow together, and
exposes them as the three input events a rendering layer produces:

- handle_change(name, value): a text input or select changed
- handle_checkbox_change(topping, checked): a topping checkbox changed
- handle_submit(): the form was submitted

Everything the rendering layer needs to draw the form comes back from
snapshot().

Usage:
    >>> from pizzaform.runtime import OrderFormRuntime
    >>> runtime = OrderFormRuntime()
    >>> runtime.handle_change("fullName", "Alice")
    >>> runtime.handle_change("size", "L")
    >>> runtime.handle_checkbox_change("Ham", True)
    >>> runtime.handle_submit().message
    'Thank you for your order, Alice! Your large pizza with 1 topping'
"""

import logging
from typing import Any, Dict, Optional, Union

from pizzaform.config import DEFAULT_CONFIG, FormConfig
from pizzaform.events import EventEmitter, EventListener
from pizzaform.store import FormStateStore
from pizzaform.submission import SubmissionResult, SubmissionWorkflow
from pizzaform.types import EventType
from pizzaform.validation import ValidationEngine

logger = logging.getLogger(__name__)


class OrderFormRuntime:
    """Entry point for one mounted order form.

    Attributes:
        config: Form configuration in effect
        engine: Shared validation engine
        emitter: Event emitter the rendering layer can subscribe to
        store: Form state
        workflow: Submit workflow bound to the store

    Examples:
        >>> runtime = OrderFormRuntime.from_dict({"validationMode": "on_change"})
        >>> runtime.handle_change("fullName", "Al")
        >>> runtime.snapshot()["errors"]
        {'fullName': 'full name must be at least 3 characters'}
    """

    def __init__(self, config: FormConfig = DEFAULT_CONFIG, form_id: Optional[str] = None):
        self.config = config
        self.engine = ValidationEngine(config.schema)
        self.emitter = EventEmitter()
        self.store = FormStateStore(
            config=config, engine=self.engine, emitter=self.emitter, form_id=form_id
        )
        self.workflow = SubmissionWorkflow(self.store, self.engine)
        logger.debug(
            "Mounted form %s (mode=%s, fields=%s)",
            self.store.form_id,
            config.mode.value,
            ", ".join(config.schema.field_names),
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None, form_id: Optional[str] = None) -> "OrderFormRuntime":
        """Mount a form from plain configuration data (see FormConfig.from_dict)."""
        return cls(FormConfig.from_dict(data), form_id=form_id)

    @property
    def form_id(self) -> str:
        return self.store.form_id

    def subscribe(self, listener: EventListener, event_type: Union[EventType, str, None] = None) -> None:
        """Register a listener for one event type, or for all events."""
        if event_type is None:
            self.emitter.on_any(listener)
        else:
            self.emitter.on(EventType(event_type), listener)

    def handle_change(self, name: str, value: Any) -> None:
        """Field-change event from a text input or select."""
        self.store.set_field(name, value)

    def handle_checkbox_change(self, topping: str, checked: bool) -> None:
        """Checkbox-change event for one topping."""
        self.store.toggle_topping(topping, checked)

    def handle_submit(self) -> SubmissionResult:
        """Submit event. Returns the outcome of the attempt."""
        return self.workflow.submit()

    def can_submit(self) -> bool:
        return self.store.compute_eligibility()

    def snapshot(self) -> Dict[str, Any]:
        """Everything the rendering layer reads, as plain data.

        Returns:
            Store state (see FormStateStore.to_dict) plus the topping options,
            each flagged with whether it is currently checked.
        """
        data = self.store.to_dict()
        selected = set(data["draft"]["toppings"])
        data["toppingOptions"] = [
            dict(option.to_dict(), checked=option.text in selected)
            for option in self.config.toppings
        ]
        return data


__all__ = [
    "OrderFormRuntime",
]
