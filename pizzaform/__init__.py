"""Pizza order form validation and state engine.

pizzaform is the logic behind a client-side pizza order form:
- Declarative field schema with per-constraint messages
- Validation engine with per-field and whole-record passes
- Form state store with on-submit or on-change validation
- Submit workflow with a small, enforced state machine
- Event stream for everything that changes the form

Rendering, styling and input wiring are left to the caller, which feeds input
events into OrderFormRuntime and draws from its snapshot.

Basic usage:
    >>> from pizzaform.runtime import OrderFormRuntime
    >>> runtime = OrderFormRuntime()
    >>> runtime.handle_change("fullName", "Bob")
    >>> runtime.can_submit()
    False
"""

__version__ = "0.1.0"
__author__ = "Pizza Form Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from pizzaform.runtime import OrderFormRuntime

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "OrderFormRuntime",
]
