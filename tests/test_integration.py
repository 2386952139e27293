"""Integration tests for the order form runtime.

Tests cover end-to-end scenarios driven through OrderFormRuntime input events:
- Short name rejected, draft kept
- Complete order accepted, form reset
- Eligibility gate vs. schema validation
- on_change mode while typing, then submitting
- Render snapshot and event subscriptions
"""

import pytest

from pizzaform import OrderFormRuntime
from pizzaform.config import FormConfig
from pizzaform.errors import ConfigurationError
from pizzaform.schema import LENIENT_ORDER_SCHEMA
from pizzaform.types import EventType, SubmissionState, ValidationMode


@pytest.fixture
def runtime():
    return OrderFormRuntime(form_id="form_it")


class TestHappyPath:
    """Test a complete, valid order."""

    def test_order_with_two_toppings(self, runtime):
        """Should accept the order, mention size and topping count, and reset."""
        runtime.handle_change("fullName", "Alice")
        runtime.handle_change("size", "L")
        runtime.handle_checkbox_change("Ham", True)
        runtime.handle_checkbox_change("Pineapple", True)
        assert runtime.can_submit() is True

        result = runtime.handle_submit()

        assert result.state == SubmissionState.SUCCEEDED
        assert "large" in result.message
        assert "2 toppings" in result.message
        snapshot = runtime.snapshot()
        assert snapshot["draft"] == {"fullName": "", "size": "", "toppings": []}
        assert snapshot["errors"] == {}
        assert snapshot["state"] == "idle"
        assert snapshot["submitting"] is False
        assert snapshot["lastOutcome"] == "succeeded"
        assert snapshot["successMessage"] == result.message
        assert snapshot["failureMessage"] is None
        assert snapshot["canSubmit"] is False


class TestRejectedOrder:
    """Test orders that fail schema validation."""

    def test_short_name_without_topping_rule(self):
        """Should flag only the name when toppings are not required."""
        runtime = OrderFormRuntime(FormConfig(schema=LENIENT_ORDER_SCHEMA))
        runtime.handle_change("fullName", "Al")
        runtime.handle_change("size", "M")

        result = runtime.handle_submit()

        assert result.state == SubmissionState.FAILED
        snapshot = runtime.snapshot()
        assert snapshot["errors"] == {"fullName": "full name must be at least 3 characters"}
        assert snapshot["draft"] == {"fullName": "Al", "size": "M", "toppings": []}
        assert snapshot["lastOutcome"] == "failed"
        assert snapshot["failureMessage"] == "Something went wrong"

    def test_eligible_but_missing_topping(self, runtime):
        """Should enable submit yet still reject an order without toppings."""
        runtime.handle_change("fullName", "Bob")
        runtime.handle_change("size", "S")
        assert runtime.can_submit() is True

        result = runtime.handle_submit()

        assert result.ok is False
        assert result.errors == {"toppings": "At least one topping must be selected"}

    def test_fix_and_resubmit(self, runtime):
        """Should accept the order after the customer fixes it."""
        runtime.handle_change("fullName", "Al")
        runtime.handle_change("size", "M")
        runtime.handle_checkbox_change("Mushrooms", True)
        assert runtime.handle_submit().ok is False

        runtime.handle_change("fullName", "Alan")
        result = runtime.handle_submit()
        assert result.ok is True
        assert result.message == "Thank you for your order, Alan! Your medium pizza with 1 topping"


class TestEligibilityGate:
    """Test the submit control gate."""

    def test_size_unset(self, runtime):
        """Should stay disabled without a size even with a long enough name."""
        runtime.handle_change("fullName", "Bob")
        assert runtime.can_submit() is False
        assert runtime.snapshot()["canSubmit"] is False


class TestOnChangeMode:
    """Test incremental validation through the runtime."""

    def test_typing_then_submitting(self):
        """Should show field errors while typing and a full map on submit."""
        runtime = OrderFormRuntime.from_dict({"validationMode": "on_change"})
        assert runtime.config.mode == ValidationMode.ON_CHANGE

        runtime.handle_change("fullName", "A")
        assert runtime.snapshot()["errors"] == {
            "fullName": "full name must be at least 3 characters"
        }
        runtime.handle_change("fullName", "Ann")
        assert runtime.snapshot()["errors"] == {}

        result = runtime.handle_submit()
        assert list(result.errors) == ["size", "toppings"]

    def test_failure_banner_waits_for_submit(self):
        """Should show field errors while typing but the banner only after a failed submit."""
        runtime = OrderFormRuntime.from_dict({"validationMode": "on_change"})
        runtime.handle_change("fullName", "A")
        snapshot = runtime.snapshot()
        assert snapshot["errors"]
        assert snapshot["lastOutcome"] is None
        assert snapshot["failureMessage"] is None

        runtime.handle_submit()
        assert runtime.snapshot()["failureMessage"] == "Something went wrong"

    def test_change_event_with_single_topping(self, runtime):
        """Should accept a field-change event carrying one topping name."""
        runtime.handle_change("toppings", "Ham")
        assert runtime.snapshot()["draft"]["toppings"] == ["Ham"]

    def test_invalid_config_rejected(self):
        """Should refuse malformed configuration data."""
        with pytest.raises(ConfigurationError):
            OrderFormRuntime.from_dict({"validationMode": "sometimes"})


class TestRendering:
    """Test the data handed to the rendering layer."""

    def test_topping_options_reflect_selection(self, runtime):
        """Should list every catalog topping with its checked flag."""
        runtime.handle_checkbox_change("Green Peppers", True)
        options = runtime.snapshot()["toppingOptions"]
        assert [o["text"] for o in options] == [
            "Pepperoni", "Green Peppers", "Pineapple", "Mushrooms", "Ham",
        ]
        assert [o["checked"] for o in options] == [False, True, False, False, False]
        assert options[1]["id"] == "2"

    def test_subscriptions(self, runtime):
        """Should deliver events to typed and wildcard subscribers."""
        typed, everything = [], []
        runtime.subscribe(typed.append, EventType.SUBMISSION_FAILED)
        runtime.subscribe(everything.append)

        runtime.handle_change("fullName", "Al")
        runtime.handle_submit()

        assert [e.type for e in typed] == [EventType.SUBMISSION_FAILED]
        assert everything[0].type == EventType.FIELD_UPDATED
        assert everything[-1].type == EventType.FORM_IDLE
        assert all(e.form_id == "form_it" for e in everything)

    def test_subscribe_with_string_type(self, runtime):
        """Should accept the event type as its string value."""
        seen = []
        runtime.subscribe(seen.append, "topping.toggled")
        runtime.handle_checkbox_change("Ham", True)
        assert len(seen) == 1
