"""
Tests for AI command validation.

The validator must never guess: anything outside the fixed
enumerations turns the command into UNKNOWN.
"""

import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.models.commands import CommandIntent
from finance_tracker.models.finance import Category, Frequency, TransactionType
from finance_tracker.validation import CommandValidator


TODAY = date(2024, 4, 15)


@pytest.fixture
def validator():
    return CommandValidator(today=TODAY)


class TestTransactionCommands:
    """Tests for TRANSACTION payloads."""

    def test_valid_transaction(self, validator):
        """Test a complete transaction payload."""
        command, issues = validator.validate({
            "intent": "TRANSACTION",
            "data": {
                "type": "expense",
                "amount": 12.5,
                "category": "food",
                "date": "2024-04-14",
                "description": "Lunch",
            },
        })
        assert command.intent == CommandIntent.TRANSACTION
        draft = command.transaction_data
        assert draft.type == TransactionType.EXPENSE
        assert draft.amount == Decimal("12.5")
        assert draft.category == Category.FOOD
        assert draft.transaction_date == date(2024, 4, 14)
        assert draft.description == "Lunch"
        assert issues == []

    def test_missing_fields_get_defaults_with_warnings(self, validator):
        """Test that type, category and date fall back and are reported."""
        command, issues = validator.validate({
            "intent": "TRANSACTION",
            "data": {"amount": 5},
        })
        draft = command.transaction_data
        assert draft.type == TransactionType.EXPENSE
        assert draft.category == Category.OTHER
        assert draft.transaction_date == TODAY
        assert {i.field for i in issues} == {"type", "category", "date"}
        assert all(i.severity == "warning" for i in issues)

    def test_unrecognized_category_is_unknown(self, validator):
        """Test that a category outside the list is not guessed."""
        command, issues = validator.validate({
            "intent": "TRANSACTION",
            "data": {"amount": 5, "category": "Groceries"},
        })
        assert command.intent == CommandIntent.UNKNOWN
        assert "Groceries" in command.error
        assert any(i.issue_type == "unrecognized" for i in issues)

    def test_category_match_is_case_sensitive(self, validator):
        """Test that 'Food' does not match 'food'."""
        command, _ = validator.validate({
            "intent": "TRANSACTION",
            "data": {"amount": 5, "category": "Food"},
        })
        assert command.intent == CommandIntent.UNKNOWN

    def test_non_positive_amount_is_unknown(self, validator):
        """Test that zero amounts are rejected."""
        command, _ = validator.validate({
            "intent": "TRANSACTION",
            "data": {"amount": 0},
        })
        assert command.intent == CommandIntent.UNKNOWN
        assert "greater than zero" in command.error

    def test_non_numeric_amount_is_unknown(self, validator):
        """Test that text amounts are rejected."""
        command, _ = validator.validate({
            "intent": "TRANSACTION",
            "data": {"amount": "twelve"},
        })
        assert command.intent == CommandIntent.UNKNOWN

    def test_bad_date_is_unknown(self, validator):
        """Test that malformed dates are rejected."""
        command, _ = validator.validate({
            "intent": "TRANSACTION",
            "data": {"amount": 5, "date": "14/04/2024"},
        })
        assert command.intent == CommandIntent.UNKNOWN
        assert "YYYY-MM-DD" in command.error


class TestSubscriptionCommands:
    """Tests for SUBSCRIPTION payloads."""

    def test_valid_subscription(self, validator):
        """Test a complete subscription payload."""
        command, _ = validator.validate({
            "intent": "SUBSCRIPTION",
            "data": {
                "name": "Netflix",
                "amount": 15.99,
                "frequency": "monthly",
                "category": "entertainment",
                "nextPaymentDate": "2024-05-01",
            },
        })
        assert command.intent == CommandIntent.SUBSCRIPTION
        draft = command.subscription_data
        assert draft.name == "Netflix"
        assert draft.amount == Decimal("15.99")
        assert draft.frequency == Frequency.MONTHLY
        assert draft.next_payment_date == date(2024, 5, 1)

    def test_unrecognized_frequency_is_unknown(self, validator):
        """Test that frequencies outside the list are rejected."""
        command, _ = validator.validate({
            "intent": "SUBSCRIPTION",
            "data": {
                "name": "Gym",
                "amount": 30,
                "frequency": "Mensual",
                "nextPaymentDate": "2024-05-01",
            },
        })
        assert command.intent == CommandIntent.UNKNOWN
        assert "Mensual" in command.error

    def test_missing_next_payment_date_is_unknown(self, validator):
        """Test that subscriptions need a next payment date."""
        command, issues = validator.validate({
            "intent": "SUBSCRIPTION",
            "data": {"name": "Gym", "amount": 30, "frequency": "monthly"},
        })
        assert command.intent == CommandIntent.UNKNOWN
        assert any(i.field == "nextPaymentDate" for i in issues)

    def test_missing_name_is_unknown(self, validator):
        """Test that subscriptions need a name."""
        command, _ = validator.validate({
            "intent": "SUBSCRIPTION",
            "data": {"amount": 30, "frequency": "monthly", "nextPaymentDate": "2024-05-01"},
        })
        assert command.intent == CommandIntent.UNKNOWN
        assert "name is required" in command.error


class TestEnvelope:
    """Tests for the outer response shape."""

    def test_unknown_intent_keeps_model_error(self, validator):
        """Test that the model's own explanation is passed on."""
        command, _ = validator.validate({"intent": "UNKNOWN", "error": "Say that again?"})
        assert command.intent == CommandIntent.UNKNOWN
        assert command.error == "Say that again?"

    def test_unknown_intent_without_error_gets_default(self, validator):
        """Test the default explanation."""
        command, _ = validator.validate({"intent": "UNKNOWN"})
        assert command.error == "I could not understand the request."

    def test_unrecognized_intent(self, validator):
        """Test that made-up intents are rejected."""
        command, issues = validator.validate({"intent": "BUDGET", "data": {}})
        assert command.intent == CommandIntent.UNKNOWN
        assert issues[0].field == "intent"

    def test_missing_data(self, validator):
        """Test that a known intent without data is rejected."""
        command, _ = validator.validate({"intent": "TRANSACTION"})
        assert command.intent == CommandIntent.UNKNOWN

    def test_non_object_response(self, validator):
        """Test that a JSON list is rejected."""
        command, _ = validator.validate(["TRANSACTION"])
        assert command.intent == CommandIntent.UNKNOWN


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
