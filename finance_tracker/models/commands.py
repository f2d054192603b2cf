"""
AI Command Models

The AI adapter turns free text or audio into one of these.
A ParsedCommand is a tagged variant: the intent says which payload is set.
Payloads are ordinary drafts, so they flow into the same mutation
operations as manual input.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from finance_tracker.models.finance import (
    Subscription,
    SubscriptionDraft,
    Transaction,
    TransactionDraft,
)


class CommandIntent(str, Enum):
    TRANSACTION = "TRANSACTION"
    SUBSCRIPTION = "SUBSCRIPTION"
    UNKNOWN = "UNKNOWN"


class ParsedCommand(BaseModel):
    """Decoded result of a natural language command."""

    intent: CommandIntent
    transaction_data: Optional[TransactionDraft] = None
    subscription_data: Optional[SubscriptionDraft] = None
    error: Optional[str] = Field(
        default=None,
        description="Why the command could not be understood"
    )

    @model_validator(mode='after')
    def validate_payload(self) -> 'ParsedCommand':
        """The payload must match the intent."""
        if self.intent == CommandIntent.TRANSACTION and self.transaction_data is None:
            raise ValueError("TRANSACTION intent requires transaction_data")
        if self.intent == CommandIntent.SUBSCRIPTION and self.subscription_data is None:
            raise ValueError("SUBSCRIPTION intent requires subscription_data")
        return self

    @classmethod
    def unknown(cls, error: str) -> 'ParsedCommand':
        return cls(intent=CommandIntent.UNKNOWN, error=error)


class ValidationIssue(BaseModel):
    """A single problem found in AI output."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'unrecognized', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class CommandOutcome(BaseModel):
    """What happened after a parsed command was routed into the store."""

    intent: CommandIntent
    transaction: Optional[Transaction] = None
    subscription: Optional[Subscription] = None
    message: str

    @property
    def applied(self) -> bool:
        return self.transaction is not None or self.subscription is not None
