"""
Derived View Models

Shapes returned by the aggregation engine. Nothing here is persisted;
every instance is recomputed from a FinanceSnapshot.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from finance_tracker.models.finance import Category


class ReminderKind(str, Enum):
    """What an upcoming payment reminder refers to."""
    SUBSCRIPTION = "subscription"
    DEBT = "debt"


class Reminder(BaseModel):
    """One entry of the upcoming payments feed."""

    source_id: UUID = Field(
        ...,
        description="ID of the subscription or debt"
    )
    kind: ReminderKind
    title: str
    amount: Decimal
    due_date: date


class CategoryTotal(BaseModel):
    """Monthly cost attributed to one category."""

    category: Category
    total: Decimal


class DashboardSummary(BaseModel):
    """
    Everything the dashboard shows, derived in one pass.

    budget_progress is a percentage and may exceed 100.
    """

    evaluated_on: date
    monthly_subscriptions_cost: Decimal
    income: Decimal
    variable_expenses: Decimal
    total_expenses: Decimal
    balance: Decimal
    budget: Decimal
    budget_progress: Decimal
    remaining_budget: Decimal
    category_totals: list[CategoryTotal] = Field(default_factory=list)
    reminders: list[Reminder] = Field(default_factory=list)
    total_account_balance: Decimal = Decimal("0")
