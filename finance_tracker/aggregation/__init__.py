"""Aggregation engine package."""

from finance_tracker.aggregation.engine import (
    balance,
    budget_progress,
    build_dashboard,
    category_rollup,
    current_month_transactions,
    debt_progress,
    goal_progress,
    income_total,
    is_in_month,
    monthly_cost,
    recent_transactions,
    reminders_feed,
    remaining_budget,
    subscriptions_monthly_total,
    total_account_balance,
    total_expenses,
    transactions_newest_first,
    variable_expense_total,
)

__all__ = [
    "balance",
    "budget_progress",
    "build_dashboard",
    "category_rollup",
    "current_month_transactions",
    "debt_progress",
    "goal_progress",
    "income_total",
    "is_in_month",
    "monthly_cost",
    "recent_transactions",
    "reminders_feed",
    "remaining_budget",
    "subscriptions_monthly_total",
    "total_account_balance",
    "total_expenses",
    "transactions_newest_first",
    "variable_expense_total",
]
