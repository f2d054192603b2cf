"""
Aggregation Engine

DESIGN DECISION: Every dashboard figure is DERIVED, never stored.
Each function here is pure: it takes collections (or a snapshot) plus the
evaluation date and returns a value. Nothing mutates its inputs.

Conventions:
- "Current month" means same calendar month and year as `today`,
  no timezone normalization.
- Subscriptions count towards monthly expenses regardless of when their
  next payment falls.
- A weekly subscription costs four payments a month (fixed approximation).
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from finance_tracker.models.dashboard import (
    CategoryTotal,
    DashboardSummary,
    Reminder,
    ReminderKind,
)
from finance_tracker.models.finance import (
    Account,
    Category,
    Debt,
    FinanceSnapshot,
    Frequency,
    SavingsGoal,
    Subscription,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

DEFAULT_REMINDERS_LIMIT = 5
WEEKS_PER_MONTH = 4
MONTHS_PER_YEAR = 12


def round_money(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

def monthly_cost(subscription: Subscription) -> Decimal:
    """Normalize a subscription's charge to a monthly amount."""
    if subscription.frequency == Frequency.YEARLY:
        return subscription.amount / MONTHS_PER_YEAR
    if subscription.frequency == Frequency.WEEKLY:
        return subscription.amount * WEEKS_PER_MONTH
    return subscription.amount


def subscriptions_monthly_total(subscriptions: Iterable[Subscription]) -> Decimal:
    return sum((monthly_cost(s) for s in subscriptions), ZERO)


# =============================================================================
# CURRENT MONTH TRANSACTIONS
# =============================================================================

def is_in_month(day: date, today: date) -> bool:
    return day.year == today.year and day.month == today.month


def current_month_transactions(
    transactions: Iterable[Transaction],
    today: date,
) -> list[Transaction]:
    return [t for t in transactions if is_in_month(t.transaction_date, today)]


def _sum_of_type(
    transactions: Iterable[Transaction],
    kind: TransactionType,
    today: date,
) -> Decimal:
    return sum(
        (t.amount for t in current_month_transactions(transactions, today) if t.type == kind),
        ZERO,
    )


def income_total(transactions: Iterable[Transaction], today: date) -> Decimal:
    """Sum of this month's income."""
    return _sum_of_type(transactions, TransactionType.INCOME, today)


def variable_expense_total(transactions: Iterable[Transaction], today: date) -> Decimal:
    """Sum of this month's one-off expenses."""
    return _sum_of_type(transactions, TransactionType.EXPENSE, today)


def total_expenses(
    subscriptions: Iterable[Subscription],
    transactions: Iterable[Transaction],
    today: date,
) -> Decimal:
    return variable_expense_total(transactions, today) + subscriptions_monthly_total(subscriptions)


def balance(
    subscriptions: Iterable[Subscription],
    transactions: Iterable[Transaction],
    today: date,
) -> Decimal:
    """This month's income minus this month's total expenses."""
    return income_total(transactions, today) - total_expenses(subscriptions, transactions, today)


# =============================================================================
# BUDGET
# =============================================================================

def budget_progress(expenses: Decimal, budget: Decimal) -> Decimal:
    """Percentage of the budget consumed; 0 when no budget is set. May exceed 100."""
    if budget <= 0:
        return ZERO
    return expenses / budget * HUNDRED


def remaining_budget(expenses: Decimal, budget: Decimal) -> Decimal:
    """Budget left this month, clamped at zero."""
    return max(ZERO, budget - expenses)


# =============================================================================
# CATEGORY ROLLUP
# =============================================================================

def category_rollup(
    subscriptions: Iterable[Subscription],
    transactions: Iterable[Transaction],
    today: date,
) -> dict[Category, Decimal]:
    """
    Monthly cost per category.

    Merges every subscription's monthly cost with this month's expense
    transactions. Categories appear in first-seen order, subscriptions first.
    """
    totals: dict[Category, Decimal] = {}

    for sub in subscriptions:
        totals[sub.category] = totals.get(sub.category, ZERO) + monthly_cost(sub)

    for txn in current_month_transactions(transactions, today):
        if txn.type != TransactionType.EXPENSE:
            continue
        totals[txn.category] = totals.get(txn.category, ZERO) + txn.amount

    return {category: round_money(total) for category, total in totals.items()}


# =============================================================================
# REMINDERS
# =============================================================================

def reminders_feed(
    subscriptions: Sequence[Subscription],
    debts: Sequence[Debt],
    limit: int = DEFAULT_REMINDERS_LIMIT,
) -> list[Reminder]:
    """
    Upcoming payments, soonest first.

    Includes every subscription and every debt that has a due date and is
    not paid off. Sorting is stable, so on equal dates subscriptions come
    before debts and each keeps its collection order.
    """
    reminders = [
        Reminder(
            source_id=sub.id,
            kind=ReminderKind.SUBSCRIPTION,
            title=sub.name,
            amount=sub.amount,
            due_date=sub.next_payment_date,
        )
        for sub in subscriptions
    ]
    reminders.extend(
        Reminder(
            source_id=debt.id,
            kind=ReminderKind.DEBT,
            title=f"Debt: {debt.name}",
            amount=debt.remaining_amount,
            due_date=debt.due_date,
        )
        for debt in debts
        if debt.due_date is not None and debt.remaining_amount > 0
    )
    reminders.sort(key=lambda r: r.due_date)
    return reminders[:limit]


# =============================================================================
# GOALS, DEBTS, ACCOUNTS
# =============================================================================

def goal_progress(goal: SavingsGoal) -> Decimal:
    """Percent of the target saved, capped at 100 for display."""
    return min(goal.current_amount / goal.target_amount * HUNDRED, HUNDRED)


def debt_paid_amount(debt: Debt) -> Decimal:
    return debt.total_amount - debt.remaining_amount


def debt_progress(debt: Debt) -> Decimal:
    """Percent of the original debt already paid, capped at 100."""
    return min(debt_paid_amount(debt) / debt.total_amount * HUNDRED, HUNDRED)


def total_account_balance(accounts: Iterable[Account]) -> Decimal:
    return sum((a.balance for a in accounts), ZERO)


# =============================================================================
# TRANSACTION LISTS
# =============================================================================

def transactions_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: t.transaction_date, reverse=True)


def recent_transactions(
    transactions: Iterable[Transaction],
    limit: int = 20,
) -> list[Transaction]:
    return transactions_newest_first(transactions)[:limit]


# =============================================================================
# DASHBOARD
# =============================================================================

def build_dashboard(
    snapshot: FinanceSnapshot,
    today: Optional[date] = None,
    reminders_limit: int = DEFAULT_REMINDERS_LIMIT,
) -> DashboardSummary:
    """Derive every dashboard figure from one snapshot."""
    today = today or date.today()
    subs = snapshot.subscriptions
    txns = snapshot.transactions

    subs_cost = subscriptions_monthly_total(subs)
    income = income_total(txns, today)
    variable = variable_expense_total(txns, today)
    expenses = variable + subs_cost
    budget = snapshot.settings.monthly_budget

    return DashboardSummary(
        evaluated_on=today,
        monthly_subscriptions_cost=subs_cost,
        income=income,
        variable_expenses=variable,
        total_expenses=expenses,
        balance=income - expenses,
        budget=budget,
        budget_progress=budget_progress(expenses, budget),
        remaining_budget=remaining_budget(expenses, budget),
        category_totals=[
            CategoryTotal(category=category, total=total)
            for category, total in category_rollup(subs, txns, today).items()
        ],
        reminders=reminders_feed(subs, snapshot.debts, limit=reminders_limit),
        total_account_balance=total_account_balance(snapshot.accounts),
    )
