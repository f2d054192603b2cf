"""
Tests for the aggregation engine.

All inputs are built in memory; every function under test is pure.
"""

import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.aggregation import (
    balance,
    budget_progress,
    build_dashboard,
    category_rollup,
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
from finance_tracker.models.dashboard import ReminderKind
from finance_tracker.models.finance import (
    AccountDraft,
    Category,
    DebtDraft,
    FinanceSnapshot,
    Frequency,
    GoalDraft,
    SubscriptionDraft,
    TransactionDraft,
    TransactionType,
    UserSettings,
)


TODAY = date(2024, 4, 15)


def make_subscription(name="Service", amount="10", frequency=Frequency.MONTHLY,
                      category=Category.SOFTWARE, next_payment=date(2024, 5, 1)):
    return SubscriptionDraft(
        name=name,
        amount=Decimal(amount),
        frequency=frequency,
        category=category,
        next_payment_date=next_payment,
    ).to_entity()


def make_transaction(amount, txn_type=TransactionType.EXPENSE, category=Category.FOOD,
                     on=TODAY, description=""):
    return TransactionDraft(
        type=txn_type,
        amount=Decimal(amount),
        category=category,
        transaction_date=on,
        description=description,
    ).to_entity()


def make_debt(name="Loan", total="500", remaining=None, due=None):
    return DebtDraft(
        name=name,
        total_amount=Decimal(total),
        remaining_amount=Decimal(remaining) if remaining is not None else None,
        due_date=due,
    ).to_entity()


class TestMonthlyCost:
    """Tests for subscription cost normalization."""

    def test_monthly_is_unchanged(self):
        """Test that monthly subscriptions cost their amount."""
        assert monthly_cost(make_subscription(amount="15")) == Decimal("15")

    def test_yearly_is_divided_by_twelve(self):
        """Test that a 1200 yearly subscription costs 100 a month."""
        sub = make_subscription(amount="1200", frequency=Frequency.YEARLY)
        assert monthly_cost(sub) == Decimal("100")

    def test_weekly_is_multiplied_by_four(self):
        """Test that a 10 weekly subscription costs 40 a month."""
        sub = make_subscription(amount="10", frequency=Frequency.WEEKLY)
        assert monthly_cost(sub) == Decimal("40")

    def test_total_of_mixed_frequencies(self):
        """Test the monthly total across frequencies."""
        subs = [
            make_subscription(amount="1200", frequency=Frequency.YEARLY),
            make_subscription(amount="10", frequency=Frequency.WEEKLY),
            make_subscription(amount="5"),
        ]
        assert subscriptions_monthly_total(subs) == Decimal("145")

    def test_total_of_nothing_is_zero(self):
        """Test that no subscriptions cost nothing."""
        assert subscriptions_monthly_total([]) == Decimal("0")


class TestCurrentMonthTotals:
    """Tests for income, expense and balance figures."""

    def test_is_in_month_checks_year(self):
        """Test that the same month in another year does not count."""
        assert is_in_month(date(2024, 4, 1), TODAY)
        assert not is_in_month(date(2023, 4, 1), TODAY)
        assert not is_in_month(date(2024, 3, 31), TODAY)

    def test_income_and_expense_only_count_this_month(self):
        """Test that older transactions are ignored."""
        txns = [
            make_transaction("1000", TransactionType.INCOME, Category.SALARY),
            make_transaction("50"),
            make_transaction("70", on=date(2024, 3, 30)),
            make_transaction("500", TransactionType.INCOME, Category.SALARY, on=date(2023, 4, 2)),
        ]
        assert income_total(txns, TODAY) == Decimal("1000")
        assert variable_expense_total(txns, TODAY) == Decimal("50")

    def test_total_expenses_include_all_subscriptions(self):
        """Test that subscriptions count regardless of their payment date."""
        subs = [make_subscription(amount="20", next_payment=date(2024, 9, 1))]
        txns = [make_transaction("30")]
        assert total_expenses(subs, txns, TODAY) == Decimal("50")

    def test_balance(self):
        """Test income minus total expenses."""
        subs = [make_subscription(amount="20")]
        txns = [
            make_transaction("100", TransactionType.INCOME, Category.FREELANCE),
            make_transaction("30"),
        ]
        assert balance(subs, txns, TODAY) == Decimal("50")


class TestBudget:
    """Tests for budget progress."""

    def test_overspent_budget(self):
        """Test that 1200 spent of 1000 is 120% with nothing remaining."""
        assert budget_progress(Decimal("1200"), Decimal("1000")) == Decimal("120")
        assert remaining_budget(Decimal("1200"), Decimal("1000")) == Decimal("0")

    def test_partially_used_budget(self):
        """Test progress and remaining below the ceiling."""
        assert budget_progress(Decimal("250"), Decimal("1000")) == Decimal("25")
        assert remaining_budget(Decimal("250"), Decimal("1000")) == Decimal("750")

    def test_zero_budget_means_zero_progress(self):
        """Test that no budget yields 0 progress instead of dividing by zero."""
        assert budget_progress(Decimal("300"), Decimal("0")) == Decimal("0")
        assert remaining_budget(Decimal("300"), Decimal("0")) == Decimal("0")


class TestCategoryRollup:
    """Tests for per-category monthly totals."""

    def test_merges_subscription_and_transaction_in_same_category(self):
        """Test that one category sums both sources."""
        subs = [make_subscription(amount="15", category=Category.ENTERTAINMENT)]
        txns = [make_transaction("25", category=Category.ENTERTAINMENT)]
        rollup = category_rollup(subs, txns, TODAY)
        assert rollup == {Category.ENTERTAINMENT: Decimal("40.00")}

    def test_ignores_income_and_old_expenses(self):
        """Test that only this month's expenses are added."""
        txns = [
            make_transaction("1000", TransactionType.INCOME, Category.SALARY),
            make_transaction("20", category=Category.FOOD, on=date(2024, 2, 1)),
            make_transaction("12", category=Category.TRANSPORT),
        ]
        assert category_rollup([], txns, TODAY) == {Category.TRANSPORT: Decimal("12.00")}

    def test_rounds_to_two_places(self):
        """Test rounding of normalized yearly costs."""
        subs = [make_subscription(amount="100", frequency=Frequency.YEARLY)]
        rollup = category_rollup(subs, [], TODAY)
        assert rollup[Category.SOFTWARE] == Decimal("8.33")

    def test_subscriptions_come_first(self):
        """Test first-seen ordering with subscriptions before transactions."""
        subs = [make_subscription(category=Category.UTILITIES)]
        txns = [make_transaction("5", category=Category.FOOD)]
        assert list(category_rollup(subs, txns, TODAY)) == [Category.UTILITIES, Category.FOOD]


class TestRemindersFeed:
    """Tests for the upcoming payments feed."""

    def test_debt_due_earlier_comes_first(self):
        """Test that a debt due before a subscription is listed first."""
        sub = make_subscription(name="Gym", next_payment=date(2024, 5, 1))
        debt = make_debt(name="Loan", remaining="300", due=date(2024, 4, 20))
        feed = reminders_feed([sub], [debt])
        assert [r.kind for r in feed] == [ReminderKind.DEBT, ReminderKind.SUBSCRIPTION]
        assert feed[0].title == "Debt: Loan"
        assert feed[0].amount == Decimal("300")

    def test_paid_off_debt_is_excluded(self):
        """Test that a debt with nothing remaining never appears."""
        debt = make_debt(remaining="0", due=date(2024, 4, 20))
        assert reminders_feed([], [debt]) == []

    def test_debt_without_due_date_is_excluded(self):
        """Test that undated debts are skipped."""
        assert reminders_feed([], [make_debt()]) == []

    def test_limited_to_five_by_default(self):
        """Test truncation to the five soonest payments."""
        subs = [
            make_subscription(name=f"S{day}", next_payment=date(2024, 5, day))
            for day in range(10, 0, -1)
        ]
        feed = reminders_feed(subs, [])
        assert len(feed) == 5
        assert [r.due_date.day for r in feed] == [1, 2, 3, 4, 5]

    def test_custom_limit(self):
        """Test a configured limit."""
        subs = [make_subscription(next_payment=date(2024, 5, d)) for d in range(1, 4)]
        assert len(reminders_feed(subs, [], limit=2)) == 2

    def test_ties_keep_subscriptions_before_debts(self):
        """Test that sorting is stable on equal dates."""
        due = date(2024, 5, 1)
        sub = make_subscription(next_payment=due)
        debt = make_debt(due=due)
        feed = reminders_feed([sub], [debt])
        assert [r.kind for r in feed] == [ReminderKind.SUBSCRIPTION, ReminderKind.DEBT]


class TestProgressAndLists:
    """Tests for goal/debt progress and transaction ordering."""

    def test_goal_progress_is_capped(self):
        """Test that an overfunded goal shows 100%."""
        goal = GoalDraft(
            name="Trip",
            target_amount=Decimal("100"),
            current_amount=Decimal("150"),
        ).to_entity()
        assert goal_progress(goal) == Decimal("100")

    def test_goal_progress(self):
        """Test a partially funded goal."""
        goal = GoalDraft(
            name="Trip",
            target_amount=Decimal("200"),
            current_amount=Decimal("50"),
        ).to_entity()
        assert goal_progress(goal) == Decimal("25")

    def test_debt_progress(self):
        """Test percent of a debt already paid."""
        debt = make_debt(total="100", remaining="60")
        assert debt_progress(debt) == Decimal("40")

    def test_total_account_balance(self):
        """Test summing account balances, negatives included."""
        accounts = [
            AccountDraft(name="Bank", balance=Decimal("100")).to_entity(),
            AccountDraft(name="Card", balance=Decimal("-30")).to_entity(),
        ]
        assert total_account_balance(accounts) == Decimal("70")

    def test_newest_first_and_recent(self):
        """Test transaction ordering and the recent slice."""
        txns = [make_transaction("1", on=date(2024, 4, d)) for d in (3, 9, 1)]
        ordered = transactions_newest_first(txns)
        assert [t.transaction_date.day for t in ordered] == [9, 3, 1]
        assert len(recent_transactions(txns, limit=2)) == 2


class TestDashboard:
    """Tests for the combined dashboard summary."""

    def test_build_dashboard(self):
        """Test that the summary bundles every figure."""
        snapshot = FinanceSnapshot(
            subscriptions=(make_subscription(amount="1200", frequency=Frequency.YEARLY),),
            transactions=(
                make_transaction("2000", TransactionType.INCOME, Category.SALARY),
                make_transaction("1100", category=Category.HOUSING),
            ),
            debts=(make_debt(due=date(2024, 4, 30)),),
            accounts=(AccountDraft(name="Bank", balance=Decimal("900")).to_entity(),),
            settings=UserSettings(monthly_budget=Decimal("1000")),
        )
        summary = build_dashboard(snapshot, today=TODAY)

        assert summary.monthly_subscriptions_cost == Decimal("100")
        assert summary.income == Decimal("2000")
        assert summary.variable_expenses == Decimal("1100")
        assert summary.total_expenses == Decimal("1200")
        assert summary.balance == Decimal("800")
        assert summary.budget_progress == Decimal("120")
        assert summary.remaining_budget == Decimal("0")
        assert summary.total_account_balance == Decimal("900")
        assert [c.category for c in summary.category_totals] == [
            Category.SOFTWARE,
            Category.HOUSING,
        ]
        assert [r.kind for r in summary.reminders] == [
            ReminderKind.DEBT,
            ReminderKind.SUBSCRIPTION,
        ]

    def test_empty_dashboard(self):
        """Test that an empty store yields zeros."""
        summary = build_dashboard(FinanceSnapshot(), today=TODAY)
        assert summary.total_expenses == Decimal("0")
        assert summary.budget_progress == Decimal("0")
        assert summary.category_totals == []
        assert summary.reminders == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
