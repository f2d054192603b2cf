"""
Entity Store

DESIGN DECISION: All collections live in one explicitly owned FinanceState
object. There is no module-level state. The object has an explicit
lifecycle:

    state = FinanceState()
    state.load(repository)   # initialize from persistence
    ...                      # mutations replace collections in place
    state.reset()            # teardown to empty + default settings

Readers get an immutable FinanceSnapshot, so derived views can never
modify the store by accident.
"""

from typing import Optional
from uuid import UUID

from finance_tracker.models.finance import (
    Account,
    Debt,
    FinanceSnapshot,
    SavingsGoal,
    Subscription,
    Transaction,
    UserSettings,
)
from finance_tracker.services.storage import FinanceRepository


class FinanceState:
    """In-memory collections for one running session."""

    def __init__(self):
        self.accounts: list[Account] = []
        self.transactions: list[Transaction] = []
        self.subscriptions: list[Subscription] = []
        self.goals: list[SavingsGoal] = []
        self.debts: list[Debt] = []
        self.settings: UserSettings = UserSettings()

    def load(self, repository: FinanceRepository) -> None:
        """Replace every collection with what the repository holds."""
        self.accounts = repository.load_accounts()
        self.transactions = repository.load_transactions()
        self.subscriptions = repository.load_subscriptions()
        self.goals = repository.load_goals()
        self.debts = repository.load_debts()
        self.settings = repository.load_settings()

    def reset(self) -> None:
        self.accounts = []
        self.transactions = []
        self.subscriptions = []
        self.goals = []
        self.debts = []
        self.settings = UserSettings()

    def snapshot(self) -> FinanceSnapshot:
        return FinanceSnapshot(
            accounts=tuple(self.accounts),
            transactions=tuple(self.transactions),
            subscriptions=tuple(self.subscriptions),
            goals=tuple(self.goals),
            debts=tuple(self.debts),
            settings=self.settings,
        )

    def counts(self) -> dict[str, int]:
        return {
            "accounts": len(self.accounts),
            "transactions": len(self.transactions),
            "subscriptions": len(self.subscriptions),
            "goals": len(self.goals),
            "debts": len(self.debts),
        }

    # Lookups

    def find_account(self, account_id: UUID) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def find_subscription(self, subscription_id: UUID) -> Optional[Subscription]:
        return next((s for s in self.subscriptions if s.id == subscription_id), None)

    def find_goal(self, goal_id: UUID) -> Optional[SavingsGoal]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def find_debt(self, debt_id: UUID) -> Optional[Debt]:
        return next((d for d in self.debts if d.id == debt_id), None)
