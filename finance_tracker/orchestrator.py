"""
Main Orchestrator for Finance Tracker

This module ties together all the components and defines the
end-to-end flow for every user action:

    user action → mutation → FinanceState updated → repository save
                → audit event → dashboard re-derived on demand

AI commands take the same path: the command agent only produces drafts,
and the drafts go through add_transaction / add_subscription like
manual input.

DESIGN DECISION: The orchestrator enforces the boundaries:
- Rejected operations change nothing (state or storage)
- Composite operations apply both halves to state before saving
- Every step is audited
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from finance_tracker.agents import FinancialCommandAgent, FinancialInsightsAgent
from finance_tracker.aggregation import build_dashboard
from finance_tracker.audit import AuditLogger, configure_logging
from finance_tracker.config import get_settings
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.commands import CommandIntent, CommandOutcome
from finance_tracker.models.dashboard import DashboardSummary
from finance_tracker.models.finance import (
    Account,
    AccountDraft,
    Category,
    Debt,
    DebtDraft,
    DebtPayment,
    ExportBundle,
    GoalContribution,
    GoalDraft,
    SavingsGoal,
    Subscription,
    SubscriptionDraft,
    Transaction,
    TransactionDraft,
    UserSettings,
)
from finance_tracker.operations import (
    OperationRejectedError,
    apply_transaction_to_accounts,
    contribute_to_goal,
    pay_debt,
)
from finance_tracker.services.export import build_export, export_to_json
from finance_tracker.services.storage import (
    FinanceRepository,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
)
from finance_tracker.state import FinanceState


logger = structlog.get_logger(__name__)

AI_NOT_CONFIGURED = "The AI assistant is not configured."


class FinanceTracker:
    """
    Application object owning one session's state.

    Mutations are synchronous and persist the touched collections
    right after the in-memory update. AI helpers are coroutines.
    """

    def __init__(
        self,
        state: FinanceState,
        repository: FinanceRepository,
        audit_logger: Optional[AuditLogger] = None,
        command_agent: Optional[FinancialCommandAgent] = None,
        insights_agent: Optional[FinancialInsightsAgent] = None,
        reminders_limit: int = 5,
    ):
        self._state = state
        self._repository = repository
        self._audit_logger = audit_logger or AuditLogger()
        self._command_agent = command_agent
        self._insights_agent = insights_agent
        self._reminders_limit = reminders_limit

    @property
    def state(self) -> FinanceState:
        return self._state

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def load(self) -> None:
        """(Re)initialize state from the repository."""
        self._state.load(self._repository)
        self._audit_logger.log(AuditEventBuilder.state_loaded(self._state.counts()))

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def add_account(self, draft: AccountDraft) -> Account:
        account = draft.to_entity()
        self._state.accounts = [*self._state.accounts, account]
        self._repository.save_accounts(self._state.accounts)
        self._audit_logger.log(
            AuditEventBuilder.entity_added("account", account.id, account.name)
        )
        return account

    def delete_account(self, account_id: UUID) -> bool:
        """Remove an account. Transactions keep their (now dangling) reference."""
        found = self._state.find_account(account_id) is not None
        if found:
            self._state.accounts = [a for a in self._state.accounts if a.id != account_id]
            self._repository.save_accounts(self._state.accounts)
        self._audit_logger.log(AuditEventBuilder.entity_deleted("account", account_id, found))
        return found

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def _append_transaction(self, transaction: Transaction) -> bool:
        """
        Add a transaction to state and apply it to its account.

        Returns True if an account balance changed.
        """
        self._state.transactions = [*self._state.transactions, transaction]

        before = self._state.find_account(transaction.account_id) if transaction.account_id else None
        if before is None:
            if transaction.account_id is not None:
                logger.debug(
                    "transaction_account_missing",
                    transaction_id=str(transaction.id),
                    account_id=str(transaction.account_id),
                )
            return False

        self._state.accounts = apply_transaction_to_accounts(self._state.accounts, transaction)
        after = self._state.find_account(transaction.account_id)
        self._audit_logger.log(AuditEventBuilder.account_balance_changed(
            account_id=before.id,
            transaction_id=transaction.id,
            old_balance=str(before.balance),
            new_balance=str(after.balance),
        ))
        return True

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """
        Record a transaction.

        If it is linked to an existing account, income adds to and
        expense subtracts from that account's balance. An unknown
        account id leaves every account unchanged.
        """
        transaction = draft.to_entity()
        balance_changed = self._append_transaction(transaction)

        self._repository.save_transactions(self._state.transactions)
        if balance_changed:
            self._repository.save_accounts(self._state.accounts)

        self._audit_logger.log(AuditEventBuilder.entity_added(
            "transaction",
            transaction.id,
            f"{transaction.type.value} {transaction.amount} ({transaction.category.value})",
        ))
        return transaction

    def delete_transaction(self, transaction_id: UUID) -> bool:
        """Remove a transaction. Account balances are NOT reversed."""
        found = self._state.find_transaction(transaction_id) is not None
        if found:
            self._state.transactions = [
                t for t in self._state.transactions if t.id != transaction_id
            ]
            self._repository.save_transactions(self._state.transactions)
        self._audit_logger.log(
            AuditEventBuilder.entity_deleted("transaction", transaction_id, found)
        )
        return found

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def add_subscription(self, draft: SubscriptionDraft) -> Subscription:
        subscription = draft.to_entity()
        self._state.subscriptions = [*self._state.subscriptions, subscription]
        self._repository.save_subscriptions(self._state.subscriptions)
        self._audit_logger.log(
            AuditEventBuilder.entity_added("subscription", subscription.id, subscription.name)
        )
        return subscription

    def delete_subscription(self, subscription_id: UUID) -> bool:
        found = self._state.find_subscription(subscription_id) is not None
        if found:
            self._state.subscriptions = [
                s for s in self._state.subscriptions if s.id != subscription_id
            ]
            self._repository.save_subscriptions(self._state.subscriptions)
        self._audit_logger.log(
            AuditEventBuilder.entity_deleted("subscription", subscription_id, found)
        )
        return found

    # -------------------------------------------------------------------------
    # Savings goals
    # -------------------------------------------------------------------------

    def add_goal(self, draft: GoalDraft) -> SavingsGoal:
        goal = draft.to_entity()
        self._state.goals = [*self._state.goals, goal]
        self._repository.save_goals(self._state.goals)
        self._audit_logger.log(AuditEventBuilder.entity_added("goal", goal.id, goal.name))
        return goal

    def update_goal(self, goal: SavingsGoal) -> Optional[SavingsGoal]:
        """Replace the goal with the same id. Unknown ids are ignored."""
        if self._state.find_goal(goal.id) is None:
            logger.info("goal_update_skipped", goal_id=str(goal.id))
            return None
        self._state.goals = [goal if g.id == goal.id else g for g in self._state.goals]
        self._repository.save_goals(self._state.goals)
        self._audit_logger.log(AuditEventBuilder.entity_updated("goal", goal.id, goal.name))
        return goal

    def delete_goal(self, goal_id: UUID) -> bool:
        found = self._state.find_goal(goal_id) is not None
        if found:
            self._state.goals = [g for g in self._state.goals if g.id != goal_id]
            self._repository.save_goals(self._state.goals)
        self._audit_logger.log(AuditEventBuilder.entity_deleted("goal", goal_id, found))
        return found

    def contribute_to_goal(
        self,
        goal_id: UUID,
        amount: Decimal,
        on: Optional[date] = None,
    ) -> GoalContribution:
        """
        Add money to a goal and record the matching investment expense.

        Raises:
            OperationRejectedError: unknown goal or non-positive amount
        """
        goal = self._state.find_goal(goal_id)
        try:
            if goal is None:
                raise OperationRejectedError("contribute_to_goal", "Savings goal not found")
            contribution = contribute_to_goal(goal, amount, on)
        except OperationRejectedError as e:
            self._audit_logger.log(AuditEventBuilder.operation_rejected(
                operation=e.operation,
                reason=str(e),
                entity_type="goal",
                entity_id=goal_id,
            ))
            raise

        self._state.goals = [
            contribution.goal if g.id == goal_id else g for g in self._state.goals
        ]
        balance_changed = self._append_transaction(contribution.transaction)

        self._repository.save_goals(self._state.goals)
        self._repository.save_transactions(self._state.transactions)
        if balance_changed:
            self._repository.save_accounts(self._state.accounts)

        self._audit_logger.log(AuditEventBuilder.goal_contribution(
            goal_id=goal_id,
            goal_name=contribution.goal.name,
            amount=str(contribution.transaction.amount),
            current_amount=str(contribution.goal.current_amount),
            transaction_id=contribution.transaction.id,
        ))
        return contribution

    # -------------------------------------------------------------------------
    # Debts
    # -------------------------------------------------------------------------

    def add_debt(self, draft: DebtDraft) -> Debt:
        debt = draft.to_entity()
        self._state.debts = [*self._state.debts, debt]
        self._repository.save_debts(self._state.debts)
        self._audit_logger.log(AuditEventBuilder.entity_added("debt", debt.id, debt.name))
        return debt

    def update_debt(self, debt: Debt) -> Optional[Debt]:
        """Replace the debt with the same id. Unknown ids are ignored."""
        if self._state.find_debt(debt.id) is None:
            logger.info("debt_update_skipped", debt_id=str(debt.id))
            return None
        self._state.debts = [debt if d.id == debt.id else d for d in self._state.debts]
        self._repository.save_debts(self._state.debts)
        self._audit_logger.log(AuditEventBuilder.entity_updated("debt", debt.id, debt.name))
        return debt

    def delete_debt(self, debt_id: UUID) -> bool:
        found = self._state.find_debt(debt_id) is not None
        if found:
            self._state.debts = [d for d in self._state.debts if d.id != debt_id]
            self._repository.save_debts(self._state.debts)
        self._audit_logger.log(AuditEventBuilder.entity_deleted("debt", debt_id, found))
        return found

    def pay_debt(
        self,
        debt_id: UUID,
        amount: Decimal,
        on: Optional[date] = None,
    ) -> DebtPayment:
        """
        Pay towards a debt and record the matching debt expense.

        Raises:
            OperationRejectedError: unknown debt, non-positive amount, or
                an amount above the remaining balance
        """
        debt = self._state.find_debt(debt_id)
        try:
            if debt is None:
                raise OperationRejectedError("pay_debt", "Debt not found")
            payment = pay_debt(debt, amount, on)
        except OperationRejectedError as e:
            self._audit_logger.log(AuditEventBuilder.operation_rejected(
                operation=e.operation,
                reason=str(e),
                entity_type="debt",
                entity_id=debt_id,
            ))
            raise

        self._state.debts = [
            payment.debt if d.id == debt_id else d for d in self._state.debts
        ]
        balance_changed = self._append_transaction(payment.transaction)

        self._repository.save_debts(self._state.debts)
        self._repository.save_transactions(self._state.transactions)
        if balance_changed:
            self._repository.save_accounts(self._state.accounts)

        self._audit_logger.log(AuditEventBuilder.debt_payment(
            debt_id=debt_id,
            debt_name=payment.debt.name,
            amount=str(payment.transaction.amount),
            remaining_amount=str(payment.debt.remaining_amount),
            transaction_id=payment.transaction.id,
        ))
        return payment

    # -------------------------------------------------------------------------
    # Settings & data management
    # -------------------------------------------------------------------------

    def update_settings(self, settings: UserSettings) -> UserSettings:
        """Replace the settings singleton."""
        previous = self._state.settings.model_dump()
        changed = [
            name for name, value in settings.model_dump().items()
            if previous.get(name) != value
        ]
        self._state.settings = settings
        self._repository.save_settings(settings)
        self._audit_logger.log(AuditEventBuilder.settings_updated(changed))
        return settings

    def clear_all_data(self) -> None:
        """Empty every collection and restore default settings. Irreversible."""
        self._state.reset()
        self._repository.clear_all()
        self._audit_logger.log(AuditEventBuilder.data_cleared())

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def dashboard(self, today: Optional[date] = None) -> DashboardSummary:
        return build_dashboard(
            self._state.snapshot(),
            today=today,
            reminders_limit=self._reminders_limit,
        )

    def export(self) -> ExportBundle:
        bundle = build_export(self._state.snapshot())
        self._audit_logger.log(AuditEventBuilder.data_exported(self._state.counts()))
        return bundle

    def export_json(self) -> str:
        return export_to_json(self.export())

    # -------------------------------------------------------------------------
    # AI helpers
    # -------------------------------------------------------------------------

    async def quick_add(
        self,
        text: Optional[str] = None,
        audio_base64: Optional[str] = None,
    ) -> CommandOutcome:
        """
        Parse a typed or spoken command and record the result.

        Nothing is stored unless the command was understood. The
        returned outcome always carries a message for the user.
        """
        source = "audio" if audio_base64 else "text"

        if self._command_agent is None:
            return CommandOutcome(intent=CommandIntent.UNKNOWN, message=AI_NOT_CONFIGURED)

        command = await self._command_agent.parse_command(text=text, audio_base64=audio_base64)

        if command.intent == CommandIntent.UNKNOWN:
            message = command.error or "I could not understand the request."
            self._audit_logger.log(AuditEventBuilder.command_failed(message, source))
            return CommandOutcome(intent=command.intent, message=message)

        self._audit_logger.log(AuditEventBuilder.command_parsed(command.intent.value, source))

        if command.intent == CommandIntent.TRANSACTION:
            transaction = self.add_transaction(command.transaction_data)
            return CommandOutcome(
                intent=command.intent,
                transaction=transaction,
                message=(
                    f"Recorded {transaction.type.value} of "
                    f"{self._state.settings.currency_symbol}{transaction.amount}"
                ),
            )

        draft = command.subscription_data.model_copy(
            update={"currency": self._state.settings.currency_code}
        )
        subscription = self.add_subscription(draft)
        return CommandOutcome(
            intent=command.intent,
            subscription=subscription,
            message=f"Added subscription {subscription.name}",
        )

    async def analyze(self) -> str:
        """Prose analysis of current subscriptions and transactions."""
        if self._insights_agent is None:
            return AI_NOT_CONFIGURED
        return await self._insights_agent.analyze_finances(
            self._state.subscriptions,
            self._state.transactions,
        )

    async def suggest_category(self, name: str, description: str = "") -> Category:
        if self._insights_agent is None:
            return Category.OTHER
        return await self._insights_agent.suggest_category(name, description)


def create_storage(backend: str, data_path: str) -> KeyValueStorageInterface:
    """Build the configured key-value backend."""
    if backend == "memory":
        return InMemoryKeyValueStorage()
    if backend == "sheets":
        return GoogleSheetsKeyValueStorage(GoogleSheetsClient())
    return JsonFileKeyValueStorage(data_path)


def create_tracker(
    use_ai: bool = True,
    storage: Optional[KeyValueStorageInterface] = None,
) -> FinanceTracker:
    """
    Factory function to create a ready-to-use tracker.

    Args:
        use_ai: Whether to set up the Gemini agents.
                Skipped (with a warning) when Gemini is not configured.
        storage: Backend override; defaults to StorageSettings.backend.

    Returns:
        A FinanceTracker with state already loaded
    """
    settings = get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    configure_logging(app_settings.log_level)

    if storage is None:
        storage = create_storage(storage_settings.backend, storage_settings.data_path)

    audit_logger = AuditLogger()
    repository = FinanceRepository(
        storage,
        key_prefix=storage_settings.key_prefix,
        audit_logger=audit_logger,
    )

    command_agent = None
    insights_agent = None
    if use_ai:
        try:
            settings.gemini
        except ValidationError as e:
            logger.warning("ai_not_configured", error_count=e.error_count())
        else:
            command_agent = FinancialCommandAgent(audit_logger=audit_logger)
            insights_agent = FinancialInsightsAgent(
                transaction_limit=app_settings.analysis_transaction_limit,
                audit_logger=audit_logger,
            )

    tracker = FinanceTracker(
        state=FinanceState(),
        repository=repository,
        audit_logger=audit_logger,
        command_agent=command_agent,
        insights_agent=insights_agent,
        reminders_limit=app_settings.reminders_limit,
    )
    tracker.load()
    return tracker
