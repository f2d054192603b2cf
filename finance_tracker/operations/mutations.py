"""
Composite Mutation Operations

DESIGN DECISION: Operations that touch two entities return BOTH results
in one object (GoalContribution, DebtPayment). The caller applies them
together, so it is impossible to persist the goal/debt change without
its transaction record, or the other way around.

These functions are pure. They validate, build new model instances and
return them. They never modify their inputs and never talk to storage.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

import structlog

from finance_tracker.models.finance import (
    Account,
    Category,
    Debt,
    DebtPayment,
    GoalContribution,
    SavingsGoal,
    Transaction,
    TransactionType,
)


logger = structlog.get_logger(__name__)


class OperationRejectedError(ValueError):
    """
    A mutation was refused because its input breaks a business rule.

    The message is meant to be shown to the user as-is.
    Nothing has been changed when this is raised.
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(message)


def apply_transaction_to_accounts(
    accounts: Sequence[Account],
    transaction: Transaction,
) -> list[Account]:
    """
    Return the account list with the transaction's effect applied.

    Income adds to the linked account, expense subtracts. If the
    transaction has no account, or names one that does not exist,
    the accounts come back unchanged.
    """
    if transaction.account_id is None:
        return list(accounts)

    updated = []
    matched = False
    for account in accounts:
        if account.id == transaction.account_id:
            matched = True
            account = account.model_copy(
                update={"balance": account.balance + transaction.signed_amount}
            )
        updated.append(account)

    if not matched:
        logger.debug(
            "transaction_account_missing",
            transaction_id=str(transaction.id),
            account_id=str(transaction.account_id),
        )
    return updated


def _parse_amount(operation: str, amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise OperationRejectedError(operation, f"Amount is not a number: {amount!r}")
    if not value.is_finite():
        raise OperationRejectedError(operation, f"Amount is not a number: {amount!r}")
    return value


def _require_positive(operation: str, amount: Decimal, message: str) -> None:
    if amount <= 0:
        raise OperationRejectedError(operation, message)


def contribute_to_goal(
    goal: SavingsGoal,
    amount: Decimal,
    on: Optional[date] = None,
) -> GoalContribution:
    """
    Add money to a savings goal.

    The goal may end up above its target. The contribution is recorded
    as an expense in the investment category.
    """
    amount = _parse_amount("contribute_to_goal", amount)
    _require_positive("contribute_to_goal", amount, "Contribution must be greater than zero")

    updated_goal = goal.model_copy(
        update={"current_amount": goal.current_amount + amount}
    )
    transaction = Transaction(
        type=TransactionType.EXPENSE,
        category=Category.INVESTMENT,
        amount=amount,
        transaction_date=on or date.today(),
        description=f"Savings: {goal.name}",
    )
    return GoalContribution(goal=updated_goal, transaction=transaction)


def pay_debt(
    debt: Debt,
    amount: Decimal,
    on: Optional[date] = None,
) -> DebtPayment:
    """
    Pay part or all of a debt.

    Rejects payments that are not positive or that exceed what is still
    owed. The payment is recorded as an expense in the debt category.
    """
    amount = _parse_amount("pay_debt", amount)
    _require_positive("pay_debt", amount, "Payment must be greater than zero")
    if amount > debt.remaining_amount:
        raise OperationRejectedError(
            "pay_debt",
            f"Payment of {amount} exceeds the remaining balance of {debt.remaining_amount}",
        )

    updated_debt = debt.model_copy(
        update={"remaining_amount": debt.remaining_amount - amount}
    )
    transaction = Transaction(
        type=TransactionType.EXPENSE,
        category=Category.DEBT,
        amount=amount,
        transaction_date=on or date.today(),
        description=f"Debt payment: {debt.name}",
    )
    return DebtPayment(debt=updated_debt, transaction=transaction)
