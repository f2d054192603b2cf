"""Mutation operations package."""

from finance_tracker.operations.mutations import (
    OperationRejectedError,
    apply_transaction_to_accounts,
    contribute_to_goal,
    pay_debt,
)

__all__ = [
    "OperationRejectedError",
    "apply_transaction_to_accounts",
    "contribute_to_goal",
    "pay_debt",
]
