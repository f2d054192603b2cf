"""
Finance Repository

Maps each entity collection onto one key of a key-value backend.

CONTRACT:
- load_* never raises. Absent or corrupt data gives an empty list
  (or default UserSettings) and a log line.
- save_* overwrites the whole collection and never raises. Failures are
  logged and reported through the return value.
- Keys are independent. Saving transactions and saving accounts are two
  separate writes with no atomicity between them.
"""

import json
from typing import Optional, Sequence, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.finance import (
    Account,
    Debt,
    SavingsGoal,
    Subscription,
    Transaction,
    UserSettings,
)
from finance_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ACCOUNTS = "accounts"
TRANSACTIONS = "transactions"
SUBSCRIPTIONS = "subscriptions"
GOALS = "goals"
DEBTS = "debts"
SETTINGS = "settings"

COLLECTION_NAMES = (ACCOUNTS, TRANSACTIONS, SUBSCRIPTIONS, GOALS, DEBTS, SETTINGS)


class FinanceRepository:
    """Load/save pairs for every collection plus the settings singleton."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key_prefix: str = "finance_tracker_",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._prefix = key_prefix
        self._audit_logger = audit_logger

    def key_for(self, name: str) -> str:
        return f"{self._prefix}{name}"

    # -------------------------------------------------------------------------
    # Generic helpers
    # -------------------------------------------------------------------------

    def _read(self, name: str) -> Optional[object]:
        key = self.key_for(name)
        try:
            raw = self._storage.get(key)
        except StorageError as e:
            logger.error("storage_read_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error("storage_value_corrupt", key=key, error=str(e))
            return None

    def _write(self, name: str, payload: object) -> bool:
        key = self.key_for(name)
        try:
            self._storage.set(key, json.dumps(payload))
            return True
        except (StorageError, TypeError, ValueError) as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            if self._audit_logger:
                self._audit_logger.log(
                    AuditEventBuilder.persistence_failed(key=key, error_message=str(e))
                )
            return False

    def _load_collection(self, name: str, model: type[ModelT]) -> list[ModelT]:
        data = self._read(name)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.error("storage_value_corrupt", key=self.key_for(name), error="expected a list")
            return []
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as e:
            logger.error(
                "storage_value_corrupt",
                key=self.key_for(name),
                error=str(e),
            )
            return []

    def _save_collection(self, name: str, items: Sequence[BaseModel]) -> bool:
        return self._write(name, [item.model_dump(mode="json") for item in items])

    # -------------------------------------------------------------------------
    # Per-collection load/save pairs
    # -------------------------------------------------------------------------

    def load_accounts(self) -> list[Account]:
        return self._load_collection(ACCOUNTS, Account)

    def save_accounts(self, accounts: Sequence[Account]) -> bool:
        return self._save_collection(ACCOUNTS, accounts)

    def load_transactions(self) -> list[Transaction]:
        return self._load_collection(TRANSACTIONS, Transaction)

    def save_transactions(self, transactions: Sequence[Transaction]) -> bool:
        return self._save_collection(TRANSACTIONS, transactions)

    def load_subscriptions(self) -> list[Subscription]:
        return self._load_collection(SUBSCRIPTIONS, Subscription)

    def save_subscriptions(self, subscriptions: Sequence[Subscription]) -> bool:
        return self._save_collection(SUBSCRIPTIONS, subscriptions)

    def load_goals(self) -> list[SavingsGoal]:
        return self._load_collection(GOALS, SavingsGoal)

    def save_goals(self, goals: Sequence[SavingsGoal]) -> bool:
        return self._save_collection(GOALS, goals)

    def load_debts(self) -> list[Debt]:
        return self._load_collection(DEBTS, Debt)

    def save_debts(self, debts: Sequence[Debt]) -> bool:
        return self._save_collection(DEBTS, debts)

    def load_settings(self) -> UserSettings:
        data = self._read(SETTINGS)
        if data is None:
            return UserSettings()
        try:
            return UserSettings.model_validate(data)
        except ValidationError as e:
            logger.error("storage_value_corrupt", key=self.key_for(SETTINGS), error=str(e))
            return UserSettings()

    def save_settings(self, settings: UserSettings) -> bool:
        return self._write(SETTINGS, settings.model_dump(mode="json"))

    def clear_all(self) -> bool:
        """Wipe the backend entirely."""
        try:
            self._storage.clear()
            return True
        except StorageError as e:
            logger.error("storage_clear_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log(
                    AuditEventBuilder.persistence_failed(key="*", error_message=str(e))
                )
            return False
