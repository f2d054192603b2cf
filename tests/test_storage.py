"""
Tests for key-value backends and the finance repository.

No real Google Sheets calls: the Sheets backend runs against a fake
worksheet that keeps rows in a list.
"""

import json
import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.audit import AuditLogger
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.finance import (
    AccountDraft,
    DebtDraft,
    Frequency,
    GoalDraft,
    SubscriptionDraft,
    Theme,
    TransactionDraft,
    UserSettings,
)
from finance_tracker.services.storage import (
    FinanceRepository,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
    StorageError,
)
from finance_tracker.services.storage import json_file as json_file_module


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the key-value backend."""

    def __init__(self):
        self.rows = [["key", "value", "updated_at"]]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append(list(row))

    def update_cell(self, row, col, value):
        target = self.rows[row - 1]
        while len(target) < col:
            target.append("")
        target[col - 1] = value

    def delete_rows(self, index):
        del self.rows[index - 1]

    def clear(self):
        self.rows = []


class FakeSheetsClient:
    def __init__(self):
        self.sheet = FakeWorksheet()

    def get_data_sheet(self):
        return self.sheet


class BrokenSheetsClient:
    def get_data_sheet(self):
        raise RuntimeError("quota exceeded")


class FailingStorage(KeyValueStorageInterface):
    """Backend whose every operation fails."""

    def get(self, key):
        raise StorageError("unavailable")

    def set(self, key, value):
        raise StorageError("quota exceeded")

    def delete(self, key):
        raise StorageError("unavailable")

    def clear(self):
        raise StorageError("unavailable")

    def keys(self):
        raise StorageError("unavailable")


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def repository(storage):
    return FinanceRepository(storage)


class TestInMemoryStorage:
    """Tests for the dictionary backend."""

    def test_get_set_delete(self, storage):
        """Test the basic key-value contract."""
        assert storage.get("a") is None
        storage.set("a", "1")
        assert storage.get("a") == "1"
        assert storage.delete("a") is True
        assert storage.delete("a") is False
        assert storage.get("a") is None

    def test_clear(self, storage):
        """Test that clear removes every key."""
        storage.set("a", "1")
        storage.set("b", "2")
        storage.clear()
        assert storage.keys() == []


class TestJsonFileStorage:
    """Tests for the JSON file backend."""

    def test_values_survive_new_instance(self, tmp_path):
        """Test that data is read back from disk."""
        path = tmp_path / "data.json"
        JsonFileKeyValueStorage(path).set("k", "v")
        assert JsonFileKeyValueStorage(path).get("k") == "v"

    def test_missing_file_is_empty(self, tmp_path):
        """Test that a missing file behaves like empty storage."""
        storage = JsonFileKeyValueStorage(tmp_path / "absent.json")
        assert storage.get("k") is None
        assert storage.keys() == []

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        """Test that unreadable documents raise StorageError."""
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileKeyValueStorage(path).get("k")

    def test_delete_and_clear(self, tmp_path):
        """Test delete and clear persist to disk."""
        path = tmp_path / "data.json"
        storage = JsonFileKeyValueStorage(path)
        storage.set("a", "1")
        storage.set("b", "2")
        assert storage.delete("a") is True
        assert json.loads(path.read_text(encoding="utf-8")) == {"b": "2"}
        storage.clear()
        assert storage.keys() == []

    def test_failed_write_leaves_no_temp_file(self, tmp_path, monkeypatch):
        """Test that a failed move removes the temporary file and keeps the old document."""
        path = tmp_path / "data.json"
        storage = JsonFileKeyValueStorage(path)
        storage.set("a", "1")

        def fail_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(json_file_module.os, "replace", fail_replace)
        with pytest.raises(StorageError):
            storage.set("b", "2")

        assert list(tmp_path.glob("*.tmp")) == []
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}


class TestGoogleSheetsStorage:
    """Tests for the Sheets backend against a fake worksheet."""

    def test_set_appends_then_updates(self):
        """Test that a new key is appended and an existing one updated."""
        client = FakeSheetsClient()
        storage = GoogleSheetsKeyValueStorage(client)

        storage.set("k", "first")
        assert len(client.sheet.rows) == 2
        storage.set("k", "second")
        assert len(client.sheet.rows) == 2
        assert storage.get("k") == "second"

    def test_delete_and_keys(self):
        """Test deleting rows and listing keys."""
        storage = GoogleSheetsKeyValueStorage(FakeSheetsClient())
        storage.set("a", "1")
        storage.set("b", "2")
        assert storage.delete("a") is True
        assert storage.delete("missing") is False
        assert storage.keys() == ["b"]

    def test_clear_keeps_header(self):
        """Test that clearing leaves only the header row."""
        client = FakeSheetsClient()
        storage = GoogleSheetsKeyValueStorage(client)
        storage.set("a", "1")
        storage.clear()
        assert client.sheet.rows == [["key", "value", "updated_at"]]

    def test_errors_are_wrapped(self):
        """Test that client failures surface as StorageError."""
        storage = GoogleSheetsKeyValueStorage(BrokenSheetsClient())
        with pytest.raises(StorageError, match="quota exceeded"):
            storage.set("k", "v")


class TestFinanceRepository:
    """Tests for collection load/save."""

    def test_keys_use_prefix(self, repository, storage):
        """Test that collections are stored under prefixed keys."""
        repository.save_accounts([AccountDraft(name="Bank").to_entity()])
        assert storage.keys() == ["finance_tracker_accounts"]

    def test_custom_prefix(self, storage):
        """Test a configured key prefix."""
        FinanceRepository(storage, key_prefix="ft_").save_settings(UserSettings())
        assert storage.keys() == ["ft_settings"]

    def test_round_trip_all_collections(self, repository):
        """Test saving and loading every collection."""
        account = AccountDraft(name="Bank", balance=Decimal("12.34")).to_entity()
        txn = TransactionDraft(
            amount=Decimal("9.99"),
            transaction_date=date(2024, 4, 2),
            account_id=account.id,
        ).to_entity()
        sub = SubscriptionDraft(
            name="Music",
            amount=Decimal("10"),
            frequency=Frequency.WEEKLY,
            next_payment_date=date(2024, 5, 1),
        ).to_entity()
        goal = GoalDraft(name="Trip", target_amount=Decimal("500")).to_entity()
        debt = DebtDraft(name="Card", total_amount=Decimal("300"), due_date=date(2024, 6, 1)).to_entity()
        settings = UserSettings(monthly_budget=Decimal("1500"), theme=Theme.DARK)

        assert repository.save_accounts([account])
        assert repository.save_transactions([txn])
        assert repository.save_subscriptions([sub])
        assert repository.save_goals([goal])
        assert repository.save_debts([debt])
        assert repository.save_settings(settings)

        assert repository.load_accounts() == [account]
        assert repository.load_transactions() == [txn]
        assert repository.load_subscriptions() == [sub]
        assert repository.load_goals() == [goal]
        assert repository.load_debts() == [debt]
        assert repository.load_settings() == settings

    def test_absent_keys_yield_defaults(self, repository):
        """Test that a fresh store loads as empty collections and default settings."""
        assert repository.load_transactions() == []
        assert repository.load_debts() == []
        assert repository.load_settings() == UserSettings()

    def test_corrupt_json_yields_empty(self, storage, repository):
        """Test that unparseable values load as empty."""
        storage.set("finance_tracker_transactions", "{broken")
        storage.set("finance_tracker_settings", "not json")
        assert repository.load_transactions() == []
        assert repository.load_settings() == UserSettings()

    def test_wrong_shape_yields_empty(self, storage, repository):
        """Test that a non-list collection or invalid items load as empty."""
        storage.set("finance_tracker_goals", json.dumps({"name": "x"}))
        storage.set("finance_tracker_debts", json.dumps([{"name": "no amounts"}]))
        assert repository.load_goals() == []
        assert repository.load_debts() == []

    def test_read_failure_yields_defaults(self):
        """Test that loads never raise when the backend fails."""
        repository = FinanceRepository(FailingStorage())
        assert repository.load_accounts() == []
        assert repository.load_settings() == UserSettings()

    def test_write_failure_is_logged_not_raised(self):
        """Test that save failures return False and leave an audit event."""
        audit_logger = AuditLogger()
        repository = FinanceRepository(FailingStorage(), audit_logger=audit_logger)

        assert repository.save_goals([]) is False
        assert repository.clear_all() is False

        failures = audit_logger.events_of_type(AuditEventType.PERSISTENCE_FAILED)
        assert len(failures) == 2
        assert failures[0].details["key"] == "finance_tracker_goals"

    def test_clear_all(self, storage, repository):
        """Test that clear_all wipes every key."""
        repository.save_settings(UserSettings())
        repository.save_goals([])
        assert repository.clear_all() is True
        assert storage.keys() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
