"""Services package."""

from finance_tracker.services.export import build_export
from finance_tracker.services.storage import (
    ConnectionError,
    FinanceRepository,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
    StorageError,
)

__all__ = [
    # Export
    "build_export",
    # Storage services
    "ConnectionError",
    "FinanceRepository",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueStorageInterface",
    "StorageError",
]
