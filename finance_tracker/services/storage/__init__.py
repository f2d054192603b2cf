"""
Storage Services Package

Provides the key-value storage interface, its backends, and the repository
that maps entity collections onto keys.
"""

from finance_tracker.services.storage.interface import (
    ConnectionError,
    KeyValueStorageInterface,
    StorageError,
)
from finance_tracker.services.storage.memory import InMemoryKeyValueStorage
from finance_tracker.services.storage.json_file import JsonFileKeyValueStorage
from finance_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
)
from finance_tracker.services.storage.repository import (
    COLLECTION_NAMES,
    FinanceRepository,
)

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Backends
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    # Repository
    "COLLECTION_NAMES",
    "FinanceRepository",
]
