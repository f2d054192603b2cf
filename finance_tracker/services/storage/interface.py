"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the local JSON file for Google Sheets (or anything else)
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally tiny: a string key-value store,
the same contract a browser's local storage offers. Serialization
of entities is the repository's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value storage.

    Any backend (JSON file, Google Sheets, etc.) must implement these methods.
    Implementations raise StorageError when the backend is unusable.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
