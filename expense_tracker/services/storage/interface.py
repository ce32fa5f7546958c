"""
Abstract Storage Interface

DESIGN DECISION: The stores persist through a plain string key-value
interface, the same shape as browser local storage. This allows us to:
1. Keep the data on disk as one JSON document per key
2. Use in-memory storage for testing
3. Swap in another medium without touching store logic

The interface is intentionally tiny. Stores serialize their own snapshots;
the storage layer only moves text.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Any storage implementation must implement these methods.
    All operations are synchronous.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored text, or None if the key has never been written

        Raises:
            StorageError: If the medium cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store text under a key, replacing any previous value.

        A reader sees either the old value or the new one, never a mix.

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
    def keys(self) -> list[str]:
        """List all keys currently stored, sorted."""
        pass

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InvalidKeyError(StorageError, ValueError):
    """Key cannot be used with this storage backend."""
    pass
