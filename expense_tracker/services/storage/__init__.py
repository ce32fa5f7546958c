"""
Storage Services Package

Provides the abstract key-value interface and local implementations.
The stores only ever talk to the interface, so the medium is swappable.
"""

from expense_tracker.services.storage.interface import (
    InvalidKeyError,
    KeyValueStorageInterface,
    StorageError,
)
from expense_tracker.services.storage.local import (
    FileStorage,
    InMemoryStorage,
)

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "InvalidKeyError",
    "StorageError",
    # Local implementations
    "FileStorage",
    "InMemoryStorage",
]
