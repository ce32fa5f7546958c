"""Services package."""

from expense_tracker.services.storage import (
    FileStorage,
    InMemoryStorage,
    InvalidKeyError,
    KeyValueStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "FileStorage",
    "InMemoryStorage",
    "InvalidKeyError",
    "KeyValueStorageInterface",
    "StorageError",
]
