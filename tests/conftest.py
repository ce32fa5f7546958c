"""
Shared fixtures.

Everything runs against in-memory storage unless a test asks for
`tmp_path`. No test touches the user's real data directory.
"""

from typing import Optional

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings, StorageSettings
from expense_tracker.services.storage import InMemoryStorage, StorageError
from expense_tracker.store import ExpenseStore, ShoppingListStore


class FlakyStorage(InMemoryStorage):
    """
    In-memory storage whose reads or writes can be switched off.

    `fail_keys` refuses writes to just the named keys.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False
        self.fail_keys: set[str] = set()

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageError(f"read of '{key}' refused")
        return super().get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes or key in self.fail_keys:
            raise StorageError(f"write of '{key}' refused")
        super().set(key, value)


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(backend="memory")


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(export_filename_prefix="expenses_backup")


@pytest.fixture
def storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger(history_size=1000)


@pytest.fixture
def shopping_store(storage, audit_logger, storage_settings) -> ShoppingListStore:
    return ShoppingListStore(storage, audit_logger=audit_logger, settings=storage_settings)


@pytest.fixture
def store(storage, audit_logger, shopping_store, storage_settings, app_settings) -> ExpenseStore:
    """An expense store seeded with the default categories."""
    return ExpenseStore(
        storage,
        audit_logger=audit_logger,
        shopping_lists=shopping_store,
        settings=storage_settings,
        app_settings=app_settings,
    )
