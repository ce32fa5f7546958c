"""
Application Wiring for Expense Tracker

This module ties the components together: one storage medium, one audit
logger, and the two stores sharing them. Views get everything they need
from `create_app_components` and never construct stores themselves.

DESIGN DECISION: Both stores share one storage instance and one audit
logger, so an export sees exactly what the shopping-list screens see and
the audit history tells a single story.
"""

from typing import NamedTuple, Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.config import Settings, get_settings
from expense_tracker.reports import ExpenseReporter
from expense_tracker.services.storage import (
    FileStorage,
    InMemoryStorage,
    KeyValueStorageInterface,
)
from expense_tracker.store import ExpenseStore, ShoppingListStore


class AppComponents(NamedTuple):
    """Everything a front end needs."""
    expense_store: ExpenseStore
    shopping_lists: ShoppingListStore
    reporter: ExpenseReporter
    audit_logger: AuditLogger
    storage: KeyValueStorageInterface


def create_storage(settings: Optional[Settings] = None) -> KeyValueStorageInterface:
    """Build the storage backend named in the settings."""
    storage_settings = (settings or get_settings()).storage
    if storage_settings.backend == "memory":
        return InMemoryStorage()
    return FileStorage(storage_settings.data_dir)


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
    settings: Optional[Settings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        storage: Storage medium to use. If None, it is built from settings.
        settings: Settings to use. If None, the cached global settings.

    Returns:
        AppComponents with both stores already loaded
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    app_settings = settings.app

    if storage is None:
        storage = create_storage(settings)

    audit_logger = AuditLogger(history_size=app_settings.audit_history_size)

    shopping_lists = ShoppingListStore(
        storage,
        audit_logger=audit_logger,
        settings=storage_settings,
    )
    expense_store = ExpenseStore(
        storage,
        audit_logger=audit_logger,
        shopping_lists=shopping_lists,
        settings=storage_settings,
        app_settings=app_settings,
    )

    return AppComponents(
        expense_store=expense_store,
        shopping_lists=shopping_lists,
        reporter=ExpenseReporter(expense_store),
        audit_logger=audit_logger,
        storage=storage,
    )
