"""
Stores Package

The state containers views read from and mutate through.
"""

from expense_tracker.store.defaults import (
    CATEGORY_PALETTE,
    default_categories,
)
from expense_tracker.store.expense_store import (
    CategoryMismatchError,
    ExpenseStore,
    ExpenseStoreError,
)
from expense_tracker.store.shopping_lists import ShoppingListStore

__all__ = [
    "CATEGORY_PALETTE",
    "CategoryMismatchError",
    "ExpenseStore",
    "ExpenseStoreError",
    "ShoppingListStore",
    "default_categories",
]
