"""
Data Models Package

This package contains all Pydantic models used by the expense tracker.
Everything the stores hold, persist or exchange conforms to these schemas.
"""

from expense_tracker.models.expense import (
    Category,
    Expense,
    ShoppingItem,
    ShoppingList,
    Subcategory,
    new_id,
)
from expense_tracker.models.exchange import (
    ExchangePayload,
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.report import (
    BreakdownResult,
    ChartSlice,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entity models
    "Category",
    "Expense",
    "ShoppingItem",
    "ShoppingList",
    "Subcategory",
    "new_id",
    # Exchange models
    "ExchangePayload",
    "ValidationIssue",
    "ValidationResult",
    # Report models
    "BreakdownResult",
    "ChartSlice",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
