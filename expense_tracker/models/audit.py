"""
Audit Models for Expense Tracker

Every mutation, rejection and recovery in the stores is logged.
This provides:
1. Traceability of how the stored data reached its current state
2. Debugging information when storage turns out to be unreadable
3. A reason to show the user when an import is refused

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from expense_tracker.models.expense import new_id, utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_DELETED = "category_deleted"
    SUBCATEGORY_ADDED = "subcategory_added"
    SUBCATEGORY_DELETED = "subcategory_deleted"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Shopping lists
    SHOPPING_LIST_CREATED = "shopping_list_created"
    SHOPPING_LIST_UPDATED = "shopping_list_updated"
    SHOPPING_LIST_DELETED = "shopping_list_deleted"

    # Exchange
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"

    # Storage
    STATE_LOADED = "state_loaded"
    STORAGE_LOAD_FAILED = "storage_load_failed"
    DEFAULTS_SEEDED = "defaults_seeded"
    LEGACY_DATA_MIGRATED = "legacy_data_migrated"
    SAVE_FAILED = "save_failed"

    # Operations that matched nothing
    REFERENCE_NOT_FOUND = "reference_not_found"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: str = Field(
        default_factory=new_id,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'category', 'expense', 'storage')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity, or the storage key"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_added("expense", expense.id, "49.90 on 2024-03-01")
        event = AuditEventBuilder.import_rejected(error_count=2, issues=[...])
    """

    _ADDED = {
        "category": AuditEventType.CATEGORY_ADDED,
        "subcategory": AuditEventType.SUBCATEGORY_ADDED,
        "expense": AuditEventType.EXPENSE_ADDED,
        "shopping_list": AuditEventType.SHOPPING_LIST_CREATED,
    }
    _DELETED = {
        "category": AuditEventType.CATEGORY_DELETED,
        "subcategory": AuditEventType.SUBCATEGORY_DELETED,
        "expense": AuditEventType.EXPENSE_DELETED,
        "shopping_list": AuditEventType.SHOPPING_LIST_DELETED,
    }
    _UPDATED = {
        "expense": AuditEventType.EXPENSE_UPDATED,
        "shopping_list": AuditEventType.SHOPPING_LIST_UPDATED,
    }

    @staticmethod
    def entity_added(
        entity_type: str,
        entity_id: str,
        summary: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._ADDED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.replace('_', ' ').capitalize()} added: {summary}",
            details=details or {},
        )

    @staticmethod
    def entity_updated(
        entity_type: str,
        entity_id: str,
        summary: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._UPDATED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.replace('_', ' ').capitalize()} updated: {summary}",
            details=details or {},
        )

    @staticmethod
    def entity_deleted(
        entity_type: str,
        entity_id: str,
        cascaded_expenses: int = 0,
    ) -> AuditEvent:
        description = f"{entity_type.replace('_', ' ').capitalize()} deleted"
        if cascaded_expenses:
            description += f" with {cascaded_expenses} expenses"
        return AuditEvent(
            event_type=AuditEventBuilder._DELETED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details={"cascaded_expenses": cascaded_expenses},
        )

    @staticmethod
    def reference_not_found(
        operation: str,
        entity_type: str,
        entity_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFERENCE_NOT_FOUND,
            severity=AuditSeverity.DEBUG,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation} ignored: no {entity_type} with this id",
            details={"operation": operation},
        )

    @staticmethod
    def data_exported(
        category_count: int,
        expense_count: int,
        shopping_list_count: Optional[int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            description=f"Exported {category_count} categories and {expense_count} expenses",
            details={
                "categories": category_count,
                "expenses": expense_count,
                "shopping_lists": shopping_list_count,
            },
        )

    @staticmethod
    def data_imported(
        category_count: int,
        expense_count: int,
        shopping_list_count: Optional[int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            description=f"Imported {category_count} categories and {expense_count} expenses",
            details={
                "categories": category_count,
                "expenses": expense_count,
                "shopping_lists": shopping_list_count,
            },
        )

    @staticmethod
    def import_rejected(
        issues: list[dict],
        error_message: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            description=f"Import rejected with {len(issues)} issues",
            details={"issues": issues},
            error_message=error_message,
        )

    @staticmethod
    def state_loaded(
        key: str,
        item_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="storage",
            entity_id=key,
            description=f"Loaded {item_count} items from '{key}'",
            details={"item_count": item_count},
        )

    @staticmethod
    def storage_load_failed(
        key: str,
        error_message: str,
        fallback: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            entity_id=key,
            description=f"Could not load '{key}', using {fallback}",
            details={"fallback": fallback},
            error_message=error_message,
        )

    @staticmethod
    def defaults_seeded(category_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFAULTS_SEEDED,
            entity_type="storage",
            description=f"Seeded {category_count} default categories",
            details={"categories": category_count},
        )

    @staticmethod
    def legacy_data_migrated(
        legacy_key: str,
        category_count: int,
        expense_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEGACY_DATA_MIGRATED,
            entity_type="storage",
            entity_id=legacy_key,
            description=f"Migrated combined snapshot from '{legacy_key}'",
            details={
                "categories": category_count,
                "expenses": expense_count,
            },
        )

    @staticmethod
    def save_failed(
        key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description=f"Failed to write '{key}'",
            error_message=error_message,
        )
