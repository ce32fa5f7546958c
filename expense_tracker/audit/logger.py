"""
Audit Logger

DESIGN DECISION: Every mutation of stored data is logged, and so is every
time the stores recover from bad data on their own (falling back to
defaults, refusing an import). Silent recovery is still recovery, and the
user deserves to be able to find out it happened.

The audit logger:
- Is synchronous, like the stores that call it
- Gracefully handles failures (logging never breaks a mutation)
- Keeps a bounded in-memory history for "what just happened" views
"""

from collections import deque
from typing import Optional

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for the running session)
    """

    def __init__(self, history_size: int = 500):
        """
        Initialize audit logger.

        Args:
            history_size: How many events to keep in memory.
                          0 disables the history.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the structured log accepted the event.
        """
        self._history.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # A broken log handler must not abort the mutation being audited
            return False

        return True

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def clear(self) -> None:
        self._history.clear()

    def log_added(
        self,
        entity_type: str,
        entity_id: str,
        summary: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log creation of a category, subcategory, expense or shopping list."""
        self.log(AuditEventBuilder.entity_added(entity_type, entity_id, summary, details))

    def log_updated(
        self,
        entity_type: str,
        entity_id: str,
        summary: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an in-place update."""
        self.log(AuditEventBuilder.entity_updated(entity_type, entity_id, summary, details))

    def log_deleted(
        self,
        entity_type: str,
        entity_id: str,
        cascaded_expenses: int = 0,
    ) -> None:
        """Log a deletion and how many expenses went with it."""
        self.log(AuditEventBuilder.entity_deleted(entity_type, entity_id, cascaded_expenses))

    def log_not_found(
        self,
        operation: str,
        entity_type: str,
        entity_id: str,
    ) -> None:
        """Log an operation that matched nothing and therefore did nothing."""
        self.log(AuditEventBuilder.reference_not_found(operation, entity_type, entity_id))

    def log_exported(
        self,
        category_count: int,
        expense_count: int,
        shopping_list_count: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.data_exported(
            category_count, expense_count, shopping_list_count
        ))

    def log_imported(
        self,
        category_count: int,
        expense_count: int,
        shopping_list_count: Optional[int] = None,
    ) -> None:
        self.log(AuditEventBuilder.data_imported(
            category_count, expense_count, shopping_list_count
        ))

    def log_import_rejected(
        self,
        issues: list[dict],
        error_message: Optional[str] = None,
    ) -> None:
        """Log an import that was refused, with the validation issues."""
        self.log(AuditEventBuilder.import_rejected(issues, error_message))

    def log_state_loaded(self, key: str, item_count: int) -> None:
        self.log(AuditEventBuilder.state_loaded(key, item_count))

    def log_load_failed(
        self,
        key: str,
        error_message: str,
        fallback: str,
    ) -> None:
        """Log unreadable stored data and what was used instead."""
        self.log(AuditEventBuilder.storage_load_failed(key, error_message, fallback))

    def log_defaults_seeded(self, category_count: int) -> None:
        self.log(AuditEventBuilder.defaults_seeded(category_count))

    def log_legacy_migrated(
        self,
        legacy_key: str,
        category_count: int,
        expense_count: int,
    ) -> None:
        self.log(AuditEventBuilder.legacy_data_migrated(
            legacy_key, category_count, expense_count
        ))

    def log_save_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(key, error_message))
