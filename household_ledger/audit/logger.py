"""
Audit Logger

DESIGN DECISION: Every change the engine proposes to the ledger is logged.
This provides:
1. Complete traceability of generated and repaired entries
2. Debugging capability for odd suggestions
3. User can see why an entry appeared in their ledger

The audit logger:
- Is synchronous, like the engine it serves
- Gracefully handles failures (doesn't crash the caller if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from household_ledger.config import get_settings
from household_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from household_ledger.services.storage import AuditStorageInterface, StorageError


def configure_logging() -> None:
    """
    Configure structlog for the engine.

    Called once at import; call again after changing LEDGER_LOG_* settings.
    """
    settings = get_settings().app
    logging.getLogger("household_ledger").setLevel(settings.log_level)

    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("household_ledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_entries_imported(
        self,
        imported: int,
        rejected: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.entries_imported(imported, rejected, correlation_id))

    def log_entry_rejected(
        self,
        entry_id: Optional[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.entry_rejected(entry_id, issues, correlation_id))

    def log_names_repaired(
        self,
        entry_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log category-name repairs."""
        self.log(AuditEventBuilder.names_repaired(entry_ids, correlation_id))

    def log_auto_categorized(
        self,
        entry_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.auto_categorized(entry_ids, correlation_id))

    def log_recommendation(
        self,
        kind: str,
        suggestion_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.recommendation_computed(kind, suggestion_count, correlation_id))

    def log_recurring_generated(
        self,
        entry_ids: list[str],
        month: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log fixed expenses carried into a new month."""
        self.log(AuditEventBuilder.recurring_generated(entry_ids, month, correlation_id))

    def log_recurring_skipped(
        self,
        month: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.recurring_skipped(month, reason, correlation_id))

    def log_ledger_applied(
        self,
        version: int,
        added: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ledger_applied(version, added, correlation_id))

    def log_concurrent_modification(
        self,
        expected_version: int,
        actual_version: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(
            AuditEventBuilder.concurrent_modification(
                expected_version, actual_version, correlation_id
            )
        )

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(
            AuditEventBuilder.system_error(
                error_type=error_type,
                error_message=error_message,
                details=details,
                correlation_id=correlation_id,
            )
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a CSV import).
    Pass it through all subsequent operations.
    """
    return uuid4()
