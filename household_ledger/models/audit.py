"""
Audit Models for the Household Ledger engine

Every change the engine proposes to the ledger is logged for audit purposes.
This provides:
1. Traceability of generated and repaired entries
2. Debugging information when a suggestion or carry-forward looks wrong
3. Ability to reconstruct why an entry exists

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ingestion
    ENTRIES_IMPORTED = "entries_imported"
    ENTRY_REJECTED = "entry_rejected"
    NAMES_REPAIRED = "names_repaired"
    AUTO_CATEGORIZED = "auto_categorized"

    # Recommendation
    RECOMMENDATION_COMPUTED = "recommendation_computed"

    # Recurring expenses
    RECURRING_GENERATED = "recurring_generated"
    RECURRING_SKIPPED = "recurring_skipped"

    # Persistence
    LEDGER_APPLIED = "ledger_applied"
    CONCURRENT_MODIFICATION = "concurrent_modification"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'ledger', 'suggestion')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Id of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import run)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_row(self) -> list[str]:
        """
        Flatten to a row for tabular audit storage.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_id, correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, ensure_ascii=False, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.recurring_generated(entry_ids, month, correlation_id)
    """

    @staticmethod
    def entries_imported(
        imported: int,
        rejected: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRIES_IMPORTED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Imported {imported} entries ({rejected} rejected)",
            details={
                "imported": imported,
                "rejected": rejected,
            },
        )

    @staticmethod
    def entry_rejected(
        entry_id: Optional[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Entry rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def names_repaired(
        entry_ids: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NAMES_REPAIRED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Repaired category names on {len(entry_ids)} entries",
            details={"entry_ids": entry_ids},
        )

    @staticmethod
    def auto_categorized(
        entry_ids: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTO_CATEGORIZED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Auto-categorized {len(entry_ids)} entries",
            details={"entry_ids": entry_ids},
        )

    @staticmethod
    def recommendation_computed(
        kind: str,
        suggestion_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOMMENDATION_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="suggestion",
            correlation_id=correlation_id,
            description=f"Computed {suggestion_count} {kind} suggestions",
            details={
                "kind": kind,
                "suggestion_count": suggestion_count,
            },
        )

    @staticmethod
    def recurring_generated(
        entry_ids: list[str],
        month: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_GENERATED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Carried {len(entry_ids)} fixed expenses into {month}",
            details={
                "month": month,
                "entry_ids": entry_ids,
            },
        )

    @staticmethod
    def recurring_skipped(
        month: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_SKIPPED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"No fixed expenses carried into {month}: {reason}",
            details={
                "month": month,
                "reason": reason,
            },
        )

    @staticmethod
    def ledger_applied(
        version: int,
        added: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_APPLIED,
            entity_type="ledger",
            entity_id=str(version),
            correlation_id=correlation_id,
            description=f"Ledger version {version} applied ({added} new entries)",
            details={
                "version": version,
                "added": added,
            },
        )

    @staticmethod
    def concurrent_modification(
        expected_version: int,
        actual_version: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONCURRENT_MODIFICATION,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            correlation_id=correlation_id,
            description="Ledger changed since the snapshot was taken",
            details={
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
