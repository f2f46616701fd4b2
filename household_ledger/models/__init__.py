"""
Data Models Package

This package contains all Pydantic models used by the Household Ledger engine.
All data flowing through the engine must conform to these schemas.
"""

from household_ledger.models.ledger import (
    CategoryRule,
    Currency,
    LedgerEntry,
    LedgerKind,
    RepairReport,
    Suggestion,
    ValidationIssue,
    ValidationResult,
    as_amount,
    new_entry_id,
    read_amount,
    read_date,
    read_date_text,
    read_field,
    read_kind,
    read_text,
    suggestion_key,
)
from household_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CategoryRule",
    "Currency",
    "LedgerEntry",
    "LedgerKind",
    "RepairReport",
    "Suggestion",
    "ValidationIssue",
    "ValidationResult",
    # Lenient readers
    "as_amount",
    "new_entry_id",
    "read_amount",
    "read_date",
    "read_date_text",
    "read_field",
    "read_kind",
    "read_text",
    "suggestion_key",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
