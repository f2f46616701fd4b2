"""Services package."""

from household_ledger.services.storage import (
    AuditStorageInterface,
    ConcurrentModificationError,
    InMemoryAuditStorage,
    InMemoryLedgerStore,
    LedgerSnapshot,
    LedgerStoreInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ConcurrentModificationError",
    "InMemoryAuditStorage",
    "InMemoryLedgerStore",
    "LedgerSnapshot",
    "LedgerStoreInterface",
    "NotFoundError",
    "StorageError",
]
