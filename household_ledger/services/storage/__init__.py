"""
Storage Services Package

Provides abstract interfaces and concrete implementations for ledger storage.
Currently implements an in-memory backend, but designed to be swappable.
"""

from household_ledger.services.storage.interface import (
    AuditStorageInterface,
    ConcurrentModificationError,
    LedgerSnapshot,
    LedgerStoreInterface,
    NotFoundError,
    StorageError,
)
from household_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerSnapshot",
    "LedgerStoreInterface",
    # Exceptions
    "ConcurrentModificationError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryLedgerStore",
]
