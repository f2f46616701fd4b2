"""
Abstract Storage Interface

DESIGN DECISION: The engine never owns the ledger. It reads immutable
snapshots and hands back proposed entries; the store applies them.
This allows us to:
1. Swap the in-memory store for a file or browser-backed one later
2. Use in-memory storage for testing
3. Keep the classification logic free of persistence concerns

The only hard requirement on an implementation is that applying a change
is a single atomic replace of the snapshot. Two carry-forward runs that
both see "no fixed expenses yet this month" must not both insert.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import NamedTuple

from household_ledger.models.audit import AuditEvent
from household_ledger.models.ledger import LedgerEntry


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConcurrentModificationError(StorageError):
    """The ledger changed between snapshot and replace."""

    def __init__(self, expected_version: int, actual_version: int):
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Ledger is at version {actual_version}, expected {expected_version}"
        )


class NotFoundError(StorageError):
    """Requested entry was not found."""
    pass


class LedgerSnapshot(NamedTuple):
    """An immutable view of the ledger at one version."""
    version: int
    entries: tuple[LedgerEntry, ...]


class LedgerStoreInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Entries are kept newest-first, the order the client displays them.
    """

    @abstractmethod
    def snapshot(self) -> LedgerSnapshot:
        """
        Return the current ledger snapshot.

        The returned tuple is never mutated by the store afterwards.
        """
        pass

    @abstractmethod
    def replace(
        self,
        entries: Sequence[LedgerEntry],
        expected_version: int,
    ) -> LedgerSnapshot:
        """
        Atomically replace the ledger if it is still at expected_version.

        Raises:
            ConcurrentModificationError: If another writer got there first
        """
        pass

    @abstractmethod
    def update(
        self,
        change: Callable[[tuple[LedgerEntry, ...]], Sequence[LedgerEntry]],
    ) -> LedgerSnapshot:
        """
        Atomic read-modify-write.

        ``change`` receives the current entries and returns the new ledger.
        No other write can interleave between the read and the write.
        """
        pass

    @abstractmethod
    def get_entry(self, entry_id: str) -> LedgerEntry:
        """
        Retrieve an entry by id.

        Raises:
            NotFoundError: If no entry has this id
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def list_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events first."""
        pass
