"""
In-memory storage implementations.

The ledger store keeps one immutable tuple plus a version counter and
swaps both under a lock. Readers never see a half-applied change.
"""

import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Union

import structlog

from household_ledger.models.audit import AuditEvent
from household_ledger.models.ledger import LedgerEntry
from household_ledger.services.storage.interface import (
    AuditStorageInterface,
    ConcurrentModificationError,
    LedgerSnapshot,
    LedgerStoreInterface,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


class InMemoryLedgerStore(LedgerStoreInterface):
    """
    Thread-safe in-memory ledger.

    Usage:
        store = InMemoryLedgerStore(entries)
        snap = store.snapshot()
        store.replace([new_entry, *snap.entries], snap.version)
    """

    def __init__(
        self,
        entries: Iterable[Union[LedgerEntry, Mapping[str, Any]]] = (),
    ):
        """
        Initialize the store.

        Args:
            entries: Initial ledger, newest-first. Raw mappings are
                     validated into LedgerEntry objects.
        """
        self._lock = threading.Lock()
        self._version = 0
        self._entries: tuple[LedgerEntry, ...] = tuple(
            _to_entry(entry) for entry in entries
        )

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(self._version, self._entries)

    def replace(
        self,
        entries: Sequence[LedgerEntry],
        expected_version: int,
    ) -> LedgerSnapshot:
        with self._lock:
            if expected_version != self._version:
                raise ConcurrentModificationError(expected_version, self._version)
            return self._swap(entries)

    def update(
        self,
        change: Callable[[tuple[LedgerEntry, ...]], Sequence[LedgerEntry]],
    ) -> LedgerSnapshot:
        with self._lock:
            new_entries = change(self._entries)
            if tuple(new_entries) == self._entries:
                return LedgerSnapshot(self._version, self._entries)
            return self._swap(new_entries)

    def get_entry(self, entry_id: str) -> LedgerEntry:
        for entry in self.snapshot().entries:
            if entry.id == entry_id:
                return entry
        raise NotFoundError(f"No ledger entry with id {entry_id}")

    def __len__(self) -> int:
        return len(self.snapshot().entries)

    def _swap(self, entries: Sequence[LedgerEntry]) -> LedgerSnapshot:
        # Caller holds the lock
        self._entries = tuple(entries)
        self._version += 1
        logger.debug(
            "ledger_replaced",
            version=self._version,
            entry_count=len(self._entries),
        )
        return LedgerSnapshot(self._version, self._entries)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    def list_events(self, limit: int = 100) -> list[AuditEvent]:
        with self._lock:
            return list(reversed(self._events))[:limit]


def _to_entry(entry: Union[LedgerEntry, Mapping[str, Any]]) -> LedgerEntry:
    if isinstance(entry, LedgerEntry):
        return entry
    return LedgerEntry.model_validate(entry)
