"""
Ledger Session Orchestrator

This module ties the pure engine functions to a ledger store and defines
the flows the client drives:
1. Import (rows -> validate -> repair names -> auto-categorize -> prepend)
2. Suggest (keystroke -> recommend against the current snapshot)
3. Carry forward (app load -> generate fixed expenses -> prepend atomically)
4. Repair (backup restore -> normalize stored category names)

DESIGN DECISION: The engine functions are injected, not looked up from
module-level registries. A UI layer (or a test) builds a LedgerSession
with exactly the collaborators it wants.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date
from typing import Any, Optional, Union
from uuid import UUID

from household_ledger.audit import AuditLogger, create_correlation_id
from household_ledger.clock import month_key, today_kst
from household_ledger.models.ledger import (
    CategoryRule,
    LedgerEntry,
    LedgerKind,
    Suggestion,
    ValidationResult,
)
from household_ledger.normalization import (
    normalize_category,
    normalize_sub_category,
    repair_entry,
    repair_ledger,
)
from household_ledger.recommendation import apply_auto_categorization, learn_rule, recommend
from household_ledger.recurring import generate_recurring, should_generate
from household_ledger.services.storage import (
    ConcurrentModificationError,
    InMemoryAuditStorage,
    InMemoryLedgerStore,
    LedgerSnapshot,
    LedgerStoreInterface,
    StorageError,
)
from household_ledger.validation import EntryValidator

NameFn = Callable[[str], str]
RecommendFn = Callable[..., list[Suggestion]]
GenerateFn = Callable[..., list[LedgerEntry]]


class LedgerSession:
    """
    One user's ledger plus the engine functions that work on it.

    All writes go through LedgerStoreInterface.update, so a proposal is
    computed and applied against the same snapshot.
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[EntryValidator] = None,
        category_normalizer: NameFn = normalize_category,
        sub_category_normalizer: NameFn = normalize_sub_category,
        recommender: RecommendFn = recommend,
        recurring_generator: GenerateFn = generate_recurring,
        extra_rules: Sequence[CategoryRule] = (),
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or EntryValidator()
        self._normalize_category = category_normalizer
        self._normalize_sub_category = sub_category_normalizer
        self._recommend = recommender
        self._generate_recurring = recurring_generator
        self._rules: list[CategoryRule] = list(extra_rules)

    @property
    def entries(self) -> tuple[LedgerEntry, ...]:
        return self._store.snapshot().entries

    @property
    def rules(self) -> tuple[CategoryRule, ...]:
        """Rules learned in this session, on top of the defaults."""
        return tuple(self._rules)

    def _repair(self, entry: LedgerEntry) -> LedgerEntry:
        return repair_entry(entry, self._normalize_category, self._normalize_sub_category)

    def import_entries(
        self,
        rows: Iterable[Union[LedgerEntry, Mapping[str, Any]]],
        correlation_id: Optional[UUID] = None,
    ) -> tuple[list[LedgerEntry], list[ValidationResult]]:
        """
        Validate, repair and prepend imported rows.

        Rows that fail validation, or whose id is already in the ledger,
        are not imported.

        Returns:
            (imported_entries, rejected_results)
        """
        correlation_id = correlation_id or create_correlation_id()

        accepted: list[LedgerEntry] = []
        rejected: list[ValidationResult] = []
        for row in rows:
            result = self._validator.validate(row)
            if result.entry is None or not result.is_valid:
                rejected.append(result)
                self._audit_logger.log_entry_rejected(
                    result.entry_id,
                    [issue.model_dump() for issue in result.issues],
                    correlation_id,
                )
                continue
            accepted.append(result.entry)

        repaired = [self._repair(entry) for entry in accepted]
        repaired_ids = [
            entry.id for entry, fixed in zip(accepted, repaired) if fixed is not entry
        ]
        categorized = apply_auto_categorization(repaired, self._rules)
        categorized_ids = [
            entry.id for entry, fixed in zip(repaired, categorized) if fixed is not entry
        ]

        imported: list[LedgerEntry] = []

        def prepend(current: tuple[LedgerEntry, ...]) -> list[LedgerEntry]:
            known = {entry.id for entry in current}
            imported[:] = []
            for entry in categorized:
                if entry.id not in known:
                    known.add(entry.id)
                    imported.append(entry)
            return [*imported, *current]

        try:
            snapshot = self._store.update(prepend)
        except StorageError as e:
            self._audit_logger.log_error(
                error_type="import_failed",
                error_message=str(e),
                details={"row_count": len(categorized)},
                correlation_id=correlation_id,
            )
            raise

        if repaired_ids:
            self._audit_logger.log_names_repaired(repaired_ids, correlation_id)
        if categorized_ids:
            self._audit_logger.log_auto_categorized(categorized_ids, correlation_id)
        self._audit_logger.log_entries_imported(len(imported), len(rejected), correlation_id)
        if imported:
            self._audit_logger.log_ledger_applied(snapshot.version, len(imported), correlation_id)

        return imported, rejected

    def suggest(
        self,
        description: str,
        amount: Any,
        kind: Union[LedgerKind, str],
    ) -> list[Suggestion]:
        """Live suggestions for the entry being typed."""
        suggestions = self._recommend(description, amount, kind, self.entries)
        kind_value = kind.value if isinstance(kind, LedgerKind) else str(kind)
        self._audit_logger.log_recommendation(kind_value, len(suggestions))
        return suggestions

    def carry_forward_fixed_expenses(
        self,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[LedgerEntry]:
        """
        Generate this month's fixed expenses and prepend them atomically.

        The one-shot check and the insert happen under the store's lock,
        so repeated or concurrent calls converge to a no-op.

        Returns:
            The entries that were added (possibly empty)
        """
        correlation_id = correlation_id or create_correlation_id()
        today = today or today_kst()
        month = month_key(today)

        generated: list[LedgerEntry] = []
        gate_open = False

        def apply(current: tuple[LedgerEntry, ...]) -> Sequence[LedgerEntry]:
            nonlocal gate_open
            gate_open = should_generate(current, today)
            generated[:] = self._generate_recurring(current, today)
            if not generated:
                return current
            return [*generated, *current]

        snapshot = self._store.update(apply)

        if generated:
            self._audit_logger.log_recurring_generated(
                [entry.id for entry in generated], month, correlation_id
            )
            self._audit_logger.log_ledger_applied(snapshot.version, len(generated), correlation_id)
        else:
            reason = (
                "every fixed expense already exists"
                if gate_open
                else "already carried forward or nothing fixed last month"
            )
            self._audit_logger.log_recurring_skipped(month, reason, correlation_id)

        return generated

    def repair(self, correlation_id: Optional[UUID] = None) -> list[str]:
        """
        Normalize category names across the stored ledger.

        Returns:
            Ids of entries that were repaired
        """
        correlation_id = correlation_id or create_correlation_id()
        repaired_ids: list[str] = []

        def apply(current: tuple[LedgerEntry, ...]) -> list[LedgerEntry]:
            report = repair_ledger(
                current, self._normalize_category, self._normalize_sub_category
            )
            repaired_ids[:] = report.repaired_ids
            return report.entries

        snapshot = self._store.update(apply)
        if repaired_ids:
            self._audit_logger.log_names_repaired(repaired_ids, correlation_id)
            self._audit_logger.log_ledger_applied(snapshot.version, 0, correlation_id)
        return repaired_ids

    def apply_proposal(
        self,
        proposed: Sequence[LedgerEntry],
        expected_version: int,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerSnapshot:
        """
        Prepend entries that were computed against an earlier snapshot.

        For callers that propose outside the store's lock (e.g. a user
        confirming generated entries). The write only lands if the ledger
        is still at ``expected_version``.

        Raises:
            ConcurrentModificationError: If the ledger moved on; take a
                fresh snapshot and propose again
        """
        correlation_id = correlation_id or create_correlation_id()
        current = self._store.snapshot()
        try:
            snapshot = self._store.replace([*proposed, *current.entries], expected_version)
        except ConcurrentModificationError as e:
            self._audit_logger.log_concurrent_modification(
                e.expected_version, e.actual_version, correlation_id
            )
            raise

        self._audit_logger.log_ledger_applied(snapshot.version, len(proposed), correlation_id)
        return snapshot

    def learn_from(self, entry_id: str) -> Optional[CategoryRule]:
        """Remember a rule derived from a manually categorized entry."""
        rule = learn_rule(self._store.get_entry(entry_id))
        if rule is not None:
            self._rules.append(rule)
        return rule


def create_session(
    entries: Iterable[Union[LedgerEntry, Mapping[str, Any]]] = (),
    persist_audit: bool = True,
) -> LedgerSession:
    """
    Factory function wiring a session with in-memory storage.

    Args:
        entries: Initial ledger, newest-first
        persist_audit: Keep audit events in memory as well as in the log

    Returns:
        A ready LedgerSession
    """
    store = InMemoryLedgerStore(entries)
    audit_logger = AuditLogger(InMemoryAuditStorage() if persist_audit else None)
    return LedgerSession(store=store, audit_logger=audit_logger)
