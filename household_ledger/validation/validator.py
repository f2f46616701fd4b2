"""
Two-Stage Entry Validation

DESIGN DECISION: Validation of incoming rows happens in two stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking and required fields (pydantic)
- Entry invariants: positive amount, real calendar date,
  income without a source account
- This catches malformed rows from CSV files and old backups

STAGE 2 - SEMANTIC VALIDATION:
- Account presence per kind
- Currency precision (whole won, cents for dollars)
- Future dates and absurd amounts
- This catches rows that are well-formed but probably wrong

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the import decides what to keep.
"""

from collections.abc import Mapping
from datetime import timedelta
from decimal import Decimal
from typing import Any, Union

from pydantic import ValidationError

from household_ledger.clock import today_kst
from household_ledger.config import get_settings
from household_ledger.models.ledger import (
    Currency,
    LedgerEntry,
    LedgerKind,
    ValidationIssue,
    ValidationResult,
    read_field,
)


class EntryValidator:
    """
    Validates ledger rows through a two-stage pipeline.

    Stage 2 only runs when stage 1 produced an entry.
    """

    def __init__(self):
        self._settings = get_settings().app

    def _validate_schema(
        self,
        raw: Union[LedgerEntry, Mapping[str, Any]],
    ) -> tuple[Union[LedgerEntry, None], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (entry_or_none, list_of_issues)
        """
        if isinstance(raw, LedgerEntry):
            return raw, []

        try:
            return LedgerEntry.model_validate(raw), []
        except ValidationError as e:
            issues = []
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"]) or "entry"
                issues.append(ValidationIssue(
                    field=location,
                    issue_type=error["type"],
                    message=error["msg"],
                    severity="error",
                ))
            return None, issues

    def _validate_semantic(
        self,
        entry: LedgerEntry,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        # Expenses and transfers leave an account; income and transfers land in one
        if entry.kind in (LedgerKind.EXPENSE, LedgerKind.TRANSFER) and not entry.from_account_id:
            issues.append(ValidationIssue(
                field="fromAccountId",
                issue_type="missing",
                message=f"A {entry.kind.value} needs a source account",
                severity="error",
                suggested_fix="Choose the account the money left from",
            ))
        if entry.kind in (LedgerKind.INCOME, LedgerKind.TRANSFER) and not entry.to_account_id:
            issues.append(ValidationIssue(
                field="toAccountId",
                issue_type="missing",
                message=f"A {entry.kind.value} needs a destination account",
                severity="error",
                suggested_fix="Choose the account the money went to",
            ))
        if (
            entry.kind == LedgerKind.TRANSFER
            and entry.from_account_id
            and entry.from_account_id == entry.to_account_id
        ):
            issues.append(ValidationIssue(
                field="toAccountId",
                issue_type="inconsistent",
                message="Transfer source and destination are the same account",
                severity="warning",
            ))

        # Currency precision
        exponent = entry.amount.normalize().as_tuple().exponent
        if entry.currency == Currency.KRW and isinstance(exponent, int) and exponent < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_precision",
                message=f"KRW amount ({entry.amount}) has a fractional part",
                severity="warning",
                suggested_fix="Won amounts are whole numbers",
            ))
        if entry.currency == Currency.USD and isinstance(exponent, int) and exponent < -2:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_precision",
                message=f"USD amount ({entry.amount}) has more than two decimals",
                severity="warning",
                suggested_fix="Round to whole cents",
            ))

        # Future date check (with tolerance)
        max_future_date = today_kst() + timedelta(days=self._settings.future_date_tolerance_days)
        if entry.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Entry date ({entry.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        # Absurd amount check
        max_amount = Decimal(str(self._settings.max_entry_amount_krw))
        if entry.currency == Currency.KRW and entry.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount (₩{entry.amount:,}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        raw: Union[LedgerEntry, Mapping[str, Any]],
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            raw: A LedgerEntry or a raw row in the store's JSON shape

        Returns:
            ValidationResult with all issues found
        """
        entry, all_issues = self._validate_schema(raw)
        schema_valid = entry is not None

        semantic_valid = False
        if entry is not None:
            semantic_valid, semantic_issues = self._validate_semantic(entry)
            all_issues.extend(semantic_issues)

        entry_id = entry.id if entry is not None else read_field(raw, "id")

        return ValidationResult(
            entry_id=entry_id if isinstance(entry_id, str) else None,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            entry=entry,
            issues=all_issues,
            warnings=[issue.message for issue in all_issues if issue.severity == "warning"],
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Summary of validation results for the import dialog."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if result.has_errors:
            lines.append("❌ This row cannot be imported:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
