"""
Tests for Household Ledger models

Test strategy:
1. Unit tests for the pydantic models and their invariants
2. Unit tests for the lenient readers used on raw store rows
3. Settings defaults, read from a clean environment
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from household_ledger.config import get_settings, validate_all_settings
from household_ledger.models.ledger import (
    CategoryRule,
    Currency,
    LedgerEntry,
    LedgerKind,
    Suggestion,
    ValidationIssue,
    ValidationResult,
    as_amount,
    new_entry_id,
    read_date,
    read_field,
    suggestion_key,
)
from household_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLedgerEntry:
    """Tests for the LedgerEntry model."""

    def test_from_store_row(self):
        """Test parsing the store's camelCase JSON shape."""
        entry = LedgerEntry.model_validate({
            "id": "L1",
            "date": "2024-05-15",
            "kind": "expense",
            "category": "주거비",
            "subCategory": "월세",
            "amount": 500000,
            "fromAccountId": "A1",
            "isFixedExpense": True,
        })
        assert entry.date == date(2024, 5, 15)
        assert entry.kind == LedgerKind.EXPENSE
        assert entry.sub_category == "월세"
        assert entry.amount == Decimal("500000")
        assert entry.currency == Currency.KRW
        assert entry.is_fixed_expense is True

    def test_snake_case_names_accepted(self):
        """Test that field names work as well as aliases."""
        entry = LedgerEntry(
            id="L1",
            date=date(2024, 5, 15),
            kind=LedgerKind.EXPENSE,
            amount=Decimal("1"),
            from_account_id="A1",
        )
        assert entry.from_account_id == "A1"
        assert entry.category == ""

    def test_null_text_fields_become_empty(self):
        entry = LedgerEntry.model_validate({
            "id": "L1", "date": "2024-05-15", "kind": "expense",
            "amount": 1, "category": None, "description": None,
        })
        assert entry.category == ""
        assert entry.description == ""

    @pytest.mark.parametrize("amount", [0, -1, "abc"])
    def test_rejects_non_positive_amount(self, amount):
        """Test that only positive amounts are accepted."""
        with pytest.raises(ValueError):
            LedgerEntry(id="L1", date=date(2024, 1, 1), kind="expense", amount=amount)

    def test_rejects_invalid_date(self):
        with pytest.raises(ValueError):
            LedgerEntry.model_validate(
                {"id": "L1", "date": "2024-02-30", "kind": "expense", "amount": 1}
            )

    def test_income_cannot_have_source_account(self):
        """Test the income invariant."""
        with pytest.raises(ValueError, match="Income entries cannot have a fromAccountId"):
            LedgerEntry(
                id="L1",
                date=date(2024, 1, 1),
                kind=LedgerKind.INCOME,
                amount=Decimal("100"),
                from_account_id="A1",
            )

    def test_entries_are_frozen(self, make_entry):
        entry = make_entry()
        with pytest.raises(ValueError):
            entry.category = "다른"

    def test_to_store_dict(self, make_entry):
        """Test serialization back to the store's shape."""
        data = make_entry(id="L9", sub_category="외식", is_fixed_expense=True).to_store_dict()
        assert data["id"] == "L9"
        assert data["date"] == "2024-06-01"
        assert data["subCategory"] == "외식"
        assert data["fromAccountId"] == "A1"
        assert data["isFixedExpense"] is True
        assert "toAccountId" not in data

    def test_new_entry_id_format(self):
        first, second = new_entry_id(), new_entry_id()
        assert first.startswith("L")
        assert "-" in first
        assert len(first.split("-")[1]) == 9
        assert first != second


class TestReaders:
    """Tests for the lenient field readers."""

    def test_read_field_prefers_alias(self):
        assert read_field({"subCategory": "a", "sub_category": "b"}, "sub_category") == "a"
        assert read_field({"sub_category": "b"}, "sub_category") == "b"

    def test_read_field_on_non_entries(self):
        assert read_field("text", "id") is None
        assert read_field(None, "id", "x") == "x"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (100, Decimal("100")),
            ("4300", Decimal("4300")),
            (Decimal("1.5"), Decimal("1.5")),
            (0, None),
            (-3, None),
            ("abc", None),
            (None, None),
            (False, None),
            (float("inf"), None),
            ([1], None),
        ],
    )
    def test_as_amount(self, value, expected):
        assert as_amount(value) == expected

    def test_read_date(self, make_entry):
        assert read_date(make_entry()) == date(2024, 6, 1)
        assert read_date({"date": "2024-06-01T09:00:00"}) == date(2024, 6, 1)
        assert read_date({"date": "garbage"}) is None
        assert read_date({}) is None

    def test_suggestion_key(self, make_entry):
        assert suggestion_key(make_entry(sub_category="외식")) == ("식비", "외식", "A1", "")
        assert suggestion_key({"category": 5}) == ("", "", "", "")


class TestClassificationModels:
    """Tests for suggestion and rule models."""

    def test_suggestion_serializes_camel_case(self):
        suggestion = Suggestion(category="카페", sub_category="음료", score=0.95)
        data = suggestion.model_dump(by_alias=True)
        assert data["subCategory"] == "음료"
        assert data["fromAccountId"] is None

    def test_rule_matches_case_insensitively(self):
        rule = CategoryRule(keywords=("Netflix",), category="문화생활")
        assert rule.matches("NETFLIX 구독")
        assert not rule.matches("유튜브")

    def test_rule_needs_keywords(self):
        with pytest.raises(ValueError):
            CategoryRule(keywords=(), category="x")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.NAMES_REPAIRED,
            description="Names repaired",
        )
        assert event.event_type == AuditEventType.NAMES_REPAIRED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.RECURRING_GENERATED,
            description="Carried forward",
            details={"month": "2024-06"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "recurring_generated"
        assert log_dict["details"]["month"] == "2024-06"
        assert log_dict["correlation_id"] is None

    def test_audit_event_to_row(self):
        """Test conversion to a tabular row."""
        event = AuditEventBuilder.names_repaired(["L1"], uuid4())
        row = event.to_row()
        assert len(row) == 10  # Expected number of columns
        assert row[2] == "names_repaired"
        assert row[8] == '{"entry_ids": ["L1"]}'
        assert row[9] == ""

    def test_builder_recurring_generated(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.recurring_generated(["N1", "N2"], "2024-06", correlation_id)
        assert event.event_type == AuditEventType.RECURRING_GENERATED
        assert event.correlation_id == correlation_id
        assert event.details["entry_ids"] == ["N1", "N2"]
        assert "2024-06" in event.description

    def test_builder_entry_rejected_is_warning(self):
        event = AuditEventBuilder.entry_rejected("L1", [{"field": "amount"}])
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "L1"

    def test_builder_ledger_applied(self):
        event = AuditEventBuilder.ledger_applied(version=3, added=2)
        assert event.entity_id == "3"
        assert event.details == {"version": 3, "added": 2}

    def test_builder_system_error(self):
        event = AuditEventBuilder.system_error("import_failed", "boom")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "boom"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            entry_id="L1",
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0

    def test_issue_severity_is_constrained(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestSettings:
    """Tests for configuration defaults and overrides."""

    def test_defaults(self):
        settings = get_settings()
        assert settings.app.future_date_tolerance_days == 0
        assert settings.recommendation.min_description_length == 2
        assert settings.recommendation.suggestion_limit == 5
        assert settings.recommendation.admission_threshold == 0.3
        assert settings.recommendation.frequency_weight_cap == 0.2
        assert settings.recommendation.amount_bands == (
            (Decimal("0.1"), 0.2),
            (Decimal("0.5"), 0.1),
        )
        assert settings.recommendation.recency_bands == ((30, 0.1), (90, 0.05))

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LEDGER_RECOMMEND_SUGGESTION_LIMIT", "3")
        get_settings.cache_clear()
        assert get_settings().recommendation.suggestion_limit == 3

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "debug")
        get_settings.cache_clear()
        assert get_settings().app.log_level == "DEBUG"

    def test_invalid_log_level_reported(self, monkeypatch):
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "chatty")
        get_settings.cache_clear()
        results = validate_all_settings()
        assert results["app"] is False
        assert results["recommendation"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
