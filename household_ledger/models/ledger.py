"""
Core Data Models for the Household Ledger engine

These models define the schemas for everything the engine reads or
produces. They are designed to:
1. Enforce the entry invariants at runtime (positive amount, valid date)
2. Round-trip the store's camelCase JSON shape
3. Be immutable, so the engine can only ever propose new entries

DESIGN DECISION: History handed to the engine may be either validated
LedgerEntry objects or raw mappings straight out of a backup file.
The read helpers at the bottom of this module give the engine a lenient
view of both, so a single malformed row never breaks a whole call.
"""

import datetime as dt
import random
import string
import time
from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class LedgerKind(str, Enum):
    """Direction of money for a ledger entry."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class Currency(str, Enum):
    """
    Supported currencies.

    KRW amounts are whole won; USD amounts carry up to two decimals.
    """
    KRW = "KRW"
    USD = "USD"


# =============================================================================
# LEDGER ENTRY
# =============================================================================

class LedgerEntry(BaseModel):
    """
    A single household-ledger entry.

    CRITICAL: Entries are frozen. Repairs and clones are new objects made
    with model_copy(); the store decides whether to keep them.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique id assigned by the store"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the entry (ISO yyyy-mm-dd)"
    )
    kind: LedgerKind
    category: str = Field(
        default="",
        description="Primary classification (free text)"
    )
    sub_category: Optional[str] = Field(
        default=None,
        description="Secondary classification (free text)"
    )
    description: str = Field(
        default="",
        description="Free-text memo"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount in the entry's currency"
    )
    currency: Currency = Currency.KRW
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    is_fixed_expense: bool = Field(
        default=False,
        description="Recurring monthly obligation, eligible for carry-forward"
    )
    note: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator('category', 'description', mode='before')
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """Stores write null for blank text fields."""
        return "" if v is None else v

    @model_validator(mode='after')
    def validate_accounts(self) -> 'LedgerEntry':
        """Income never leaves an account of ours."""
        if self.kind == LedgerKind.INCOME and self.from_account_id:
            raise ValueError("Income entries cannot have a fromAccountId")
        return self

    def to_store_dict(self) -> dict[str, Any]:
        """Serialize to the store's JSON shape (camelCase, ISO date)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Suggestion(BaseModel):
    """
    One ranked recommendation.

    Fields mirror the grouping key of the recommender; score is the final
    score after frequency and recency weights.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    category: Optional[str] = None
    sub_category: Optional[str] = None
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    score: float = Field(..., description="Final ranking score")


# =============================================================================
# HELPERS
# =============================================================================

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_entry_id() -> str:
    """Fresh entry id in the store's ``L<millis>-<random>`` format."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"L{millis}-{suffix}"


def read_field(entry: Any, name: str, default: Any = None) -> Any:
    """
    Read a snake_case field from a LedgerEntry or a raw store mapping.

    Raw mappings are looked up by camelCase alias first, then snake_case.
    Anything else yields ``default``.
    """
    if isinstance(entry, BaseModel):
        return getattr(entry, name, default)
    if isinstance(entry, Mapping):
        alias = to_camel(name)
        if alias in entry:
            return entry[alias]
        return entry.get(name, default)
    return default


def read_text(entry: Any, name: str) -> str:
    """Optional text field as a string; absent or non-string becomes ''."""
    value = read_field(entry, name)
    return value if isinstance(value, str) else ""


def read_kind(entry: Any) -> Optional[str]:
    value = read_field(entry, "kind")
    if isinstance(value, LedgerKind):
        return value.value
    return value if isinstance(value, str) else None


def read_date_text(entry: Any) -> str:
    """The entry's date as ``YYYY-MM-DD`` text ('' when unusable)."""
    value = read_field(entry, "date")
    if isinstance(value, date):
        return value.isoformat()
    return value if isinstance(value, str) else ""


def read_date(entry: Any) -> Optional[date]:
    """The entry's date parsed, or None when absent/unparseable."""
    value = read_field(entry, "date")
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def as_amount(value: Any) -> Optional[Decimal]:
    """
    Coerce an amount to a positive Decimal.

    Returns None for booleans, non-numbers, NaN/infinite values, and
    amounts that are not strictly positive.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def read_amount(entry: Any) -> Optional[Decimal]:
    return as_amount(read_field(entry, "amount"))


def suggestion_key(entry: Any) -> tuple[str, str, str, str]:
    """
    Grouping key ``(category, subCategory, fromAccountId, toAccountId)``.

    Absent fields are represented by the empty string.
    """
    return (
        read_text(entry, "category"),
        read_text(entry, "sub_category"),
        read_text(entry, "from_account_id"),
        read_text(entry, "to_account_id"),
    )


# =============================================================================
# CLASSIFICATION MODELS
# =============================================================================

class CategoryRule(BaseModel):
    """
    Keyword rule for automatic categorization.

    A rule fires when any keyword occurs (case-insensitively) in the
    description.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    keywords: tuple[str, ...] = Field(
        ...,
        min_length=1,
        description="Keywords searched for in the description"
    )
    category: str = Field(..., min_length=1)
    sub_category: Optional[str] = None

    def matches(self, description: str) -> bool:
        lowered = description.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords if keyword)


class RepairReport(BaseModel):
    """Result of normalizing category names across a ledger."""

    entries: list[LedgerEntry] = Field(
        default_factory=list,
        description="The ledger after repair, in the original order"
    )
    repaired_ids: list[str] = Field(
        default_factory=list,
        description="Ids of entries whose names changed"
    )

    @property
    def changed(self) -> bool:
        return bool(self.repaired_ids)

    @property
    def repaired_count(self) -> int:
        return len(self.repaired_ids)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage entry validation.

    Stage 1: Schema validation (types, required fields, entry invariants)
    Stage 2: Semantic validation (account presence, currency precision, dates)
    """

    entry_id: Optional[str] = Field(
        default=None,
        description="Id of the entry being validated, when readable"
    )
    schema_valid: bool
    semantic_valid: bool
    is_valid: bool

    entry: Optional[LedgerEntry] = Field(
        default=None,
        description="The validated entry when schema validation passed"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
