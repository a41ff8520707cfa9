"""
Core Data Models for Expense Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the record invariants at construction time
2. Serialize to the exact persisted layout (a bare JSON array of records)
3. Stay immutable once created

DESIGN DECISION: Amounts are Decimal, never float.
Totals are summed exactly; rounding only happens when a value is formatted.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Built-in expense categories.

    DESIGN DECISION: Categories are a closed set with an explicit OTHER
    fallback. Deployments can add labels through LEDGER_EXTRA_CATEGORIES,
    but an unrecognised label is never stored as-is on create.
    """
    FOOD = "Food"
    TRAVEL = "Travel"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"

    @classmethod
    def labels(cls) -> list[str]:
        return [member.value for member in cls]


class GroupBy(str, Enum):
    """What a set of aggregation results was grouped by."""
    CATEGORY = "category"
    DAY = "day"


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

def is_exact_as_json(amount: Decimal) -> bool:
    """
    Whether an amount reads back unchanged after being persisted.

    Amounts are written as JSON numbers, which readers decode as
    IEEE doubles, so only values a double holds exactly are accepted.
    """
    if not amount.is_finite():
        return False
    return Decimal(repr(float(amount))) == amount


class Expense(BaseModel):
    """
    A single persisted expense record.

    CRITICAL: Records are frozen. Nothing in the system edits or deletes
    an expense after it has been appended to the ledger.

    The wire name of creation_date is `creationDate`; records are dumped
    with aliases so the persisted array keeps that field name.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    name: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category label"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent (currency-agnostic)"
    )
    creation_date: datetime = Field(
        ...,
        alias="creationDate",
        description="When the expense happened"
    )

    @field_validator('category', mode='before')
    @classmethod
    def unwrap_category(cls, v):
        """Accept ExpenseCategory members as well as plain labels."""
        if isinstance(v, ExpenseCategory):
            return v.value
        return v

    @field_validator('amount')
    @classmethod
    def require_finite_amount(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Amount must be a finite number")
        if not is_exact_as_json(v):
            raise ValueError("Amount cannot be stored exactly as a JSON number")
        return v

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, v: Decimal) -> Union[int, float]:
        # Persisted as a JSON number, not a string
        if v == v.to_integral_value():
            return int(v)
        return float(v)

    @property
    def day(self) -> date:
        """Calendar date of the expense, in the timestamp's own offset."""
        return self.creation_date.date()

    @property
    def day_key(self) -> str:
        """Group key for daily totals (YYYY-MM-DD)."""
        return self.day.isoformat()

    def to_record(self) -> dict:
        """Convert to the persisted JSON object."""
        return self.model_dump(mode="json", by_alias=True)


# Read-only snapshot of the ledger, in insertion order
Ledger = tuple[Expense, ...]


# =============================================================================
# DRAFT MODEL (in-progress form state)
# =============================================================================

def _local_now() -> datetime:
    # Aware, in the machine's local offset, so .date() is the user's today
    return datetime.now().astimezone()


class ExpenseDraft(BaseModel):
    """
    Form state for an expense that has not been created yet.

    Fields hold what the user typed, unvalidated: `amount` is raw text.
    A draft is only turned into an Expense by the validator.

    Drafts are immutable; use apply_edit() to get the next draft.
    """
    model_config = ConfigDict(frozen=True)

    name: str = ""
    category: str = ExpenseCategory.FOOD.value
    amount: str = ""
    creation_date: datetime = Field(default_factory=_local_now)

    @field_validator('category', mode='before')
    @classmethod
    def unwrap_category(cls, v):
        if isinstance(v, ExpenseCategory):
            return v.value
        return v

    @field_validator('amount', mode='before')
    @classmethod
    def amount_as_text(cls, v):
        """Numbers typed programmatically are kept as their text form."""
        if v is None:
            return ""
        if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
            return str(v)
        return v


def apply_edit(draft: ExpenseDraft, **changes) -> ExpenseDraft:
    """
    Produce the next draft from the previous one plus a field delta.

    Raises:
        ValueError: If a change names a field the draft doesn't have
    """
    unknown = set(changes) - set(ExpenseDraft.model_fields)
    if unknown:
        raise ValueError(f"Unknown draft fields: {sorted(unknown)}")
    return ExpenseDraft.model_validate({**draft.model_dump(), **changes})


def new_draft(default_category: Optional[str] = None) -> ExpenseDraft:
    """Fresh draft, as shown after a successful create."""
    if default_category:
        return ExpenseDraft(category=default_category)
    return ExpenseDraft()


# =============================================================================
# AGGREGATION MODELS
# =============================================================================

class GroupTotal(NamedTuple):
    """
    Total amount for one group key.

    key is a category label or a YYYY-MM-DD date string. Being a
    NamedTuple it compares equal to a plain (key, total) pair.
    """
    key: str
    total: Decimal


# =============================================================================
# DISPLAY MODELS
# =============================================================================

class ChartPoint(BaseModel):
    """One bar in a bar chart."""
    model_config = ConfigDict(frozen=True)

    label: str
    value: Decimal = Field(
        ...,
        description="Raw (unrounded) group total"
    )
    color: str


class PieSlice(BaseModel):
    """One slice of the distribution donut."""
    model_config = ConfigDict(frozen=True)

    text: str
    value: Decimal
    color: str


class TableRow(BaseModel):
    """One row of the expense table."""
    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    amount: str = Field(
        ...,
        description="Amount formatted with exactly two decimals"
    )
    date: str = Field(
        ...,
        description="Date portion only (YYYY-MM-DD)"
    )


class DashboardView(BaseModel):
    """Everything the charts and table screens render, in one snapshot."""
    model_config = ConfigDict(frozen=True)

    category_series: list[ChartPoint] = Field(default_factory=list)
    day_series: list[ChartPoint] = Field(default_factory=list)
    distribution: list[PieSlice] = Field(default_factory=list)
    rows: list[TableRow] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    record_count: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.record_count == 0


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
        description="Type of issue (e.g., 'missing', 'invalid_format', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of validating a candidate expense.

    When is_valid is True, `expense` holds the record ready to append.
    """

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    expense: Optional[Expense] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
