"""
Candidate Expense Validation

DESIGN DECISION: Every candidate is checked field by field and ALL
problems are reported together, so the form can show every mistake at once
instead of one per submit.

Checks:
- name: present and non-blank after trimming, not longer than configured
- amount: a finite number, strictly greater than zero, that survives
  being written as a JSON number
- creationDate: an ISO-8601 date or date-time (numeric timestamps are not)

Category is never an error: labels are matched case-insensitively against
the configured set and anything unknown falls back to "Other".

IMPORTANT: Validation runs before any persistence attempt.
A rejected candidate never touches the store.
"""

from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from expense_ledger.config import get_settings
from expense_ledger.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
    is_exact_as_json,
)


Candidate = Union[Expense, ExpenseDraft, Mapping]


def _parse_iso_datetime(text: str) -> datetime:
    """Parse an ISO-8601 date or date-time. A trailing Z means UTC."""
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class ValidationError(Exception):
    """A candidate expense failed one or more record invariants."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        message = "; ".join(issue.message for issue in issues) or "Invalid expense"
        super().__init__(message)

    def to_dicts(self) -> list[dict]:
        return [issue.model_dump() for issue in self.issues]


class ExpenseValidator:
    """
    Turns a candidate (draft, mapping or record) into a valid Expense.

    validate() reports; ensure_valid() raises.
    """

    def __init__(
        self,
        categories: Optional[list[str]] = None,
        max_name_length: Optional[int] = None,
    ):
        """
        Initialize validator.

        Args:
            categories: Allowed category labels. Defaults to the built-in
                        categories plus LEDGER_EXTRA_CATEGORIES.
            max_name_length: Defaults to LEDGER_MAX_NAME_LENGTH.
        """
        settings = get_settings().ledger
        if categories is None:
            categories = ExpenseCategory.labels() + settings.extra_categories_list

        # Case-insensitive lookup, first spelling wins
        self._categories: dict[str, str] = {}
        for label in categories:
            self._categories.setdefault(label.casefold(), label)
        self._categories.setdefault(
            ExpenseCategory.OTHER.value.casefold(), ExpenseCategory.OTHER.value
        )

        self._max_name_length = max_name_length or settings.max_name_length

    @property
    def categories(self) -> list[str]:
        """Allowed category labels in configured order."""
        return list(self._categories.values())

    def resolve_category(self, value: Any) -> str:
        """Canonical label for a category, or "Other" when unknown."""
        if isinstance(value, ExpenseCategory):
            value = value.value
        if isinstance(value, str):
            label = self._categories.get(value.strip().casefold())
            if label:
                return label
        return ExpenseCategory.OTHER.value

    def _extract_fields(self, candidate: Candidate) -> dict[str, Any]:
        """Pull the four raw fields out of whatever the caller passed."""
        if isinstance(candidate, (Expense, ExpenseDraft)):
            return {
                "name": candidate.name,
                "category": candidate.category,
                "amount": candidate.amount,
                "creation_date": candidate.creation_date,
            }
        if isinstance(candidate, Mapping):
            creation_date = candidate.get("creationDate")
            if creation_date is None:
                creation_date = candidate.get("creation_date")
            return {
                "name": candidate.get("name"),
                "category": candidate.get("category"),
                "amount": candidate.get("amount"),
                "creation_date": creation_date,
            }
        raise TypeError(
            f"Cannot validate {type(candidate).__name__} as an expense"
        )

    def _check_name(self, raw: Any) -> tuple[Optional[str], list[ValidationIssue]]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, [ValidationIssue(
                field="name",
                issue_type="missing",
                message="Please enter a name for the expense",
            )]
        if not isinstance(raw, str):
            return None, [ValidationIssue(
                field="name",
                issue_type="invalid_format",
                message="Name must be text",
            )]

        name = raw.strip()
        if len(name) > self._max_name_length:
            return None, [ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Name must be at most {self._max_name_length} characters",
            )]
        return name, []

    def _check_amount(self, raw: Any) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter an amount",
            )]

        try:
            if isinstance(raw, bool):
                raise TypeError("bool is not an amount")
            if isinstance(raw, str):
                amount = Decimal(raw.strip())
            elif isinstance(raw, float):
                amount = Decimal(str(raw))
            else:
                amount = Decimal(raw)
        except (InvalidOperation, TypeError, ValueError):
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount ({raw!r}) is not a number",
            )]

        if not amount.is_finite():
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount must be a finite number",
            )]
        if amount <= 0:
            return None, [ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message=f"Amount ({amount}) must be greater than zero",
            )]
        if not is_exact_as_json(amount):
            return None, [ValidationIssue(
                field="amount",
                issue_type="too_precise",
                message=f"Amount ({raw}) has too many digits to be saved exactly",
            )]
        return amount, []

    def _check_date(self, raw: Any) -> tuple[Optional[datetime], list[ValidationIssue]]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, [ValidationIssue(
                field="creationDate",
                issue_type="missing",
                message="Please pick a date",
            )]
        if isinstance(raw, datetime):
            return raw, []
        if isinstance(raw, date):
            return datetime.combine(raw, time()), []
        if isinstance(raw, str):
            try:
                return _parse_iso_datetime(raw.strip()), []
            except ValueError:
                pass
        return None, [ValidationIssue(
            field="creationDate",
            issue_type="invalid_format",
            message=f"Date ({raw!r}) is not a valid ISO-8601 date-time",
        )]

    def validate(self, candidate: Candidate) -> ValidationResult:
        """
        Validate a candidate expense.

        Returns:
            ValidationResult; `expense` is set only when valid
        """
        fields = self._extract_fields(candidate)

        name, issues = self._check_name(fields["name"])
        amount, amount_issues = self._check_amount(fields["amount"])
        creation_date, date_issues = self._check_date(fields["creation_date"])
        issues = issues + amount_issues + date_issues

        if issues:
            return ValidationResult(is_valid=False, issues=issues)

        try:
            expense = Expense(
                name=name,
                category=self.resolve_category(fields["category"]),
                amount=amount,
                creation_date=creation_date,
            )
        except PydanticValidationError as e:
            return ValidationResult(
                is_valid=False,
                issues=[
                    ValidationIssue(
                        field=".".join(str(part) for part in error["loc"]) or "expense",
                        issue_type=error["type"],
                        message=error["msg"],
                    )
                    for error in e.errors()
                ],
            )

        return ValidationResult(is_valid=True, expense=expense)

    def ensure_valid(self, candidate: Candidate) -> Expense:
        """
        Validate a candidate and return the record.

        Raises:
            ValidationError: If any invariant fails
        """
        result = self.validate(candidate)
        if not result.is_valid:
            raise ValidationError(result.issues)
        return result.expense
