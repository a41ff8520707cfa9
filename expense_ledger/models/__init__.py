"""
Data Models Package

This package contains all Pydantic models used in the Expense Ledger system.
All data flowing through the system must conform to these schemas.
"""

from expense_ledger.models.expense import (
    ChartPoint,
    DashboardView,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    GroupBy,
    GroupTotal,
    Ledger,
    PieSlice,
    TableRow,
    ValidationIssue,
    ValidationResult,
    apply_edit,
    is_exact_as_json,
    new_draft,
)
from expense_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "ChartPoint",
    "DashboardView",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "GroupBy",
    "GroupTotal",
    "Ledger",
    "PieSlice",
    "TableRow",
    "ValidationIssue",
    "ValidationResult",
    "apply_edit",
    "is_exact_as_json",
    "new_draft",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
