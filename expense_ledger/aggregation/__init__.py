"""Aggregation package."""

from expense_ledger.aggregation.engine import (
    group,
    group_by_category,
    group_by_day,
    total_amount,
)

__all__ = ["group", "group_by_category", "group_by_day", "total_amount"]
