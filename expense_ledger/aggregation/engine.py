"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and pure.
It takes a ledger snapshot and returns totals; no I/O, no caching.
Every view recomputes from scratch, so totals can never drift from
the records they were computed from.

Groups come out in first-seen order: the order in which each key is first
met while scanning the ledger in insertion order. Not alphabetical, not
by size, and days are NOT sorted chronologically.

Totals are Decimal sums, so every grouping of the same ledger adds up to
exactly the same grand total.
"""

from collections.abc import Callable, Iterable
from decimal import Decimal

from expense_ledger.models.expense import Expense, GroupBy, GroupTotal


def _group_totals(
    expenses: Iterable[Expense],
    key_of: Callable[[Expense], str],
) -> list[GroupTotal]:
    """Sum amounts per key, keeping first-seen key order."""
    groups: dict[str, Decimal] = {}

    for expense in expenses:
        key = key_of(expense)
        if key not in groups:
            groups[key] = Decimal("0")
        groups[key] += expense.amount

    return [GroupTotal(key, total) for key, total in groups.items()]


def group_by_category(ledger: Iterable[Expense]) -> list[GroupTotal]:
    """Total amount per category, in first-seen order."""
    return _group_totals(ledger, lambda expense: expense.category)


def group_by_day(ledger: Iterable[Expense]) -> list[GroupTotal]:
    """Total amount per calendar day (YYYY-MM-DD), in first-seen order."""
    return _group_totals(ledger, lambda expense: expense.day_key)


def group(ledger: Iterable[Expense], by: GroupBy) -> list[GroupTotal]:
    """Dispatch to the grouping named by `by`."""
    if by == GroupBy.CATEGORY:
        return group_by_category(ledger)
    elif by == GroupBy.DAY:
        return group_by_day(ledger)
    raise ValueError(f"Unsupported grouping: {by!r}")


def total_amount(ledger: Iterable[Expense]) -> Decimal:
    """Sum of every amount in the ledger."""
    return sum((expense.amount for expense in ledger), Decimal("0"))
