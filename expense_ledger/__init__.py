"""
Expense Ledger - Source Package

A small personal expense tracker: record expenses, then view them
as a flat list or as totals by category and by day.

DESIGN PRINCIPLES:
1. Records are immutable once created
2. The ledger only grows (create + list, nothing else)
3. A failed write never advances the in-memory ledger
4. Aggregation is a pure recomputation over the ledger
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
