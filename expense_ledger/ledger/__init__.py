"""Ledger persistence package."""

from expense_ledger.ledger.store import LedgerStore, parse_ledger, serialize_ledger

__all__ = ["LedgerStore", "parse_ledger", "serialize_ledger"]
