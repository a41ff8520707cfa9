"""View projection package."""

from expense_ledger.projection.view import ViewProjection, day_label, format_amount

__all__ = ["ViewProjection", "day_label", "format_amount"]
