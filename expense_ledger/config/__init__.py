"""Configuration package."""

from expense_ledger.config.settings import (
    AppSettings,
    ChartSettings,
    LedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ChartSettings",
    "LedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
