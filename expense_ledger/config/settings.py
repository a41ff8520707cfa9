"""
Configuration Management for Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The core has no required configuration; every setting has a default
so the ledger works out of the box with an in-memory store.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PALETTE = (
    "#177AD5,#FF5733,#33FF57,#F39C12,#8E44AD,#3498DB,#E74C3C,#2ECC71"
)


class LedgerSettings(BaseSettings):
    """Ledger persistence and category configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_key: str = Field(
        default="expenses",
        min_length=1,
        description="Key the whole ledger is stored under"
    )
    storage_path: Optional[str] = Field(
        default=None,
        description="Path to the JSON store file. None keeps the ledger in memory."
    )
    extra_categories: str = Field(
        default="",
        description="Comma-separated categories added to the built-in set"
    )
    default_category: str = Field(
        default="Food",
        description="Category preselected on a fresh expense draft"
    )
    max_name_length: int = Field(
        default=200,
        ge=1,
        le=1000,
        description="Maximum length of an expense name"
    )

    @field_validator('storage_path')
    @classmethod
    def validate_storage_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if the parent directory doesn't exist (it is created on first write)."""
        if v and not Path(v).parent.exists():
            import warnings
            warnings.warn(
                f"Ledger storage directory not found for {v}. "
                "It will be created on the first save."
            )
        return v

    @property
    def extra_categories_list(self) -> list[str]:
        """Get extra categories as a list, blanks dropped."""
        return [
            name.strip()
            for name in self.extra_categories.split(",")
            if name.strip()
        ]


class ChartSettings(BaseSettings):
    """Chart rendering configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHART_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    palette: str = Field(
        default=DEFAULT_PALETTE,
        description="Comma-separated colors assigned to chart groups in order"
    )

    @property
    def palette_list(self) -> list[str]:
        """Get palette as a list of colors."""
        return [color.strip() for color in self.palette.split(",") if color.strip()]


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def chart(self) -> ChartSettings:
        return ChartSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    try:
        palette = settings.chart.palette_list
        results["chart"] = bool(palette)
        if not palette:
            results["chart_error"] = "Chart palette is empty"
    except Exception as e:
        results["chart"] = False
        results["chart_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
