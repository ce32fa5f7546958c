"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, and every value has
a default. The tracker is a personal, on-device tool, so it must start with
no environment at all; variables only exist to relocate or rename storage.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


STORAGE_KEY_PATTERN = r"^[A-Za-z0-9._-]+$"


class StorageSettings(BaseSettings):
    """Durable key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend: 'file' (one JSON file per key) or 'memory'"
    )
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".expense_tracker",
        description="Directory holding the JSON files of the file backend"
    )

    # Keys within the storage
    categories_key: str = Field(
        default="expense_tracker_categories",
        pattern=STORAGE_KEY_PATTERN,
        description="Key holding the JSON array of categories"
    )
    expenses_key: str = Field(
        default="expense_tracker_expenses",
        pattern=STORAGE_KEY_PATTERN,
        description="Key holding the JSON array of expenses"
    )
    legacy_key: str = Field(
        default="expense_tracker_data",
        pattern=STORAGE_KEY_PATTERN,
        description="Key of the older combined {categories, expenses} snapshot"
    )
    shopping_lists_key: str = Field(
        default="shopping-lists",
        pattern=STORAGE_KEY_PATTERN,
        description="Key holding the JSON array of shopping lists"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Allow '~' in the configured directory."""
        return v.expanduser()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_",
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

    # Export / import
    export_filename_prefix: str = Field(
        default="expenses_backup",
        min_length=1,
        description="Prefix of suggested export file names"
    )

    # Audit
    audit_history_size: int = Field(
        default=500,
        ge=0,
        le=100000,
        description="How many audit events are kept in memory"
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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    `<setting_name>_error` entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
