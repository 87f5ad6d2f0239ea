"""
Configuration Management for the Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Sub-settings load lazily so the page can start with the in-memory store
even when no Firestore configuration is present.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirestoreSettings(BaseSettings):
    """Firestore document store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    project_id: Optional[str] = Field(
        default=None,
        description="Google Cloud project; inferred from credentials when unset"
    )
    credentials_path: Optional[str] = Field(
        default=None,
        description="Path to a service account JSON; application default credentials when unset"
    )
    collection_name: str = Field(
        default="items",
        min_length=1,
        description="Collection holding the expense items"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firestore credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Level for the structured log"
    )
    store_backend: Literal["firestore", "memory"] = Field(
        default="firestore",
        description="Where items live; 'memory' keeps them in this process only"
    )
    refresh_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        le=60,
        description="How often the item list checks for new snapshots"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


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
    def firestore(self) -> FirestoreSettings:
        return FirestoreSettings()

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

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries holding the message for anything invalid.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.firestore
        results["firestore"] = True
    except Exception as e:
        results["firestore"] = False
        results["firestore_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
