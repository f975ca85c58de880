"""
Configuration Management for TipTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Per-user preferences (wage, tax rates, week start) are NOT configuration -
they live in the store as UserSettings. This module only covers how the
application itself runs.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local blob store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TIPTRACK_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".tiptrack",
        description="Directory holding the data file"
    )
    data_file: str = Field(
        default="tiptrack.json",
        description="Name of the JSON document with shifts, settings and templates"
    )
    write_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for reading/writing the data file"
    )
    activity_limit: int = Field(
        default=500,
        ge=0,
        description="Maximum number of activity events kept in the store"
    )

    @field_validator('data_file')
    @classmethod
    def validate_data_file(cls, v: str) -> str:
        """The data file must be a bare file name, not a path."""
        if not v or Path(v).name != v:
            raise ValueError(f"data_file must be a file name, got: {v!r}")
        return v

    @property
    def data_path(self) -> Path:
        """Full path to the data file."""
        return self.data_dir / self.data_file


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIPTRACK_",
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
        description="Log level for the activity logger"
    )

    # Validation thresholds
    max_shift_hours: float = Field(
        default=16.0,
        gt=0,
        le=24,
        description="Shifts longer than this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=0,
        ge=0,
        description="How many days in the future a shift date can be"
    )

    # Dashboard
    recent_shifts_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of recent shifts shown on the dashboard"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return level


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
