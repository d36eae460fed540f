"""
Configuration Management for Equipment Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger core never reads settings itself; the orchestration layer
reads them once and passes plain values (timezone, directories, limits)
into the components it builds.
"""

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Accounting ledger, export and local store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    timezone: str = Field(
        default="UTC",
        description="IANA timezone used for calendar months, years and days"
    )
    export_directory: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory where JSON exports and reports are written"
    )
    file_prefix: str = Field(
        default="comptabilite",
        min_length=1,
        description="Prefix of generated export file names"
    )
    currency_symbol: str = Field(
        default="€",
        description="Currency symbol printed in reports"
    )
    store_path: Path = Field(
        default=Path("operations.json"),
        description="Path of the JSON file backing the local operation store"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject unknown timezone names at startup."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        """Get the configured timezone as a tzinfo object."""
        return ZoneInfo(self.timezone)


class EntitlementSettings(BaseSettings):
    """
    Premium gating configuration.

    The free-tier limits apply while premium is locked.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENTITLEMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    premium_unlocked: bool = Field(
        default=False,
        description="Static premium flag used by the default oracle"
    )

    free_materiel_limit: int = Field(default=10, ge=0)
    free_pret_limit: int = Field(default=10, ge=0)
    free_emprunt_limit: int = Field(default=5, ge=0)
    free_personne_limit: int = Field(default=5, ge=0)
    free_lieu_limit: int = Field(default=5, ge=0)
    free_coffre_limit: int = Field(default=5, ge=0)
    free_location_limit: int = Field(default=5, ge=0)
    free_reparation_limit: int = Field(default=5, ge=0)
    free_ma_location_limit: int = Field(default=5, ge=0)


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def entitlements(self) -> EntitlementSettings:
        return EntitlementSettings()

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


def validate_all_settings() -> dict[str, Union[bool, str]]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry holding the message for each failing group.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "entitlements", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
