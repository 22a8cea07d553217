# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the school
sports core. Settings are loaded from environment variables with sensible
defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.sports.certificate_min_sessions)
    5
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Tenant database configuration for the sports tables.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        dsn: Full connection URL overriding the components when set.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        extra="ignore",
    )

    user: str = "school"
    password: SecretStr = SecretStr("school_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "school"
    dsn: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
    )
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.dsn:
            return self.dsn
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def is_sqlite(self) -> bool:
        """Check whether the configured URL points at SQLite."""
        return self.url.startswith("sqlite")


class SportsSettings(BaseSettings):
    """Business thresholds for the sports program.

    Attributes:
        default_page_limit: Page size used when a caller passes none.
        max_page_limit: Upper clamp for requested page sizes.
        certificate_min_attendance: Minimum attendance percentage for a
            participation certificate.
        certificate_min_sessions: Minimum recorded sessions for a
            participation certificate.
        high_levels: Comma-separated achievement levels counted as
            high-level on the sports CV.
        audit_failure_policy: What to do when the audit trail raises.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPORTS_",
        extra="ignore",
    )

    default_page_limit: int = Field(default=20, ge=1)
    max_page_limit: int = Field(default=100, ge=1)
    certificate_min_attendance: int = Field(default=50, ge=0, le=100)
    certificate_min_sessions: int = Field(default=5, ge=0)
    high_levels: str = "national,international"
    audit_failure_policy: Literal["ignore", "propagate"] = "ignore"

    @property
    def high_level_achievement_levels(self) -> list[str]:
        """Parse high_levels string into a list."""
        return [level.strip() for level in self.high_levels.split(",") if level.strip()]


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        sports: Sports program settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    sports: SportsSettings = Field(default_factory=SportsSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
