"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates required fields and provides typed access to settings.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rcache.cache.filesystem import make_dirs


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Optional:
        CACHE_DIR: Root directory under which cache namespaces are created
        CACHE_TTL: Entry lifetime, as seconds or an ISO-8601 duration (PT12H)
        LOG_LEVEL: Logging level
        LOG_FILE: Path to a JSON Lines log file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    CACHE_DIR: Path = Field(default=Path(".cache"), description="Cache root directory")
    CACHE_TTL: timedelta = Field(
        default=timedelta(hours=24),
        description="How long an entry stays fresh after it was written",
    )

    LOG_LEVEL: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON Lines log file")

    @field_validator("CACHE_DIR")
    @classmethod
    def validate_cache_dir(cls, v: Path) -> Path:
        """Reject an empty cache directory."""
        if not str(v).strip() or str(v) == ".":
            raise ValueError("CACHE_DIR must name a directory")
        return v

    @field_validator("CACHE_TTL")
    @classmethod
    def validate_cache_ttl(cls, v: timedelta) -> timedelta:
        """Reject a negative TTL."""
        if v < timedelta(0):
            raise ValueError("CACHE_TTL must not be negative")
        return v

    def ensure_directories(self) -> None:
        """Create the cache root (owner-only) if it doesn't exist."""
        make_dirs(self.CACHE_DIR)

    def display(self) -> dict[str, str | float | None]:
        """Return settings as plain values for display."""
        return {
            "CACHE_DIR": str(self.CACHE_DIR),
            "CACHE_TTL": self.CACHE_TTL.total_seconds(),
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
