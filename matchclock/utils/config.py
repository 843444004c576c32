"""Runtime settings for the match clock web service."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings read from ``MATCHCLOCK_*`` environment variables.

    Values can also be provided through a ``.env`` file in the working
    directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHCLOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    HOST: str = Field(default="127.0.0.1", description="Address the web server binds to")
    PORT: int = Field(default=7122, description="Port the web server listens on")
    DATA_FILE: Optional[str] = Field(
        default=None,
        description="JSON snapshot file for match data. Empty keeps data in memory only.",
    )
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")
    DEBUG: bool = Field(default=False, description="Run Flask in debug mode")

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("DATA_FILE")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


@lru_cache()
def get_settings() -> AppSettings:
    """Return the cached application settings."""
    return AppSettings()
