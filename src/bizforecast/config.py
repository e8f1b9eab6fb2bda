"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Forecast settings loaded from environment variables and .env file.

    Variables use the BIZFORECAST_ prefix, e.g. BIZFORECAST_LOG_LEVEL.
    """

    model_config = SettingsConfigDict(
        env_prefix="BIZFORECAST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # Display name used when a manufacturer/reseller id has no lookup entry
    UNKNOWN_LABEL: str = "Unknown"

    # Committed (full-value) export only includes deals at or above this probability
    COMMITTED_EXPORT_MIN_PROBABILITY: float = Field(default=0.70, ge=0.0, le=1.0)

    # Dashboard default for dropping deals expected to close before the current month
    EXCLUDE_PAST_MONTHS: bool = True


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
