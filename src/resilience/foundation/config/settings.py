"""Environment-based configuration using pydantic-settings.

Provides the defaults that ``RetryConfig.from_settings()`` and
``configure_logging()`` fall back to when callers pass nothing explicit.

Example:
    >>> from resilience.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_attempts
    3
    >>> settings.logging.level
    'WARNING'

    # Or with environment variables:
    # RESILIENCE_RETRY_MAX_ATTEMPTS=5
    # RESILIENCE_RETRY_MAX_ELAPSED=30
    # RESILIENCE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry session limits."""

    model_config = SettingsConfigDict(
        env_prefix="RESILIENCE_RETRY_",
        extra="ignore",
    )

    max_attempts: PositiveInt = Field(default=3, description="Counted attempts, initial one included")
    max_no_count_attempts: NonNegativeInt | None = Field(default=None, description="Cap on uncounted retries")
    max_elapsed: NonNegativeFloat | None = Field(default=None, description="Session budget in seconds")
    tolerance: NonNegativeFloat | None = Field(default=None, description="Sleep tolerance in seconds")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RESILIENCE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"


class ResilienceSettings(BaseSettings):
    """Root settings, loaded from ``RESILIENCE_`` environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="RESILIENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> ResilienceSettings:
    """Get the global settings instance (cached)."""
    return ResilienceSettings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Set the level of the ``resilience`` logger hierarchy.

    Handlers are left to the application; this only adjusts verbosity.
    """
    logger = logging.getLogger("resilience")
    logger.setLevel(level if level is not None else get_settings().logging.level)
    return logger
