"""Configuration management using pydantic-settings."""

from .settings import (
    LoggingSettings,
    ResilienceSettings,
    RetrySettings,
    clear_settings_cache,
    configure_logging,
    get_settings,
)

__all__ = [
    "LoggingSettings",
    "ResilienceSettings",
    "RetrySettings",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
]
