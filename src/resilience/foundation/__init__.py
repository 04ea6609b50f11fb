"""Foundation layer: errors and configuration shared by the runtime."""

from .config import ResilienceSettings, RetrySettings, configure_logging, get_settings
from .errors import ConfigurationError, StopReason

__all__ = [
    "ConfigurationError",
    "ResilienceSettings",
    "RetrySettings",
    "StopReason",
    "configure_logging",
    "get_settings",
]
