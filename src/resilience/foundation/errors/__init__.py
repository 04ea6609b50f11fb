"""Error handling for resilience.

- ConfigurationError: invalid construction-time parameters
- StopReason: why a session gave up (log records only, never raised)
- Validation helpers shared by builders and config models
"""

from .errors import (
    ConfigurationError,
    StopReason,
    as_seconds,
    format_validation_error,
    require_positive_finite,
)

__all__ = [
    "ConfigurationError",
    "StopReason",
    "as_seconds",
    "format_validation_error",
    "require_positive_finite",
]
