"""Error types and construction-time validation helpers.

Operation errors are never wrapped by the retry loops, so this module is
small: one exception for programmer mistakes at construction time, and an
enum naming why a session gave up (used in log records only).
"""

from __future__ import annotations

import math
from datetime import timedelta
from enum import StrEnum

from pydantic import ValidationError


class ConfigurationError(ValueError):
    """Invalid parameter passed to a backoff builder, transform, or config.

    Raised at construction, never from inside a retry session.
    """


class StopReason(StrEnum):
    """Why a retry or poll session surfaced the last operation error."""
    POLICY_STOP = "policy_stop"
    MAX_ATTEMPTS = "max_attempts"
    MAX_NO_COUNT_ATTEMPTS = "max_no_count_attempts"
    MAX_ELAPSED = "max_elapsed"
    BACKOFF_EXHAUSTED = "backoff_exhausted"


def format_validation_error(exc: ValidationError, *, model: str | None = None) -> str:
    """Flatten a pydantic ValidationError into a single readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "value"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    prefix = f"Invalid {model}" if model else "Invalid configuration"
    return f"{prefix}: {'; '.join(parts)}"


def as_seconds(value: float | timedelta, name: str) -> float:
    """Convert a duration to float seconds, rejecting negative or non-finite values."""
    seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)
    if not math.isfinite(seconds) or seconds < 0:
        raise ConfigurationError(f"{name} must be >= 0 and finite, got {value!r}")
    return seconds


def require_positive_finite(value: float, name: str) -> float:
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be > 0 and finite, got {value!r}")
    return float(value)
