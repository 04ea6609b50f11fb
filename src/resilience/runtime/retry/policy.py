"""Bounded retry of an async operation.

The caller's decision function sees each failure and answers with a
RetryDecision:
- Retry(counted=True, backoff=...): retry, consuming ``max_attempts``
- Retry(counted=False, backoff=...): retry outside ``max_attempts``,
  bounded by ``max_no_count_attempts`` instead
- Stop: surface the error now

Every way a session ends without success (policy stop, attempt caps,
elapsed budget, backoff veto) re-raises the last operation error unchanged.
Cancellation raises ``asyncio.CancelledError`` instead.

Example:
    >>> def decide(error: Exception, ctx: AttemptContext) -> RetryDecision:
    ...     if isinstance(error, RateLimited):
    ...         return Retry(counted=False, backoff=Backoff.constant(error.retry_after))
    ...     if isinstance(error, ConnectionError):
    ...         return Retry(backoff=Backoff.exponential(0.5).max(10.0).jitter())
    ...     return STOP
    >>>
    >>> data = await retry(fetch, RetryConfig(max_attempts=5, max_elapsed=60.0), decide)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Annotated, Any, Callable, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    ValidationError,
    field_validator,
)

from resilience.foundation.config import ResilienceSettings, get_settings
from resilience.foundation.errors import ConfigurationError, StopReason, format_validation_error
from resilience.runtime.concurrency import CancelToken, checkpoint, sleep

from .backoff import Backoff
from .context import AttemptContext

T = TypeVar("T")

logger = logging.getLogger("resilience.retry")

Seconds = Annotated[float, Field(ge=0, allow_inf_nan=False)]


# ─────────────────────────────────────────────────────────────────────────────
# Decisions
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Retry:
    """Retry after ``backoff``; ``counted`` controls whether it uses up ``max_attempts``."""

    counted: bool = True
    backoff: Backoff = field(default_factory=Backoff.none)


@dataclass(frozen=True, slots=True)
class Stop:
    """Stop immediately and surface the error."""


RetryDecision = Retry | Stop
Decision = Callable[[Exception, AttemptContext], RetryDecision]

STOP = Stop()
_RETRY_NOW = Retry()


def _always_retry(error: Exception, ctx: AttemptContext) -> RetryDecision:
    return _RETRY_NOW


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


class RetryConfig(BaseModel):
    """Limits for a retry session.

    Attributes:
        max_attempts: Counted attempts, the initial one included (> 0)
        max_no_count_attempts: Cap on uncounted retries (None = unlimited)
        max_elapsed: Session budget in seconds (None = unlimited)
        tolerance: Sleep precision hint; waits may run late by this much, never early
        on_retry: Called with (error, context, delay) before each sleep

    Invalid values raise ConfigurationError at construction.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
    )

    max_attempts: PositiveInt = 3
    max_no_count_attempts: NonNegativeInt | None = None
    max_elapsed: Seconds | None = None
    tolerance: Seconds | None = None
    on_retry: Callable[[Exception, AttemptContext, float], None] | None = Field(default=None, exclude=True, repr=False)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(format_validation_error(e, model="RetryConfig")) from e

    @field_validator("max_elapsed", "tolerance", mode="before")
    @classmethod
    def _accept_timedelta(cls, v: object) -> object:
        return v.total_seconds() if isinstance(v, timedelta) else v

    @classmethod
    def from_settings(cls, settings: ResilienceSettings | None = None, **overrides: Any) -> RetryConfig:
        """Build from environment-backed settings, with keyword overrides."""
        defaults = (settings or get_settings()).retry.model_dump()
        return cls(**{**defaults, **overrides})


# ─────────────────────────────────────────────────────────────────────────────
# Execution
# ─────────────────────────────────────────────────────────────────────────────


def _give_up(reason: StopReason, ctx: AttemptContext, error: Exception) -> None:
    logger.debug(
        f"Giving up after attempt {ctx.attempt_index + 1} ({reason}): "
        f"{type(error).__name__}: {error}"
    )


async def retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    decision: Decision | None = None,
    *,
    token: CancelToken | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """Run ``operation`` until it succeeds or the policy or limits stop it.

    Args:
        operation: Zero-argument async callable to attempt
        config: Session limits (default: RetryConfig.from_settings())
        decision: Maps (error, context) to a RetryDecision
            (default: always a counted retry with no delay)
        token: Optional explicit cancellation token
        clock: Monotonic clock in seconds

    Returns:
        The first successful result of ``operation``

    Raises:
        Exception: The last operation error when the session stops
        asyncio.CancelledError: If the task or ``token`` is cancelled
    """
    cfg = config if config is not None else RetryConfig.from_settings()
    decide = decision or _always_retry
    start = clock()

    attempt_index = 0
    counted_attempts = 0
    no_count_attempts = 0

    while True:
        try:
            return await operation()
        except Exception as error:
            await checkpoint(token)

            elapsed = clock() - start
            ctx = AttemptContext(attempt_index, counted_attempts, elapsed)
            if cfg.max_elapsed is not None and elapsed >= cfg.max_elapsed:
                _give_up(StopReason.MAX_ELAPSED, ctx, error)
                raise

            match decide(error, ctx):
                case Stop():
                    _give_up(StopReason.POLICY_STOP, ctx, error)
                    raise
                case Retry(counted=counted, backoff=backoff):
                    pass
                case other:
                    raise TypeError(f"Decision must return Retry or Stop, got {other!r}") from error

            if not counted and cfg.max_no_count_attempts is not None and no_count_attempts >= cfg.max_no_count_attempts:
                _give_up(StopReason.MAX_NO_COUNT_ATTEMPTS, ctx, error)
                raise

            delay = backoff.delay(attempt_index, ctx)
            if delay is None:
                _give_up(StopReason.BACKOFF_EXHAUSTED, ctx, error)
                raise

            if counted:
                if counted_attempts >= cfg.max_attempts - 1:
                    _give_up(StopReason.MAX_ATTEMPTS, ctx, error)
                    raise
                counted_attempts += 1
            else:
                no_count_attempts += 1

            if cfg.max_elapsed is not None and elapsed + delay > cfg.max_elapsed:
                _give_up(StopReason.MAX_ELAPSED, ctx, error)
                raise

            logger.info(
                f"Retry {attempt_index + 1} after {delay:.3f}s "
                f"({'counted' if counted else 'uncounted'}, {type(error).__name__})"
            )
            if cfg.on_retry:
                cfg.on_retry(error, ctx, delay)

            await checkpoint(token)
            await sleep(delay, tolerance=cfg.tolerance, token=token)
            await checkpoint(token)

            attempt_index += 1
