"""Resilience - composable backoff, retry and poll for asyncio.

A Backoff is an immutable plan: a baseline curve turning an attempt index
into a delay, followed by an ordered chain of transforms (clamp, jitter).
Two loops consume it: ``retry`` (bounded by counted and uncounted attempt
caps) and ``poll`` (open-ended). Both honour an optional elapsed budget,
observe cancellation at every checkpoint, and always surface the last
operation error unchanged.

Quick Start:
    >>> from resilience import Backoff, Retry, RetryConfig, STOP, retry
    >>>
    >>> backoff = Backoff.exponential(1.0, 2.0).max(30.0).jitter(0.15)
    >>>
    >>> def decide(error, ctx):
    ...     return Retry(backoff=backoff) if isinstance(error, TimeoutError) else STOP
    >>>
    >>> result = await retry(fetch_report, RetryConfig(max_attempts=5), decide)

Polling:
    >>> from resilience import poll
    >>> status = await poll(
    ...     check_job,
    ...     lambda error, ctx: Backoff.constant(2.0) if isinstance(error, Pending) else None,
    ...     max_elapsed=120.0,
    ... )
"""

from resilience.foundation import (
    ConfigurationError,
    ResilienceSettings,
    RetrySettings,
    StopReason,
    configure_logging,
    get_settings,
)
from resilience.runtime.concurrency import CancelToken, checkpoint
from resilience.runtime.retry import (
    DEFAULT_RNG,
    STOP,
    AttemptContext,
    Backoff,
    Clamp,
    Decision,
    FullJitter,
    PercentJitter,
    RandomSource,
    Retry,
    RetryConfig,
    RetryDecision,
    Stop,
    Transform,
    evaluate_backoff,
    poll,
    retry,
)

__version__ = "0.1.0"

__all__ = [
    # Backoff
    "Backoff",
    "evaluate_backoff",
    "AttemptContext",
    "RandomSource",
    "DEFAULT_RNG",
    "Transform",
    "Clamp",
    "PercentJitter",
    "FullJitter",
    # Retry / poll
    "retry",
    "poll",
    "RetryConfig",
    "RetryDecision",
    "Retry",
    "Stop",
    "STOP",
    "Decision",
    # Cancellation
    "CancelToken",
    "checkpoint",
    # Foundation
    "ConfigurationError",
    "StopReason",
    "ResilienceSettings",
    "RetrySettings",
    "get_settings",
    "configure_logging",
]
