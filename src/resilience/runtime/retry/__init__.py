"""Backoff plans and the retry/poll loops that consume them.

Example:
    >>> from resilience.runtime.retry import Backoff, Retry, RetryConfig, retry
    >>>
    >>> backoff = Backoff.exponential(0.5, 2.0).max(10.0).full_jitter()
    >>> result = await retry(
    ...     fetch,
    ...     RetryConfig(max_attempts=4, max_elapsed=30.0),
    ...     lambda error, ctx: Retry(backoff=backoff),
    ... )
"""

from .backoff import Backoff, evaluate_backoff
from .context import DEFAULT_RNG, AttemptContext, RandomSource, Transform, scale_duration
from .poll import poll
from .policy import STOP, Decision, Retry, RetryConfig, RetryDecision, Stop, retry
from .transforms import Clamp, FullJitter, PercentJitter

__all__ = [
    # Backoff engine
    "Backoff",
    "evaluate_backoff",
    "scale_duration",
    "AttemptContext",
    "RandomSource",
    "DEFAULT_RNG",
    # Transforms
    "Transform",
    "Clamp",
    "PercentJitter",
    "FullJitter",
    # Retry
    "RetryConfig",
    "RetryDecision",
    "Retry",
    "Stop",
    "STOP",
    "Decision",
    "retry",
    # Poll
    "poll",
]
