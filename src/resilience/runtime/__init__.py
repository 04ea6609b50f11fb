"""Runtime layer: cancellation primitives and the retry/poll executors."""

from .concurrency import CancelToken, checkpoint, sleep
from .retry import Backoff, Retry, RetryConfig, Stop, poll, retry

__all__ = [
    "CancelToken",
    "checkpoint",
    "sleep",
    "Backoff",
    "Retry",
    "RetryConfig",
    "Stop",
    "poll",
    "retry",
]
