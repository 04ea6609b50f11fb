"""Open-ended polling of an async operation.

Unlike ``retry`` there is no attempt ceiling: polling continues until the
operation succeeds, the caller's backoff mapping returns None, the Backoff
itself vetoes the attempt, or the elapsed budget runs out.

Example:
    >>> def until_ready(error: Exception, ctx: AttemptContext) -> Backoff | None:
    ...     return Backoff.constant(2.0).jitter(0.1) if isinstance(error, NotReady) else None
    >>>
    >>> job = await poll(lambda: client.job_status(job_id), until_ready, max_elapsed=300.0)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from datetime import timedelta
from typing import Callable, TypeVar

from resilience.foundation.errors import StopReason, as_seconds
from resilience.runtime.concurrency import CancelToken, checkpoint, sleep

from .backoff import Backoff
from .context import AttemptContext

T = TypeVar("T")

logger = logging.getLogger("resilience.poll")

BackoffMapping = Callable[[Exception, AttemptContext], Backoff | None]


async def poll(
    operation: Callable[[], Awaitable[T]],
    backoff: BackoffMapping,
    *,
    tolerance: float | timedelta | None = None,
    max_elapsed: float | timedelta | None = None,
    token: CancelToken | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """Poll ``operation`` until it succeeds or the backoff mapping gives up.

    Args:
        operation: Zero-argument async callable to attempt
        backoff: Maps (error, context) to the Backoff for the next wait;
            None stops polling
        tolerance: Sleep precision hint; waits may run late by this much, never early
        max_elapsed: Session budget in seconds
        token: Optional explicit cancellation token
        clock: Monotonic clock in seconds

    Raises:
        Exception: The last operation error when polling stops
        asyncio.CancelledError: If the task or ``token`` is cancelled
        ConfigurationError: If ``tolerance`` or ``max_elapsed`` is invalid
    """
    tol = None if tolerance is None else as_seconds(tolerance, "tolerance")
    budget = None if max_elapsed is None else as_seconds(max_elapsed, "max_elapsed")
    start = clock()
    attempt_index = 0

    while True:
        try:
            return await operation()
        except Exception as error:
            await checkpoint(token)

            elapsed = clock() - start
            if budget is not None and elapsed >= budget:
                logger.debug(f"Polling stopped after {attempt_index + 1} attempts ({StopReason.MAX_ELAPSED})")
                raise

            # Every poll attempt counts; there is no uncounted path here
            ctx = AttemptContext(attempt_index, attempt_index, elapsed)
            strategy = backoff(error, ctx)
            delay = None if strategy is None else strategy.delay(attempt_index, ctx)
            if delay is None:
                logger.debug(f"Polling stopped after {attempt_index + 1} attempts ({StopReason.BACKOFF_EXHAUSTED})")
                raise

            if budget is not None and elapsed + delay > budget:
                logger.debug(f"Polling stopped after {attempt_index + 1} attempts ({StopReason.MAX_ELAPSED})")
                raise

            logger.debug(f"Poll {attempt_index + 1} failed ({type(error).__name__}), next in {delay:.3f}s")

            await checkpoint(token)
            await sleep(delay, tolerance=tol, token=token)
            await checkpoint(token)

            attempt_index += 1
