"""Tests for the open-ended poll loop."""

from __future__ import annotations

import asyncio
import time
from datetime import timedelta

import pytest

from resilience import AttemptContext, Backoff, CancelToken, ConfigurationError, poll


class Pending(Exception):
    pass


class Fatal(Exception):
    pass


def until_ready(error: Exception, ctx: AttemptContext) -> Backoff | None:
    return Backoff.constant(0.0) if isinstance(error, Pending) else None


@pytest.mark.asyncio
async def test_poll_succeeds_after_retries() -> None:
    attempts = 0

    async def op() -> str:
        nonlocal attempts
        attempts += 1
        if attempts < 3:
            raise Pending()
        return "done"

    assert await poll(op, until_ready) == "done"
    assert attempts == 3


@pytest.mark.asyncio
async def test_poll_stops_on_none_backoff() -> None:
    attempts = 0

    async def op() -> str:
        nonlocal attempts
        attempts += 1
        raise Fatal()

    with pytest.raises(Fatal):
        await poll(op, until_ready)
    assert attempts == 1


@pytest.mark.asyncio
async def test_poll_stops_when_backoff_vetoes() -> None:
    attempts = 0

    async def op() -> str:
        nonlocal attempts
        attempts += 1
        raise Pending()

    # Third wait is vetoed by the curve itself
    curve = Backoff.custom(lambda attempt: 0.0 if attempt < 2 else None)
    with pytest.raises(Pending):
        await poll(op, lambda error, ctx: curve)
    assert attempts == 3


@pytest.mark.asyncio
async def test_poll_has_no_attempt_ceiling() -> None:
    attempts = 0

    async def op() -> int:
        nonlocal attempts
        attempts += 1
        if attempts < 50:
            raise Pending()
        return attempts

    assert await poll(op, until_ready) == 50


@pytest.mark.asyncio
async def test_poll_context_counts_every_attempt() -> None:
    seen: list[AttemptContext] = []

    async def op() -> None:
        raise Pending()

    def mapping(error: Exception, ctx: AttemptContext) -> Backoff | None:
        seen.append(ctx)
        return Backoff.none() if ctx.attempt_index < 2 else None

    with pytest.raises(Pending):
        await poll(op, mapping)
    assert [(c.attempt_index, c.counted_attempts) for c in seen] == [(0, 0), (1, 1), (2, 2)]


@pytest.mark.asyncio
async def test_poll_tolerance_does_not_shorten_backoff() -> None:
    attempts = 0

    async def op() -> str:
        nonlocal attempts
        attempts += 1
        if attempts < 3:
            raise Pending()
        return "done"

    start = time.monotonic()
    assert await poll(op, lambda e, ctx: Backoff.constant(0.05), tolerance=1.0) == "done"
    assert time.monotonic() - start >= 0.1
    assert attempts == 3


@pytest.mark.asyncio
async def test_poll_stops_before_sleep_past_budget() -> None:
    attempts = 0

    async def op() -> None:
        nonlocal attempts
        attempts += 1
        raise Pending()

    with pytest.raises(Pending):
        await asyncio.wait_for(
            poll(op, lambda e, ctx: Backoff.constant(30.0), max_elapsed=timedelta(seconds=1)),
            timeout=1.0,
        )
    assert attempts == 1


@pytest.mark.asyncio
async def test_poll_exhausted_budget_skips_mapping() -> None:
    ticks = iter([0.0, 2.0])
    mapped = False

    async def op() -> None:
        raise Pending()

    def mapping(error: Exception, ctx: AttemptContext) -> Backoff | None:
        nonlocal mapped
        mapped = True
        return Backoff.none()

    with pytest.raises(Pending):
        await poll(op, mapping, max_elapsed=2.0, clock=lambda: next(ticks))
    assert not mapped


@pytest.mark.asyncio
async def test_poll_token_cancel_during_sleep() -> None:
    attempts = 0
    token = CancelToken()

    async def op() -> None:
        nonlocal attempts
        attempts += 1
        raise Pending()

    session = asyncio.create_task(poll(op, lambda e, ctx: Backoff.constant(10.0), token=token))
    await asyncio.sleep(0.05)
    token.cancel()

    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(session, timeout=1.0)
    assert attempts == 1


@pytest.mark.asyncio
async def test_poll_task_cancel_during_sleep() -> None:
    attempts = 0

    async def op() -> None:
        nonlocal attempts
        attempts += 1
        raise Pending()

    session = asyncio.create_task(poll(op, lambda e, ctx: Backoff.constant(10.0)))
    await asyncio.sleep(0.05)
    session.cancel()

    with pytest.raises(asyncio.CancelledError):
        await session
    assert attempts == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("kwargs", [{"tolerance": -1.0}, {"max_elapsed": -5.0}, {"max_elapsed": float("nan")}])
async def test_poll_rejects_invalid_limits(kwargs: dict[str, float]) -> None:
    async def op() -> str:
        return "never reached"

    with pytest.raises(ConfigurationError):
        await poll(op, until_ready, **kwargs)  # type: ignore[arg-type]
