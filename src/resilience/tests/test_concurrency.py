"""Tests for cancellation tokens, checkpoints and the cancellable sleep."""

from __future__ import annotations

import asyncio
import time

import pytest

from resilience.runtime.concurrency import CancelToken, checkpoint, sleep


def test_token_starts_uncancelled() -> None:
    token = CancelToken()
    assert not token.cancelled
    token.raise_if_cancelled()
    assert repr(token) == "CancelToken(cancelled=False)"


def test_token_keeps_first_message() -> None:
    token = CancelToken()
    token.cancel("first")
    token.cancel("second")

    assert token.cancelled
    with pytest.raises(asyncio.CancelledError) as exc_info:
        token.raise_if_cancelled()
    assert exc_info.value.args == ("first",)


@pytest.mark.asyncio
async def test_token_wait_times_out() -> None:
    assert await CancelToken().wait(0.01) is False


@pytest.mark.asyncio
async def test_token_wait_wakes_on_cancel() -> None:
    token = CancelToken()
    asyncio.get_running_loop().call_later(0.01, token.cancel)
    assert await asyncio.wait_for(token.wait(10.0), timeout=1.0) is True


@pytest.mark.asyncio
async def test_checkpoint_raises_for_cancelled_token() -> None:
    await checkpoint()
    token = CancelToken()
    await checkpoint(token)
    token.cancel()
    with pytest.raises(asyncio.CancelledError):
        await checkpoint(token)


@pytest.mark.asyncio
async def test_sleep_waits_for_delay() -> None:
    start = time.monotonic()
    await sleep(0.02, token=CancelToken())
    assert time.monotonic() - start >= 0.015


@pytest.mark.asyncio
async def test_sleep_interrupted_by_token() -> None:
    token = CancelToken()
    asyncio.get_running_loop().call_later(0.01, token.cancel)
    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(sleep(10.0, token=token), timeout=1.0)


@pytest.mark.asyncio
async def test_sleep_interrupted_by_task_cancel() -> None:
    task = asyncio.create_task(sleep(10.0))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_sleep_with_tolerance_never_wakes_early() -> None:
    start = time.monotonic()
    await sleep(0.05, tolerance=1.0)
    assert time.monotonic() - start >= 0.05

    start = time.monotonic()
    await sleep(0.05, tolerance=1.0, token=CancelToken())
    assert time.monotonic() - start >= 0.05


@pytest.mark.asyncio
async def test_sleep_observes_already_cancelled_token() -> None:
    token = CancelToken()
    token.cancel()
    with pytest.raises(asyncio.CancelledError):
        await sleep(0.001, tolerance=1.0, token=token)
