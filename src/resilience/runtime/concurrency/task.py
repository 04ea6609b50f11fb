"""Cooperative cancellation for retry and poll sessions.

Two cancellation paths reach a session:
    - Task cancellation: ``task.cancel()`` delivers ``CancelledError`` at the
      next await, including inside ``sleep``.
    - Explicit tokens: a ``CancelToken`` handed to ``retry``/``poll`` is
      checked at every checkpoint and wakes an in-progress ``sleep``.

Both surface as ``asyncio.CancelledError``.

Example:
    >>> token = CancelToken()
    >>> session = asyncio.create_task(retry(fetch, token=token))
    >>> token.cancel("shutting down")
    >>> await session  # raises CancelledError("shutting down")
"""

from __future__ import annotations

import asyncio


class CancelToken:
    """Explicit cancellation signal shared between a caller and a session.

    Once cancelled a token stays cancelled. Use a fresh token per session
    unless the sessions should be stopped together.
    """

    __slots__ = ("_event", "_message")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._message: str | None = None

    @property
    def cancelled(self) -> bool:
        """Whether cancel() has been called."""
        return self._event.is_set()

    def cancel(self, msg: str | None = None) -> None:
        """Request cancellation. The first message wins."""
        if not self._event.is_set():
            self._message = msg
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise asyncio.CancelledError(self._message)

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait until cancelled or until ``timeout`` seconds pass.

        Returns:
            True if the token was cancelled, False on timeout
        """
        if self._event.is_set():
            return True
        try:
            async with asyncio.timeout(timeout):
                await self._event.wait()
        except TimeoutError:
            return False
        return True

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"


async def checkpoint(token: CancelToken | None = None) -> None:
    """Cooperative cancellation checkpoint.

    Yields control to the event loop so pending task cancellation is
    delivered, then checks the explicit token if one is given.
    """
    await asyncio.sleep(0)
    if token is not None:
        token.raise_if_cancelled()


async def sleep(
    delay: float,
    *,
    tolerance: float | None = None,
    token: CancelToken | None = None,
) -> None:
    """Cancellable sleep.

    Waits at least ``delay`` seconds unless the task or ``token`` is cancelled
    first. ``tolerance`` is a precision hint: the wait may run late by up to
    that much but never ends early. asyncio timers have no slack setting, so
    the hint is accepted and the loop timer decides how late the wake-up is.

    Raises:
        asyncio.CancelledError: If cancelled before the delay elapses
    """
    if token is not None:
        token.raise_if_cancelled()
    loop = asyncio.get_running_loop()
    deadline = loop.time() + delay
    # Loop timers may fire up to one clock tick early
    while (remaining := deadline - loop.time()) > 0:
        if token is None:
            await asyncio.sleep(remaining)
        elif await token.wait(remaining):
            token.raise_if_cancelled()
