"""Cancellation primitives used by the retry and poll loops.

Pure asyncio: an explicit ``CancelToken``, a ``checkpoint`` that observes
both task and token cancellation, and an interruptible ``sleep``.
"""

from __future__ import annotations

from .task import CancelToken, checkpoint, sleep

__all__ = ["CancelToken", "checkpoint", "sleep"]
