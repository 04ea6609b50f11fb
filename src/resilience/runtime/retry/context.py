"""Shared value types for backoff evaluation.

- AttemptContext: immutable per-failure snapshot handed to policies
- RandomSource: anything yielding uniform floats in [0, 1)
- Transform: protocol for chainable delay adjustments
- scale_duration/uniform: arithmetic shared by baselines and transforms
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class AttemptContext:
    """Snapshot of a session at the moment a failure is handled.

    Attributes:
        attempt_index: 0-based index of the attempt that just failed
        counted_attempts: Retries so far that consumed ``max_attempts``
        elapsed: Seconds since the session started
    """

    attempt_index: int
    counted_attempts: int = 0
    elapsed: float = 0.0


@runtime_checkable
class RandomSource(Protocol):
    """Uniform random source. ``random.Random`` and the ``random`` module both qualify."""

    def random(self) -> float: ...


@runtime_checkable
class Transform(Protocol):
    """Adjustment applied to a baseline delay.

    Returning None vetoes the attempt: the whole Backoff evaluates to None.
    """

    def apply(
        self,
        delay: float,
        attempt: int,
        context: AttemptContext,
        rng: RandomSource,
    ) -> float | None: ...


# Process-wide source for callers that don't need determinism
DEFAULT_RNG: RandomSource = random.SystemRandom()


def scale_duration(delay: float, factor: float) -> float | None:
    """Scale ``delay`` by ``factor``.

    A negative or non-finite factor, or a product that overflows, yields
    None so the caller's chain aborts instead of sleeping for garbage.
    """
    if not math.isfinite(factor) or factor < 0:
        return None
    scaled = delay * factor
    return scaled if math.isfinite(scaled) else None


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Draw uniformly from [low, high] using ``rng``."""
    return low + (high - low) * rng.random()
