"""Transforms that adjust a baseline delay.

Applied strictly in chain order with no re-application, so
``constant(10).max(5).jitter(0.5)`` can land above 5s: the clamp ran before
the jitter.

- Clamp: raise to a floor and/or cap at a ceiling
- PercentJitter: scale by a uniform factor in [max(0, 1 - p), 1 + p]
- FullJitter: scale by a uniform factor in [0, 1] (AWS-style)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

from resilience.foundation.errors import ConfigurationError, as_seconds

from .context import AttemptContext, RandomSource, scale_duration, uniform


@dataclass(frozen=True, slots=True)
class Clamp:
    """Clamp a delay into optional ``[min, max]`` bounds.

    Example:
        >>> # 1s, 2s, 4s, 5s, 5s...
        >>> Backoff.exponential(1.0, 2.0).clamp(min=1.0, max=5.0)
    """

    min: float | timedelta | None = None
    max: float | timedelta | None = None

    def __post_init__(self) -> None:
        lo = None if self.min is None else as_seconds(self.min, "clamp min")
        hi = None if self.max is None else as_seconds(self.max, "clamp max")
        if lo is not None and hi is not None and lo > hi:
            raise ConfigurationError(f"clamp min ({lo}) must be <= max ({hi})")
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    def apply(self, delay: float, attempt: int, context: AttemptContext, rng: RandomSource) -> float:
        if self.min is not None and delay < self.min:
            delay = self.min
        if self.max is not None and delay > self.max:
            delay = self.max
        return delay


@dataclass(frozen=True, slots=True)
class PercentJitter:
    """Symmetric jitter: a delay ``d`` becomes roughly ``d * (1 ± percent)``.

    Example:
        >>> # Uniform in [9s, 11s]
        >>> Backoff.constant(10.0).jitter(0.1)
    """

    percent: float = 0.15

    def __post_init__(self) -> None:
        if not math.isfinite(self.percent) or self.percent < 0:
            raise ConfigurationError(f"jitter percent must be >= 0 and finite, got {self.percent!r}")

    def apply(self, delay: float, attempt: int, context: AttemptContext, rng: RandomSource) -> float | None:
        factor = uniform(rng, max(0.0, 1.0 - self.percent), 1.0 + self.percent)
        return scale_duration(delay, factor)


@dataclass(frozen=True, slots=True)
class FullJitter:
    """Full jitter: spread attempts uniformly across ``[0, d]``.

    Reference: https://aws.amazon.com/blogs/architecture/exponential-backoff-and-jitter/
    """

    def apply(self, delay: float, attempt: int, context: AttemptContext, rng: RandomSource) -> float | None:
        return scale_duration(delay, uniform(rng, 0.0, 1.0))
