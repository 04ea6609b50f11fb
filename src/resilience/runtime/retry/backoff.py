"""Composable backoff: one baseline curve plus an ordered transform chain.

A Backoff maps a 0-based attempt index to a delay in seconds, or to None
when the plan vetoes the attempt. Baselines pick the raw shape:
- none: always 0
- constant: fixed delay
- linear: offset + step * attempt
- exponential: initial * multiplier ** attempt
- custom: caller-supplied function

Chained transforms (min/max/clamp/jitter/full_jitter) run in the order they
were added. Every chaining call returns a new Backoff, so one plan can be
built once and shared by any number of concurrent sessions.

Example:
    >>> # Exponential, capped at 30s, with 15% jitter
    >>> backoff = Backoff.exponential(1.0, 2.0).max(30.0).jitter(0.15)
    >>> backoff.delay(3, rng=random.Random(7))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable

from resilience.foundation.errors import as_seconds, require_positive_finite

from .context import DEFAULT_RNG, AttemptContext, RandomSource, Transform, scale_duration
from .transforms import Clamp, FullJitter, PercentJitter

Baseline = Callable[[int], float | None]


@dataclass(frozen=True, slots=True)
class Backoff:
    """Immutable backoff plan.

    Build with the classmethod baselines rather than directly.

    Attributes:
        baseline: Raw attempt -> delay curve
        transforms: Adjustments applied in order after the baseline
        label: Human-readable baseline description for repr
    """

    baseline: Baseline = field(repr=False)
    transforms: tuple[Transform, ...] = ()
    label: str = field(default="custom", compare=False)

    # ─────────────────────────────────────────────────────────────────
    # Baselines
    # ─────────────────────────────────────────────────────────────────

    @classmethod
    def none(cls) -> Backoff:
        """Retry immediately."""
        return _NONE

    @classmethod
    def constant(cls, delay: float | timedelta) -> Backoff:
        d = as_seconds(delay, "delay")
        return cls(lambda _: d, label=f"constant({d})")

    @classmethod
    def linear(cls, step: float | timedelta, offset: float | timedelta = 0.0) -> Backoff:
        s, o = as_seconds(step, "step"), as_seconds(offset, "offset")

        def curve(attempt: int) -> float | None:
            scaled = scale_duration(s, attempt)
            return None if scaled is None else scaled + o

        return cls(curve, label=f"linear(step={s}, offset={o})")

    @classmethod
    def exponential(cls, initial: float | timedelta, multiplier: float = 2.0) -> Backoff:
        i, m = as_seconds(initial, "initial"), require_positive_finite(multiplier, "multiplier")

        def curve(attempt: int) -> float | None:
            try:
                factor = m ** attempt
            except OverflowError:
                return None
            return scale_duration(i, factor)

        return cls(curve, label=f"exponential(initial={i}, multiplier={m})")

    @classmethod
    def custom(cls, fn: Baseline) -> Backoff:
        """Caller-supplied curve. Not validated; returning None vetoes the attempt."""
        return cls(fn, label=f"custom({getattr(fn, '__name__', 'fn')})")

    # ─────────────────────────────────────────────────────────────────
    # Transform chain
    # ─────────────────────────────────────────────────────────────────

    def with_transform(self, transform: Transform) -> Backoff:
        """Return a copy with ``transform`` appended to the chain."""
        if not isinstance(transform, Transform):
            raise TypeError(f"Expected a Transform, got {type(transform).__name__}")
        return Backoff(self.baseline, (*self.transforms, transform), self.label)

    def min(self, floor: float | timedelta) -> Backoff:
        return self.with_transform(Clamp(min=floor))

    def max(self, ceiling: float | timedelta) -> Backoff:
        return self.with_transform(Clamp(max=ceiling))

    def clamp(self, min: float | timedelta | None = None, max: float | timedelta | None = None) -> Backoff:
        return self.with_transform(Clamp(min=min, max=max))

    def jitter(self, percent: float = 0.15) -> Backoff:
        return self.with_transform(PercentJitter(percent))

    def full_jitter(self) -> Backoff:
        return self.with_transform(FullJitter())

    # ─────────────────────────────────────────────────────────────────
    # Evaluation
    # ─────────────────────────────────────────────────────────────────

    def delay(
        self,
        attempt: int,
        context: AttemptContext | None = None,
        rng: RandomSource | None = None,
    ) -> float | None:
        """Compute the delay for ``attempt``; any None in the chain stops it.

        Args:
            attempt: 0-based attempt index
            context: Session snapshot passed to transforms (default: bare index)
            rng: Random source for jitter (default: process-wide system RNG)

        Returns:
            Delay in seconds, or None if the plan vetoes this attempt
        """
        ctx = context if context is not None else AttemptContext(attempt_index=attempt)
        source = rng if rng is not None else DEFAULT_RNG
        value = self.baseline(attempt)
        if value is None:
            return None
        for t in self.transforms:
            value = t.apply(value, attempt, ctx, source)
            if value is None:
                return None
        return value

    def __repr__(self) -> str:
        steps = [self.label, *(repr(t) for t in self.transforms)]
        return f"Backoff({' → '.join(steps)})"


_NONE = Backoff(lambda _: 0.0, label="none")


def evaluate_backoff(
    backoff: Backoff,
    attempt: int,
    context: AttemptContext | None = None,
    rng: RandomSource | None = None,
) -> float | None:
    """Functional form of ``Backoff.delay``."""
    return backoff.delay(attempt, context, rng)
