"""
Smoothing filters for the true-range stream.

The trend engine only needs the ``SmoothingFilter`` surface:
``update(time, value)``, ``is_ready`` and ``reset()``. Each filter kind
below satisfies it independently; ``create_filter`` picks one from a
``MovingAverageType``.

Warm-up convention (all kinds): the value is defined from the first
sample on. Until ``period`` samples have arrived the filter reports the
average of what it has seen so far, and ``is_ready`` turns true at
exactly ``period`` samples.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol, runtime_checkable

from amw_core.contracts import IndicatorDataPoint


class MovingAverageType(str, Enum):
    """Smoothing algorithm applied to the true range."""

    WILDERS = "WILDERS"
    EXPONENTIAL = "EXPONENTIAL"
    SIMPLE = "SIMPLE"
    LINEAR_WEIGHTED = "LINEAR_WEIGHTED"

    @property
    def label(self) -> str:
        """Short display name used in indicator names."""
        return _LABELS[self]

    @classmethod
    def parse(cls, kind: "MovingAverageType | str") -> "MovingAverageType":
        """Accept an enum member, its value or its label (case-insensitive)."""
        if isinstance(kind, cls):
            return kind
        key = str(kind).strip().upper()
        for member in cls:
            if key in (member.value, member.label.upper()):
                return member
        raise ValueError(f"Unknown moving average type: {kind!r}")


_LABELS = {
    MovingAverageType.WILDERS: "Wilders",
    MovingAverageType.EXPONENTIAL: "Exponential",
    MovingAverageType.SIMPLE: "Simple",
    MovingAverageType.LINEAR_WEIGHTED: "LWMA",
}


@runtime_checkable
class SmoothingFilter(Protocol):
    """Streaming scalar smoother consumed by the trend engine."""

    def update(self, time: datetime, value: Decimal) -> Decimal:
        ...

    @property
    def is_ready(self) -> bool:
        ...

    def reset(self) -> None:
        ...


def _check_period(period: int) -> int:
    if isinstance(period, bool) or not isinstance(period, int):
        raise ValueError(f"period must be an int, got {type(period).__name__}")
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")
    return period


class WildersMovingAverage:
    """Wilder's smoothing: ``prev + (x - prev) / period`` after a mean seed."""

    def __init__(self, period: int, name: str | None = None) -> None:
        self.period = _check_period(period)
        self.name = name or f"WWMA({period})"
        self.reset()

    @property
    def samples(self) -> int:
        return self._samples

    @property
    def current(self) -> IndicatorDataPoint:
        return self._current

    @property
    def is_ready(self) -> bool:
        return self._samples >= self.period

    def update(self, time: datetime, value: Decimal) -> Decimal:
        self._samples += 1
        if self._samples <= self.period:
            self._seed_sum += value
            smoothed = self._seed_sum / self._samples
        else:
            prev = self._current.value
            smoothed = prev + (value - prev) / self.period
        self._current = IndicatorDataPoint(time, smoothed)
        return smoothed

    def reset(self) -> None:
        self._samples = 0
        self._seed_sum = Decimal(0)
        self._current = IndicatorDataPoint(None, Decimal(0))


class ExponentialMovingAverage:
    """EMA with ``k = 2 / (period + 1)``, seeded by the running mean."""

    def __init__(self, period: int, name: str | None = None) -> None:
        self.period = _check_period(period)
        self.name = name or f"EMA({period})"
        self._k = Decimal(2) / (period + 1)
        self.reset()

    @property
    def samples(self) -> int:
        return self._samples

    @property
    def current(self) -> IndicatorDataPoint:
        return self._current

    @property
    def is_ready(self) -> bool:
        return self._samples >= self.period

    def update(self, time: datetime, value: Decimal) -> Decimal:
        self._samples += 1
        if self._samples <= self.period:
            self._seed_sum += value
            smoothed = self._seed_sum / self._samples
        else:
            prev = self._current.value
            smoothed = prev + self._k * (value - prev)
        self._current = IndicatorDataPoint(time, smoothed)
        return smoothed

    def reset(self) -> None:
        self._samples = 0
        self._seed_sum = Decimal(0)
        self._current = IndicatorDataPoint(None, Decimal(0))


class SimpleMovingAverage:
    """Mean of the last ``period`` samples (fewer during warm-up)."""

    def __init__(self, period: int, name: str | None = None) -> None:
        self.period = _check_period(period)
        self.name = name or f"SMA({period})"
        self._window: deque[Decimal] = deque(maxlen=period)
        self.reset()

    @property
    def samples(self) -> int:
        return self._samples

    @property
    def current(self) -> IndicatorDataPoint:
        return self._current

    @property
    def is_ready(self) -> bool:
        return self._samples >= self.period

    def update(self, time: datetime, value: Decimal) -> Decimal:
        self._samples += 1
        if len(self._window) == self.period:
            self._running_sum -= self._window[0]
        self._window.append(value)
        self._running_sum += value
        smoothed = self._running_sum / len(self._window)
        self._current = IndicatorDataPoint(time, smoothed)
        return smoothed

    def reset(self) -> None:
        self._window.clear()
        self._running_sum = Decimal(0)
        self._samples = 0
        self._current = IndicatorDataPoint(None, Decimal(0))


class LinearWeightedMovingAverage:
    """Weights 1..n over the last n (<= period) samples, newest heaviest."""

    def __init__(self, period: int, name: str | None = None) -> None:
        self.period = _check_period(period)
        self.name = name or f"LWMA({period})"
        self._window: deque[Decimal] = deque(maxlen=period)
        self.reset()

    @property
    def samples(self) -> int:
        return self._samples

    @property
    def current(self) -> IndicatorDataPoint:
        return self._current

    @property
    def is_ready(self) -> bool:
        return self._samples >= self.period

    def update(self, time: datetime, value: Decimal) -> Decimal:
        self._samples += 1
        self._window.append(value)
        n = len(self._window)
        weighted = sum((i * x for i, x in enumerate(self._window, 1)), Decimal(0))
        smoothed = weighted / (n * (n + 1) // 2)
        self._current = IndicatorDataPoint(time, smoothed)
        return smoothed

    def reset(self) -> None:
        self._window.clear()
        self._samples = 0
        self._current = IndicatorDataPoint(None, Decimal(0))


_FILTERS = {
    MovingAverageType.WILDERS: WildersMovingAverage,
    MovingAverageType.EXPONENTIAL: ExponentialMovingAverage,
    MovingAverageType.SIMPLE: SimpleMovingAverage,
    MovingAverageType.LINEAR_WEIGHTED: LinearWeightedMovingAverage,
}


def create_filter(
    kind: MovingAverageType | str,
    period: int,
    name: str | None = None,
) -> SmoothingFilter:
    """Build a fresh filter of the given kind and period."""
    ma_type = MovingAverageType.parse(kind)
    return _FILTERS[ma_type](period, name=name)
