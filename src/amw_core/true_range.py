"""
True Range computation with single-bar memory.

True Range = max(
    high - low,
    |high - prev_close|,
    |low  - prev_close|
)

With no previous bar the True Range is just ``high - low``. The
calculator keeps the last bar it saw so a stream of bars becomes a
stream of true-range values. Pure arithmetic; no I/O.
"""

from __future__ import annotations

from decimal import Decimal

from amw_core.contracts import Bar, IndicatorDataPoint


def compute_true_range(previous: Bar | None, current: Bar) -> Decimal:
    """Compute the True Range of *current* given the *previous* bar (or None)."""
    range1 = current.high - current.low
    if previous is None:
        return range1

    return max(
        range1,
        abs(current.high - previous.close),
        abs(current.low - previous.close),
    )


class TrueRangeCalculator:
    """Streaming True Range. Ready after a single sample."""

    def __init__(self, name: str = "TrueRange") -> None:
        self.name = name
        self._previous_bar: Bar | None = None
        self._samples = 0
        self._current = IndicatorDataPoint(None, Decimal(0))

    @property
    def previous_bar(self) -> Bar | None:
        return self._previous_bar

    @property
    def samples(self) -> int:
        return self._samples

    @property
    def current(self) -> IndicatorDataPoint:
        return self._current

    @property
    def is_ready(self) -> bool:
        return self._samples >= 1

    def update(self, bar: Bar) -> Decimal:
        """Return the true range of *bar* and remember it as the previous bar."""
        value = compute_true_range(self._previous_bar, bar)
        self._previous_bar = bar
        self._samples += 1
        self._current = IndicatorDataPoint(bar.time, value)
        return value

    def reset(self) -> None:
        self._previous_bar = None
        self._samples = 0
        self._current = IndicatorDataPoint(None, Decimal(0))
