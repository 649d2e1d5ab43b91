"""
AMW Trend: adaptive trailing-stop level, one value per bar.

Regular ATR stops for long positions, volatility stops for short
positions. Each bar drives a True Range calculator and two independent
smoothing filters (long branch, short branch); the smoothed ranges feed
a direction state machine:

    WARMING_FIRST   first bar      -> level = close
    WARMING_SECOND  second bar     -> direction from close vs prior close,
                                      level = close -/+ multiple * smoothed
    ACTIVE          every bar after:
        long:  close < level -> flip short, level = close + mS * smoothedS
               otherwise      level = max(level, close - mL * smoothedL)
        short: close > level -> flip long,  level = close - mL * smoothedL
               otherwise      level = min(level, minClose + mS * smoothedS)

The level only ratchets toward price while a direction holds; it jumps
only on a flip. Pure computation; no I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from amw_core.contracts import Bar, IndicatorDataPoint, Number, to_decimal
from amw_core.smoothing import MovingAverageType, SmoothingFilter, create_filter
from amw_core.true_range import TrueRangeCalculator

if TYPE_CHECKING:
    from config.amw_config import AMWTrendConfig

logger = logging.getLogger("amw.trend")


class IndicatorConfigError(ValueError):
    """Raised when the engine is constructed with invalid parameters."""


class EnginePhase(str, Enum):
    """Warm-up sequencing of the trend engine."""

    WARMING_FIRST = "WARMING_FIRST"
    WARMING_SECOND = "WARMING_SECOND"
    ACTIVE = "ACTIVE"


@dataclass
class EngineState:
    """Mutable cross-bar state owned by one engine instance."""

    sample_count: int = 0
    phase: EnginePhase = EnginePhase.WARMING_FIRST
    is_long: bool = False
    trend_level: Decimal | None = None
    extreme_close: Decimal | None = None
    atr_proxy: Decimal | None = None
    time: datetime | None = None


def _validate_period(label: str, period: int) -> int:
    if isinstance(period, bool) or not isinstance(period, int):
        raise IndicatorConfigError(f"{label} must be an int, got {type(period).__name__}")
    if period <= 0:
        raise IndicatorConfigError(f"{label} must be positive, got {period}")
    return period


def _validate_multiple(label: str, multiple: Number) -> Decimal:
    try:
        value = to_decimal(multiple)
    except (TypeError, ValueError) as exc:
        raise IndicatorConfigError(f"{label} must be a number: {exc}") from exc
    if not value.is_finite():
        raise IndicatorConfigError(f"{label} must be finite, got {multiple!r}")
    return value


def _validate_kind(label: str, kind: MovingAverageType | str) -> MovingAverageType:
    try:
        return MovingAverageType.parse(kind)
    except ValueError as exc:
        raise IndicatorConfigError(f"{label}: {exc}") from exc


def _fmt_multiple(value: Decimal) -> str:
    return format(value.normalize(), "f")


class AMWTrendEngine:
    """Streaming AMW trend / trailing-stop indicator.

    Not thread-safe: callers serialize ``update``/``reset`` per instance.
    Bars must arrive in strictly increasing time order.
    """

    def __init__(
        self,
        period_l: int = 20,
        multiple_l: Number = Decimal("2.6"),
        kind_l: MovingAverageType | str = MovingAverageType.WILDERS,
        period_s: int = 20,
        multiple_s: Number = Decimal("2.9"),
        kind_s: MovingAverageType | str = MovingAverageType.WILDERS,
        *,
        name: str | None = None,
    ) -> None:
        # Validate everything before building components.
        self._period_l = _validate_period("period_l", period_l)
        self._period_s = _validate_period("period_s", period_s)
        self._multiple_l = _validate_multiple("multiple_l", multiple_l)
        self._multiple_s = _validate_multiple("multiple_s", multiple_s)
        self._kind_l = _validate_kind("kind_l", kind_l)
        self._kind_s = _validate_kind("kind_s", kind_s)

        self.name = name or (
            f"amwTrend({self._period_l},{_fmt_multiple(self._multiple_l)},{self._kind_l.label},"
            f"{self._period_s},{_fmt_multiple(self._multiple_s)},{self._kind_s.label})"
        )
        self.warm_up_period = max(self._period_l, self._period_s)

        self._smoother_l: SmoothingFilter = create_filter(
            self._kind_l, self._period_l, name=f"{self.name}_L_{self._kind_l.label}"
        )
        self._smoother_s: SmoothingFilter = create_filter(
            self._kind_s, self._period_s, name=f"{self.name}_S_{self._kind_s.label}"
        )
        self._true_range = TrueRangeCalculator(name=f"{self.name}_TrueRange")
        self._state = EngineState()

    @classmethod
    def from_config(cls, config: AMWTrendConfig, *, name: str | None = None) -> AMWTrendEngine:
        """Build an engine from a loaded ``AMWTrendConfig``."""
        return cls(
            period_l=config.long.period,
            multiple_l=config.long.multiple,
            kind_l=config.long.smoothing,
            period_s=config.short.period,
            multiple_s=config.short.multiple,
            kind_s=config.short.smoothing,
            name=name,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def true_range(self) -> TrueRangeCalculator:
        """The internal true-range stream (diagnostics / composition)."""
        return self._true_range

    @property
    def period_l(self) -> int:
        return self._period_l

    @property
    def period_s(self) -> int:
        return self._period_s

    @property
    def multiple_l(self) -> Decimal:
        return self._multiple_l

    @property
    def multiple_s(self) -> Decimal:
        return self._multiple_s

    @property
    def kind_l(self) -> MovingAverageType:
        return self._kind_l

    @property
    def kind_s(self) -> MovingAverageType:
        return self._kind_s

    @property
    def smoother_long(self) -> SmoothingFilter:
        return self._smoother_l

    @property
    def smoother_short(self) -> SmoothingFilter:
        return self._smoother_s

    @property
    def is_ready(self) -> bool:
        return self._smoother_l.is_ready and self._smoother_s.is_ready

    @property
    def samples(self) -> int:
        return self._state.sample_count

    @property
    def phase(self) -> EnginePhase:
        return self._state.phase

    @property
    def is_long(self) -> bool | None:
        """Current direction; None until the second bar fixes it."""
        if self._state.sample_count < 2:
            return None
        return self._state.is_long

    @property
    def trend_level(self) -> Decimal | None:
        return self._state.trend_level

    @property
    def current(self) -> IndicatorDataPoint:
        level = self._state.trend_level
        return IndicatorDataPoint(self._state.time, level if level is not None else Decimal(0))

    @property
    def state(self) -> EngineState:
        """Snapshot copy of the engine state."""
        return replace(self._state)

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def update(self, bar: Bar) -> Decimal:
        """Advance by exactly one bar and return the new trend level."""
        previous = self._true_range.previous_bar
        tr = self._true_range.update(bar)
        smoothed_l = self._smoother_l.update(bar.time, tr)
        smoothed_s = self._smoother_s.update(bar.time, tr)

        state = self._state
        state.sample_count += 1
        state.time = bar.time
        close = bar.close

        if state.phase is EnginePhase.WARMING_FIRST:
            state.trend_level = close
            state.phase = EnginePhase.WARMING_SECOND

        elif state.phase is EnginePhase.WARMING_SECOND:
            state.is_long = close >= previous.close
            if state.is_long:
                state.atr_proxy = close - self._multiple_l * smoothed_l
            else:
                state.atr_proxy = close + self._multiple_s * smoothed_s
            state.trend_level = state.atr_proxy
            state.extreme_close = close
            state.phase = EnginePhase.ACTIVE

        elif state.is_long:
            if close < state.trend_level:
                state.trend_level = close + self._multiple_s * smoothed_s
                state.is_long = False
                state.extreme_close = close
                logger.debug("%s flipped SHORT at %s close=%s", self.name, bar.time, close)
            else:
                state.atr_proxy = close - self._multiple_l * smoothed_l
                state.trend_level = max(state.trend_level, state.atr_proxy)

        else:
            if close > state.trend_level:
                state.trend_level = close - self._multiple_l * smoothed_l
                state.is_long = True
                state.extreme_close = close
                logger.debug("%s flipped LONG at %s close=%s", self.name, bar.time, close)
            else:
                state.extreme_close = min(close, state.extreme_close)
                state.atr_proxy = state.extreme_close + self._multiple_s * smoothed_s
                state.trend_level = min(state.trend_level, state.atr_proxy)

        return state.trend_level

    def reset(self) -> None:
        """Return to construction-time state (WARMING_FIRST)."""
        self._true_range.reset()
        self._smoother_l.reset()
        self._smoother_s.reset()
        self._state = EngineState()

    def __repr__(self) -> str:
        return f"<AMWTrendEngine {self.name} samples={self.samples} level={self.trend_level}>"
