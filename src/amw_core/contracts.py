"""
Data contracts for amw-core: Bar, IndicatorDataPoint, TrendPoint.

amw-core consumes Bars and produces trend levels. No I/O; these are
plain frozen dataclasses. Prices are ``decimal.Decimal`` throughout so
ratchet comparisons are exact.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Union

Number = Union[Decimal, float, int, str]


def to_decimal(value: Number) -> Decimal:
    """Coerce *value* to Decimal. Floats go through ``str`` so 2.6 stays 2.6."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a price")
    if isinstance(value, float):
        return Decimal(repr(value))
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"not a decimal number: {value!r}") from exc


@dataclass(frozen=True)
class Bar:
    """Price bar; timestamps ordered, prices Decimal. Never mutated by the core."""

    time: datetime
    high: Decimal
    low: Decimal
    close: Decimal
    open: Decimal | None = None
    volume: int = 0
    symbol: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "high", to_decimal(self.high))
        object.__setattr__(self, "low", to_decimal(self.low))
        object.__setattr__(self, "close", to_decimal(self.close))
        if self.open is not None:
            object.__setattr__(self, "open", to_decimal(self.open))

    def bar_range(self) -> Decimal:
        """Full extent of the bar: high - low."""
        return self.high - self.low


@dataclass(frozen=True)
class IndicatorDataPoint:
    """Current value of a streaming component, stamped with the bar time."""

    time: datetime | None
    value: Decimal


@dataclass(frozen=True)
class TrendPoint:
    """One row of a batch trend run. Output of ``compute_trend``."""

    time: datetime
    close: Decimal
    true_range: Decimal
    value: Decimal
    is_long: bool | None   # None while only one bar has been seen
    is_ready: bool
    flipped: bool

    @property
    def direction(self) -> str:
        if self.is_long is None:
            return "WARMUP"
        return "LONG" if self.is_long else "SHORT"
