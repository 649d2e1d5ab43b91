"""Pytest fixtures: bar sequences for deterministic tests."""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from amw_core.contracts import Bar

BASE_TS = datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc)


def make_bar(i: int, high: str, low: str, close: str) -> Bar:
    return Bar(
        time=BASE_TS + timedelta(days=i),
        high=Decimal(high),
        low=Decimal(low),
        close=Decimal(close),
    )


@pytest.fixture
def scenario_bars() -> list[Bar]:
    """Four bars: first, higher close (long), a dip that holds, a rally."""
    return [
        make_bar(0, "10", "9", "9.5"),
        make_bar(1, "11", "9.5", "10.8"),
        make_bar(2, "11.5", "10", "9.9"),
        make_bar(3, "12", "9", "11.5"),
    ]


@pytest.fixture
def short_bars() -> list[Bar]:
    """Second close below the first, a lower low, a bounce, then a breakout."""
    return [
        make_bar(0, "10", "9", "9.5"),
        make_bar(1, "9.6", "8.6", "8.8"),
        make_bar(2, "9", "8", "8.2"),
        make_bar(3, "8.5", "7.5", "8.4"),
        make_bar(4, "13", "11.5", "12.5"),
    ]


@pytest.fixture
def long_then_break_bars() -> list[Bar]:
    """Uptrend with a pullback that holds, then a close below the stop."""
    return [
        make_bar(0, "10", "9", "9.5"),
        make_bar(1, "10.5", "9.5", "10"),
        make_bar(2, "11", "10", "10.8"),
        make_bar(3, "10.5", "9.5", "10.2"),
        make_bar(4, "9.8", "9", "9.2"),
    ]


@pytest.fixture
def random_walk_bars() -> list[Bar]:
    """300 seeded random-walk bars with two-decimal prices."""
    rng = random.Random(7)
    bars: list[Bar] = []
    close = Decimal("100.00")
    cent = Decimal("0.01")
    for i in range(300):
        step = Decimal(str(rng.uniform(-2.5, 2.5))).quantize(cent)
        close = max(Decimal("5.00"), close + step)
        high = close + Decimal(str(rng.uniform(0, 1.5))).quantize(cent)
        low = close - Decimal(str(rng.uniform(0, 1.5))).quantize(cent)
        bars.append(Bar(time=BASE_TS + timedelta(hours=i), high=high, low=low, close=close))
    return bars
