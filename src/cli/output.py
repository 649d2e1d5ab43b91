"""
Human-readable trend output for the terminal.

Every CLI command uses these formatters.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from amw_core.contracts import TrendPoint
from amw_core.trend import AMWTrendEngine


def _fmt(value: Decimal | None, places: int = 4) -> str:
    if value is None:
        return "-"
    return f"{value:.{places}f}"


def format_trend_table(points: Sequence[TrendPoint], *, warm_up_period: int) -> str:
    """One line per bar: time, close, true range, level, direction, flags."""
    lines = [
        f"{'time':<25} {'close':>12} {'TR':>10} {'level':>12}  {'dir':<6} flags",
    ]
    for p in points:
        flags = []
        if p.flipped:
            flags.append("FLIP")
        if not p.is_ready:
            flags.append("warmup")
        lines.append(
            f"{p.time.isoformat():<25} {_fmt(p.close):>12} {_fmt(p.true_range):>10} "
            f"{_fmt(p.value):>12}  {p.direction:<6} {' '.join(flags)}".rstrip()
        )
    lines.append(f"({len(points)} bars shown, warm-up period {warm_up_period})")
    return "\n".join(lines)


def format_run_summary(
    engine: AMWTrendEngine,
    points: Sequence[TrendPoint],
    symbol: str,
    timeframe: str,
) -> str:
    """Summary block printed after a run."""
    flip_count = sum(1 for p in points if p.flipped)
    lines = [
        f"=== AMW Trend: {symbol} {timeframe} ===",
        f"Indicator    : {engine.name}",
        f"Bars         : {engine.samples}",
        f"Flips        : {flip_count}",
    ]
    if points:
        lines.append(f"Period       : {points[0].time.isoformat()} -> {points[-1].time.isoformat()}")
    lines.append("===")
    return "\n".join(lines)


def format_status(engine: AMWTrendEngine, symbol: str, timeframe: str) -> str:
    """Latest state of an engine after it has consumed the stored bars."""
    direction = engine.is_long
    current = engine.current
    lines = [
        f"=== AMW Status: {symbol} {timeframe} ===",
        f"Indicator    : {engine.name}",
        f"Samples      : {engine.samples} (warm-up {engine.warm_up_period})",
        f"Ready        : {'yes' if engine.is_ready else 'no'}",
        f"Phase        : {engine.phase.value}",
    ]
    if engine.samples:
        lines.append(f"As of        : {current.time.isoformat()}")
        lines.append(f"Level        : {_fmt(engine.trend_level)}")
        if direction is None:
            lines.append("Direction    : not yet established")
        else:
            lines.append(f"Direction    : {'LONG' if direction else 'SHORT'}")
        lines.append(f"True range   : {_fmt(engine.true_range.current.value)}")
        lines.append(f"Smoothed L/S : {_fmt(engine.smoother_long.current.value)} / "
                     f"{_fmt(engine.smoother_short.current.value)}")
    lines.append("===")
    return "\n".join(lines)
