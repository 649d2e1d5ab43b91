"""
Batch driver: run an ordered bar sequence through an AMWTrendEngine.

Produces one TrendPoint per bar, flagging the bars on which the
direction flipped. The engine itself stays streaming; this is a thin
loop for CLI output and tests.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from amw_core.contracts import Bar, TrendPoint
from amw_core.trend import AMWTrendEngine, EnginePhase

if TYPE_CHECKING:
    from config.amw_config import AMWTrendConfig

logger = logging.getLogger("amw.trend")


def compute_trend(
    bars: Iterable[Bar],
    engine: AMWTrendEngine | None = None,
    config: AMWTrendConfig | None = None,
) -> list[TrendPoint]:
    """Feed *bars* (oldest first) to *engine* and collect a TrendPoint per bar.

    Parameters
    ----------
    bars:
        Ordered bar history. Time order is the caller's responsibility.
    engine:
        Engine to drive. Its existing state is continued, not reset.
    config:
        Used to build a fresh engine when *engine* is None. Falls back
        to the default parameters when both are None.
    """
    if engine is None:
        engine = AMWTrendEngine.from_config(config) if config is not None else AMWTrendEngine()

    points: list[TrendPoint] = []
    for bar in bars:
        was_active = engine.phase is EnginePhase.ACTIVE
        before = engine.is_long
        value = engine.update(bar)
        after = engine.is_long
        flipped = was_active and before != after
        if flipped:
            logger.info(
                "%s direction flip -> %s at %s (close %s, level %s)",
                engine.name, "LONG" if after else "SHORT", bar.time, bar.close, value,
            )
        points.append(
            TrendPoint(
                time=bar.time,
                close=bar.close,
                true_range=engine.true_range.current.value,
                value=value,
                is_long=after,
                is_ready=engine.is_ready,
                flipped=flipped,
            )
        )
    return points


def flips(points: Iterable[TrendPoint]) -> list[TrendPoint]:
    """Return only the points where the direction flipped."""
    return [p for p in points if p.flipped]
