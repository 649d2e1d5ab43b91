"""
amw-core: streaming AMW trend / adaptive trailing-stop indicator.

No I/O, no network, no side effects. Consumes bars one at a time,
produces one trend level per bar. Fully deterministic and unit-testable.
"""

from amw_core.contracts import Bar, IndicatorDataPoint, TrendPoint
from amw_core.series import compute_trend
from amw_core.smoothing import MovingAverageType, SmoothingFilter, create_filter
from amw_core.trend import AMWTrendEngine, EnginePhase, EngineState, IndicatorConfigError
from amw_core.true_range import TrueRangeCalculator, compute_true_range

__all__ = [
    "AMWTrendEngine",
    "Bar",
    "compute_trend",
    "compute_true_range",
    "create_filter",
    "EnginePhase",
    "EngineState",
    "IndicatorConfigError",
    "IndicatorDataPoint",
    "MovingAverageType",
    "SmoothingFilter",
    "TrendPoint",
    "TrueRangeCalculator",
]
