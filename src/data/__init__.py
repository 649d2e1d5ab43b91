"""
Data layer: load bars from CSV, normalize to UTC, persist input bars.

Depends on amw_core.contracts for Bar; no dependency from amw_core back to data.
"""

from data.bar_store import BarStore
from data.csv_loader import BarDataError, load_bars_csv

__all__ = [
    "BarDataError",
    "BarStore",
    "load_bars_csv",
]
