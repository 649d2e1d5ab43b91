"""
Load bars from a CSV file. Timestamps normalized to UTC.

Expected header: time (or timestamp), high, low, close; open and volume
are optional. Rows must be in strictly increasing time order; the trend
engine relies on it and does not re-check.
"""

import csv
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path

from amw_core.contracts import Bar

logger = logging.getLogger("amw.data")

_TIME_COLUMNS = ("time", "timestamp")
_REQUIRED = ("high", "low", "close")


class BarDataError(Exception):
    """Raised when bar input is malformed or out of order."""


def _parse_time(raw: str, line: int) -> datetime:
    try:
        ts = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise BarDataError(f"line {line}: bad timestamp {raw!r}") from exc
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _parse_price(raw: str | None, column: str, line: int) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except (AttributeError, InvalidOperation) as exc:
        raise BarDataError(f"line {line}: bad {column} value {raw!r}") from exc
    if not value.is_finite():
        raise BarDataError(f"line {line}: bad {column} value {raw!r}")
    return value


def load_bars_csv(path: str | Path, symbol: str = "") -> list[Bar]:
    """Read bars from *path*, oldest first."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Bar file not found: {csv_path}")

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        columns = {c.strip().lower(): c for c in (reader.fieldnames or [])}
        time_col = next((columns[c] for c in _TIME_COLUMNS if c in columns), None)
        if time_col is None:
            raise BarDataError(f"{csv_path.name}: missing time/timestamp column")
        missing = [c for c in _REQUIRED if c not in columns]
        if missing:
            raise BarDataError(f"{csv_path.name}: missing column(s) {', '.join(missing)}")

        bars: list[Bar] = []
        # Header is line 1
        for line, row in enumerate(reader, start=2):
            ts = _parse_time(row[time_col] or "", line)
            if bars and ts <= bars[-1].time:
                raise BarDataError(
                    f"line {line}: time {ts.isoformat()} is not after {bars[-1].time.isoformat()}"
                )
            open_raw = row.get(columns["open"]) if "open" in columns else None
            volume_raw = row.get(columns["volume"]) if "volume" in columns else None
            bars.append(
                Bar(
                    time=ts,
                    high=_parse_price(row[columns["high"]], "high", line),
                    low=_parse_price(row[columns["low"]], "low", line),
                    close=_parse_price(row[columns["close"]], "close", line),
                    open=_parse_price(open_raw, "open", line) if open_raw else None,
                    volume=int(float(volume_raw)) if volume_raw else 0,
                    symbol=symbol,
                )
            )

    logger.info("Loaded %d bars from %s", len(bars), csv_path)
    return bars
