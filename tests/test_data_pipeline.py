"""Integration tests for the data layer: CSV loader and bar store."""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from amw_core.contracts import Bar
from data.bar_store import BarStore
from data.csv_loader import BarDataError, load_bars_csv


def _ts(y: int, m: int, d: int) -> datetime:
    return datetime(y, m, d, 0, 0, 0, tzinfo=timezone.utc)


def _write_csv(tmp_path: Path, text: str, name: str = "bars.csv") -> Path:
    p = tmp_path / name
    p.write_text(text)
    return p


# ---------------------------------------------------------------------------
# CSV loader
# ---------------------------------------------------------------------------


class TestCsvLoader:

    def test_basic(self, tmp_path: Path) -> None:
        p = _write_csv(
            tmp_path,
            "time,open,high,low,close,volume\n"
            "2024-01-02T00:00:00Z,9.2,10,9,9.5,1000\n"
            "2024-01-03T00:00:00Z,9.5,11,9.5,10.8,1200\n",
        )
        bars = load_bars_csv(p, symbol="ES")
        assert len(bars) == 2
        assert bars[0].time == _ts(2024, 1, 2)
        assert bars[1].close == Decimal("10.8")
        assert bars[0].open == Decimal("9.2")
        assert bars[0].volume == 1000
        assert bars[0].symbol == "ES"

    def test_minimal_columns_and_timestamp_alias(self, tmp_path: Path) -> None:
        p = _write_csv(tmp_path, "Timestamp,High,Low,Close\n2024-01-02,10,9,9.5\n")
        bars = load_bars_csv(p)
        assert bars[0].time == _ts(2024, 1, 2)
        assert bars[0].open is None
        assert bars[0].volume == 0

    def test_offset_normalized_to_utc(self, tmp_path: Path) -> None:
        p = _write_csv(tmp_path, "time,high,low,close\n2024-01-02T09:30:00-05:00,10,9,9.5\n")
        assert load_bars_csv(p)[0].time == datetime(2024, 1, 2, 14, 30, tzinfo=timezone.utc)

    def test_out_of_order_rejected(self, tmp_path: Path) -> None:
        p = _write_csv(
            tmp_path,
            "time,high,low,close\n2024-01-03,10,9,9.5\n2024-01-02,11,9.5,10.8\n",
        )
        with pytest.raises(BarDataError, match="line 3"):
            load_bars_csv(p)

    def test_duplicate_time_rejected(self, tmp_path: Path) -> None:
        p = _write_csv(
            tmp_path,
            "time,high,low,close\n2024-01-02,10,9,9.5\n2024-01-02,11,9.5,10.8\n",
        )
        with pytest.raises(BarDataError):
            load_bars_csv(p)

    def test_missing_column(self, tmp_path: Path) -> None:
        p = _write_csv(tmp_path, "time,high,close\n2024-01-02,10,9.5\n")
        with pytest.raises(BarDataError, match="low"):
            load_bars_csv(p)

    def test_missing_time_column(self, tmp_path: Path) -> None:
        p = _write_csv(tmp_path, "date_x,high,low,close\n2024-01-02,10,9,9.5\n")
        with pytest.raises(BarDataError, match="time"):
            load_bars_csv(p)

    def test_bad_number(self, tmp_path: Path) -> None:
        p = _write_csv(tmp_path, "time,high,low,close\n2024-01-02,10,n/a,9.5\n")
        with pytest.raises(BarDataError, match="low"):
            load_bars_csv(p)

    def test_non_finite_close_rejected(self, tmp_path: Path) -> None:
        p = _write_csv(
            tmp_path,
            "time,high,low,close\n2024-01-02,10,9,NaN\n2024-01-03,11,9,10\n",
        )
        with pytest.raises(BarDataError, match="line 2: bad close"):
            load_bars_csv(p)

    def test_infinite_high_rejected(self, tmp_path: Path) -> None:
        p = _write_csv(tmp_path, "time,high,low,close\n2024-01-02,Infinity,9,9.5\n")
        with pytest.raises(BarDataError, match="bad high"):
            load_bars_csv(p)

    def test_bad_timestamp(self, tmp_path: Path) -> None:
        p = _write_csv(tmp_path, "time,high,low,close\nyesterday,10,9,9.5\n")
        with pytest.raises(BarDataError, match="timestamp"):
            load_bars_csv(p)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_bars_csv(tmp_path / "none.csv")


# ---------------------------------------------------------------------------
# Bar store
# ---------------------------------------------------------------------------


class TestBarStore:

    def test_write_and_get_exact_decimals(self, tmp_path: Path) -> None:
        store = BarStore(tmp_path / "bars.db")
        bars = [
            Bar(_ts(2024, 1, 2), "10.125", "9.000", "9.5", open="9.25", volume=5),
            Bar(_ts(2024, 1, 3), "11", "9.5", "10.8"),
        ]
        store.write_bars("ES", "1d", bars)
        out = store.get_bars("ES", "1d")
        assert len(out) == 2
        assert out[0].high == Decimal("10.125")
        assert str(out[0].low) == "9.000"
        assert out[0].open == Decimal("9.25")
        assert out[0].volume == 5
        assert out[1].open is None
        assert out[1].close == Decimal("10.8")
        assert out[1].symbol == "ES"

    def test_upsert_by_time(self, tmp_path: Path) -> None:
        store = BarStore(tmp_path / "bars.db")
        store.write_bars("ES", "1d", [Bar(_ts(2024, 1, 2), "10", "9", "9.5")])
        store.write_bars("ES", "1d", [Bar(_ts(2024, 1, 2), "10", "9", "9.7")])
        out = store.get_bars("ES", "1d")
        assert len(out) == 1
        assert out[0].close == Decimal("9.7")

    def test_filters_and_last_bars(self, tmp_path: Path) -> None:
        store = BarStore(tmp_path / "bars.db")
        bars = [Bar(_ts(2024, 1, 2 + i), "10", "9", str(9 + i)) for i in range(5)]
        store.write_bars("ES", "1d", bars)
        assert store.count_bars("ES", "1d") == 5
        assert store.count_bars("ES", "1h") == 0
        window = store.get_bars("ES", "1d", since=_ts(2024, 1, 3), until=_ts(2024, 1, 5))
        assert [b.time.day for b in window] == [3, 4, 5]
        last2 = store.get_last_bars("ES", "1d", 2)
        assert [b.time.day for b in last2] == [5, 6]

    def test_roundtrip_feeds_engine(self, tmp_path: Path, scenario_bars) -> None:
        from amw_core.series import compute_trend

        store = BarStore(tmp_path / "bars.db")
        store.write_bars("ES", "1d", scenario_bars)
        direct = [p.value for p in compute_trend(scenario_bars)]
        stored = [p.value for p in compute_trend(store.get_bars("ES", "1d"))]
        assert direct == stored
