from __future__ import annotations

from pathlib import Path

import pytest

from opg_screener.data.screener import ScreenerLoadError, load_screener_csv
from opg_screener.strategy.candidates import GAP_THRESHOLD, filter_candidates
from opg_screener.types import Candidate


def test_filter_drops_small_gaps_and_keeps_order() -> None:
    rows = [
        Candidate(symbol="AAA", gap_percent=0.15, opening_price=10.0),
        Candidate(symbol="BBB", gap_percent=0.05, opening_price=99.0),
        Candidate(symbol="CCC", gap_percent=-0.25, opening_price=5.0),
        Candidate(symbol="DDD", gap_percent=-0.0999, opening_price=5.0),
        Candidate(symbol="EEE", gap_percent=GAP_THRESHOLD, opening_price=1.0),
    ]
    kept = filter_candidates(rows)
    assert [c.symbol for c in kept] == ["AAA", "CCC", "EEE"]


def test_filter_excludes_five_percent_gap_regardless_of_price() -> None:
    rows = [
        Candidate(symbol="XYZ", gap_percent=0.05, opening_price=price)
        for price in (0.01, 1.0, 1_000_000.0)
    ]
    assert filter_candidates(rows) == []


def test_load_screener_drops_malformed_rows(tmp_path: Path) -> None:
    path = tmp_path / "opg.csv"
    path.write_text(
        "Ticker,Gap,Open\n"
        "AAA,0.15,10.5\n"
        "BBB,n/a,12\n"
        "CCC,-0.2,\n"
        "DDD,0.02,7.25\n",
        encoding="utf-8",
    )
    loaded = load_screener_csv(path)
    assert [row.symbol for row in loaded.rows] == ["AAA", "DDD"]
    assert loaded.rows[0] == Candidate(symbol="AAA", gap_percent=0.15, opening_price=10.5)
    assert loaded.dropped_rows == 2


def test_load_screener_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ScreenerLoadError):
        load_screener_csv(tmp_path / "missing.csv")


def test_load_screener_header_only(tmp_path: Path) -> None:
    path = tmp_path / "opg.csv"
    path.write_text("Ticker,Gap,Open\n", encoding="utf-8")
    loaded = load_screener_csv(path)
    assert loaded.rows == []
    assert loaded.dropped_rows == 0


def test_load_screener_drops_rows_that_cannot_be_sized(tmp_path: Path) -> None:
    path = tmp_path / "opg.csv"
    path.write_text(
        "Ticker,Gap,Open\n"
        "GOOD,0.15,100\n"
        "ZERO,0.2,0\n"
        "NEG,0.2,-5\n"
        "INFP,0.2,inf\n"
        "INFG,inf,10\n"
        "WIPE,-1,10\n",
        encoding="utf-8",
    )
    loaded = load_screener_csv(path)
    assert [row.symbol for row in loaded.rows] == ["GOOD"]
    assert loaded.dropped_rows == 5


def test_load_screener_tolerates_leading_spaces(tmp_path: Path) -> None:
    path = tmp_path / "opg.csv"
    path.write_text("Ticker,Gap,Open\nAAA, 0.15, 10.5\n", encoding="utf-8")
    loaded = load_screener_csv(path)
    assert loaded.rows == [Candidate(symbol="AAA", gap_percent=0.15, opening_price=10.5)]
    assert loaded.dropped_rows == 0
