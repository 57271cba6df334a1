"""Screener CSV loading."""

from __future__ import annotations

from pathlib import Path

import pandas as pd  # type: ignore[import-untyped]

from opg_screener.types import Candidate, ScreenerLoad
from opg_screener.utils.logging import get_logger

_COLUMNS = ["symbol", "gap_percent", "opening_price"]
_NUMERIC_COLUMNS = ["gap_percent", "opening_price"]


class ScreenerLoadError(Exception):
    """Raised when the screener export cannot be read at all."""


def load_screener_csv(path: Path) -> ScreenerLoad:
    """Load a screener export into candidate rows.

    The header row is skipped and the first three columns are read as
    symbol, gap percent and opening price whatever their header names are.
    Rows with a non-numeric or infinite gap or opening price, a non-positive
    opening price, or a gap at or below -100% are dropped and counted.
    Leading spaces before a value are tolerated.
    """
    logger = get_logger("opg_screener.data.screener")
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except FileNotFoundError as exc:
        raise ScreenerLoadError(f"screener_file_not_found: {path}") from exc
    except pd.errors.EmptyDataError:
        logger.warning("screener_empty", path=str(path))
        return ScreenerLoad(rows=[], dropped_rows=0)
    except (OSError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise ScreenerLoadError(f"screener_unreadable: {exc}") from exc

    return normalize_screener(df)


def normalize_screener(df: pd.DataFrame) -> ScreenerLoad:
    """Coerce a raw screener frame into candidates, counting malformed rows."""
    if df.shape[1] < len(_COLUMNS):
        raise ScreenerLoadError(f"screener_needs_{len(_COLUMNS)}_columns: got {df.shape[1]}")

    normalized = df.iloc[:, : len(_COLUMNS)].copy()
    normalized.columns = _COLUMNS
    normalized["symbol"] = normalized["symbol"].astype(str)
    for col in _NUMERIC_COLUMNS:
        normalized[col] = pd.to_numeric(normalized[col], errors="coerce")

    total = len(normalized)
    normalized[_NUMERIC_COLUMNS] = normalized[_NUMERIC_COLUMNS].replace(
        [float("inf"), float("-inf")], float("nan")
    )
    normalized = normalized.dropna(subset=_NUMERIC_COLUMNS)
    # rows that cannot be sized: no price, or a gap implying a non-positive prior close
    sizable = (normalized["opening_price"] > 0) & (normalized["gap_percent"] > -1)
    normalized = normalized[sizable].reset_index(drop=True)
    rows = [
        Candidate(
            symbol=str(record.symbol),
            gap_percent=float(record.gap_percent),
            opening_price=float(record.opening_price),
        )
        for record in normalized.itertuples(index=False)
    ]
    return ScreenerLoad(rows=rows, dropped_rows=total - len(rows))
