"""Deterministic gap candidate filtering."""

from __future__ import annotations

from collections.abc import Iterable

from opg_screener.types import Candidate

GAP_THRESHOLD = 0.10


def is_material_gap(gap_percent: float) -> bool:
    """Whether a gap is large enough to trade."""
    return abs(gap_percent) >= GAP_THRESHOLD


def filter_candidates(rows: Iterable[Candidate]) -> list[Candidate]:
    """Keep rows whose absolute gap reaches the threshold, order preserved."""
    return [row for row in rows if is_material_gap(row.gap_percent)]
