"""Gap trade sizing under a fixed risk budget."""

from __future__ import annotations

import math

from opg_screener.types import RiskPolicy, TradePlan


class SizingError(ValueError):
    """Raised when a gap cannot produce a finite trade plan."""


def size_position(gap_percent: float, opening_price: float, policy: RiskPolicy) -> TradePlan:
    """Build entry/stop/target levels and share count for one gap.

    The prior close is backed out of the gap, a fraction of the gap is taken
    as the profit distance and the stop sits the same distance on the other
    side of the open. Shares are the number whose stop distance fits the
    policy's risk budget.
    """
    if gap_percent == -1.0:
        raise SizingError("gap_of_minus_100_percent")

    implied_prior_close = opening_price / (1.0 + gap_percent)
    gap_value = implied_prior_close - opening_price
    profit_from_gap = policy.profit_capture * gap_value

    stop_loss = opening_price - profit_from_gap
    take_profit = opening_price + profit_from_gap

    risk_per_share = abs(stop_loss - opening_price)
    if risk_per_share == 0.0:
        raise SizingError("zero_stop_distance")
    if not math.isfinite(risk_per_share):
        raise SizingError("non_finite_stop_distance")
    shares = max(0, math.floor(policy.max_risk_budget / risk_per_share))

    expected_profit = abs(opening_price - take_profit) * shares

    return TradePlan(
        entry_price=round_half_away(opening_price),
        stop_loss_price=round_half_away(stop_loss),
        take_profit_price=round_half_away(take_profit),
        shares=shares,
        expected_profit=round_half_away(expected_profit),
    )


def round_half_away(value: float, ndigits: int = 2) -> float:
    """Round half away from zero (round() rounds half to even)."""
    scale = 10**ndigits
    return math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale
