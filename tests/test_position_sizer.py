from __future__ import annotations

import math

import pytest

from opg_screener.config import Settings
from opg_screener.risk.sizing import SizingError, round_half_away, size_position
from opg_screener.types import RiskPolicy

_POLICY = RiskPolicy(account_balance=10_000.0, loss_tolerance=0.2, profit_capture=0.8)


def test_size_position_reference_scenario() -> None:
    plan = size_position(0.15, 100.0, _POLICY)
    assert plan.entry_price == 100.0
    assert plan.stop_loss_price == pytest.approx(110.43)
    assert plan.take_profit_price == pytest.approx(89.57)
    assert plan.shares == 191
    assert plan.expected_profit == pytest.approx(1993.04)


def test_size_position_down_gap_keeps_sign_convention() -> None:
    plan = size_position(-0.5, 50.0, _POLICY)
    # prior close 100, profit distance +40 above the open
    assert plan.stop_loss_price == pytest.approx(10.0)
    assert plan.take_profit_price == pytest.approx(90.0)
    assert plan.shares == 50
    assert plan.expected_profit == pytest.approx(2000.0)


def test_size_position_is_deterministic() -> None:
    first = size_position(0.123, 37.77, _POLICY)
    second = size_position(0.123, 37.77, _POLICY)
    assert first == second


def test_shares_non_negative_and_profit_non_negative() -> None:
    for gap in (-0.5, -0.1, 0.1, 0.35, 2.0):
        for price in (0.5, 12.34, 250.0):
            plan = size_position(gap, price, _POLICY)
            assert isinstance(plan.shares, int)
            assert plan.shares >= 0
            if plan.shares > 0:
                assert plan.expected_profit >= 0


def test_zero_risk_budget_sizes_to_zero_shares() -> None:
    policy = RiskPolicy(account_balance=10_000.0, loss_tolerance=0.0, profit_capture=0.8)
    plan = size_position(0.15, 100.0, policy)
    assert plan.shares == 0
    assert plan.expected_profit == 0.0


def test_degenerate_gaps_raise() -> None:
    with pytest.raises(SizingError):
        size_position(0.0, 100.0, _POLICY)
    with pytest.raises(SizingError):
        size_position(-1.0, 100.0, _POLICY)
    with pytest.raises(SizingError):
        size_position(0.2, float("inf"), _POLICY)


def test_round_half_away_from_zero() -> None:
    assert round_half_away(0.125) == 0.13
    assert round_half_away(-0.125) == -0.13
    assert math.isclose(round_half_away(1.0), 1.0)


def test_settings_build_policy() -> None:
    settings = Settings(account_balance=5_000.0, loss_tolerance=0.1, profit_capture=0.5)
    policy = settings.risk_policy()
    assert policy.max_risk_budget == pytest.approx(500.0)
    assert settings.max_risk_per_trade == pytest.approx(500.0)


def test_settings_are_built_once_per_process(monkeypatch: object) -> None:
    from opg_screener import config

    monkeypatch.setattr(config, "_settings", None)
    assert config.get_settings() is config.get_settings()
    assert not hasattr(config, "reload_settings")
