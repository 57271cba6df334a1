"""Shared domain types for the gap screening pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class RiskPolicy:
    """Process-wide sizing policy, fixed at startup."""

    account_balance: float
    loss_tolerance: float
    profit_capture: float

    @property
    def max_risk_budget(self) -> float:
        return self.account_balance * self.loss_tolerance


@dataclass(frozen=True, slots=True)
class Candidate:
    """One screener row: a symbol with its opening gap."""

    symbol: str
    gap_percent: float
    opening_price: float


@dataclass(frozen=True, slots=True)
class TradePlan:
    """Entry/stop/target levels and size for one gap trade."""

    entry_price: float
    stop_loss_price: float
    take_profit_price: float
    shares: int
    expected_profit: float


@dataclass(frozen=True, slots=True)
class NewsItem:
    """One news headline, kept verbatim."""

    published_at: datetime
    headline: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "published_at": self.published_at.isoformat(),
            "headline": self.headline,
        }


@dataclass(frozen=True, slots=True)
class Selection:
    """A candidate with its trade plan and recent news."""

    symbol: str
    plan: TradePlan
    news: tuple[NewsItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON-ready record, plan fields inlined."""
        return {
            "symbol": self.symbol,
            "entry_price": self.plan.entry_price,
            "shares": self.plan.shares,
            "take_profit_price": self.plan.take_profit_price,
            "stop_loss_price": self.plan.stop_loss_price,
            "expected_profit": self.plan.expected_profit,
            "news": [item.to_dict() for item in self.news],
        }


@dataclass(slots=True)
class ScreenerLoad:
    """Parsed screener rows plus the count of rows dropped as malformed."""

    rows: list[Candidate]
    dropped_rows: int = 0


@dataclass(slots=True)
class EnrichmentBatch:
    """Joined fan-out output, one selection per dispatched candidate."""

    selections: list[Selection] = field(default_factory=list)
    failed_symbols: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RunResult:
    """Outcome of one screening run."""

    status: str
    loaded: int = 0
    dropped_rows: int = 0
    candidates: int = 0
    selections: list[Selection] = field(default_factory=list)
    news_failures: list[str] = field(default_factory=list)
    output_path: Path | None = None
    elapsed_ms: float = 0.0
