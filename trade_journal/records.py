"""Domain records shared by the journal store and the portfolio engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, List


def midnight_timestamp(day: date) -> int:
    """Epoch milliseconds of midnight UTC on ``day``."""

    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp() * 1000)


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class TradePhase(str, Enum):
    """Strategy phase a trade was taken in."""

    TRIAL = "TRIAL"
    TREND = "TREND"
    DRAWDOWN = "DRAWDOWN"


@dataclass(frozen=True)
class Trade:
    """A single recorded buy or sell execution."""

    id: str
    stock_code: str
    date: date
    side: TradeSide
    price: float
    shares: float
    is_etf: bool = False
    phase: TradePhase = TradePhase.TREND
    note: str = ""
    timestamp: int = 0


@dataclass(frozen=True)
class JournalEntry:
    """A free-text reflection, optionally tied to an instrument."""

    id: str
    date: date
    content: str
    stock_code: str = ""
    timestamp: int = 0


@dataclass(frozen=True)
class ClosedTrade:
    """Realized result of one SELL matched against open lots."""

    stock_code: str
    entry_date: date
    exit_date: date
    cost_basis: float
    sell_proceeds: float
    realized_pl: float
    roi: float
    holding_days: float
    phase: TradePhase


@dataclass
class OpenPosition:
    """Remaining open quantity of an instrument, carried at average cost."""

    stock_code: str
    shares: float
    avg_cost: float
    total_cost: float
    first_buy_date: date
    is_etf: bool = False


@dataclass(frozen=True)
class StockSummary:
    stock_code: str
    shares_held: float
    total_invested_cost: float
    realized_pl: float
    realized_roi: float
    avg_holding_days: float
    annualized_roi: float
    allocation_percent: float
    current_price: float
    unrealized_pl: float


@dataclass(frozen=True)
class PortfolioStats:
    total_capital: float
    total_market_value: float
    cash_balance: float
    total_invested: float
    floating_pl: float
    realized_cumulative_pl: float
    total_roi_ytd: float
    total_roi_all_time: float
    max_drawdown: float
    win_rate: float
    avg_win_loss_ratio: float
    trade_count: int


@dataclass(frozen=True)
class PortfolioResult:
    """Everything one engine pass produces."""

    stats: PortfolioStats
    summaries: List[StockSummary]
    closed_trades: List[ClosedTrade]


@dataclass(frozen=True)
class JournalSnapshot:
    """Immutable view of the journal state handed to the engine and exporter."""

    capital: float
    trades: List[Trade] = field(default_factory=list)
    notes: List[JournalEntry] = field(default_factory=list)
    price_overrides: Dict[str, float] = field(default_factory=dict)


__all__ = [
    "midnight_timestamp",
    "TradeSide",
    "TradePhase",
    "Trade",
    "JournalEntry",
    "ClosedTrade",
    "OpenPosition",
    "StockSummary",
    "PortfolioStats",
    "PortfolioResult",
    "JournalSnapshot",
]
