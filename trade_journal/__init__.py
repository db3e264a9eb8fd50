"""Trading journal with a FIFO portfolio calculation engine."""

from .records import (
    ClosedTrade,
    JournalEntry,
    JournalSnapshot,
    OpenPosition,
    PortfolioResult,
    PortfolioStats,
    StockSummary,
    Trade,
    TradePhase,
    TradeSide,
)
from .services.costs import FeeSchedule, TransactionCost, compute_transaction_cost
from .services.portfolio import compute_portfolio

__all__ = [
    "Trade",
    "TradeSide",
    "TradePhase",
    "JournalEntry",
    "JournalSnapshot",
    "ClosedTrade",
    "OpenPosition",
    "StockSummary",
    "PortfolioStats",
    "PortfolioResult",
    "FeeSchedule",
    "TransactionCost",
    "compute_transaction_cost",
    "compute_portfolio",
]
