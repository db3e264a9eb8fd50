"""Pydantic schemas for portfolio analytics responses."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from trade_journal.records import TradePhase, TradeSide


class PortfolioStatsSchema(BaseModel):
    total_capital: float
    total_market_value: float
    cash_balance: float
    total_invested: float
    floating_pl: float
    realized_cumulative_pl: float
    total_roi_ytd: float = Field(..., description="Year-to-date return in percent")
    total_roi_all_time: float = Field(..., description="All-time return in percent")
    max_drawdown: float = Field(..., description="Realized-equity drawdown in percent")
    win_rate: float
    avg_win_loss_ratio: float
    trade_count: int


class StockSummarySchema(BaseModel):
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


class PortfolioResponse(BaseModel):
    stats: PortfolioStatsSchema
    summaries: list[StockSummarySchema]


class ClosedTradeSchema(BaseModel):
    stock_code: str
    entry_date: date
    exit_date: date
    cost_basis: float
    sell_proceeds: float
    realized_pl: float
    roi: float
    holding_days: float
    phase: TradePhase


class PriceOverrideRequest(BaseModel):
    price: float = Field(..., gt=0)


class PriceOverrideSchema(BaseModel):
    stock_code: str
    price: float


class CostPreviewRequest(BaseModel):
    price: float = Field(..., gt=0)
    shares: float = Field(..., gt=0)
    side: TradeSide
    is_etf: bool = False


class CostPreviewSchema(BaseModel):
    gross_value: float
    fee: float
    tax: float
    net_cash_effect: float


class CapitalSchema(BaseModel):
    capital: float = Field(..., ge=0)


class ImportSummarySchema(BaseModel):
    trades: int
    journal_entries: int
    capital: float
    skipped_rows: int


__all__ = [
    "PortfolioStatsSchema",
    "StockSummarySchema",
    "PortfolioResponse",
    "ClosedTradeSchema",
    "PriceOverrideRequest",
    "PriceOverrideSchema",
    "CostPreviewRequest",
    "CostPreviewSchema",
    "CapitalSchema",
    "ImportSummarySchema",
]
