"""Pydantic schema exports."""

from .journal import JournalEntryRequest, JournalEntrySchema
from .portfolio import (
    CapitalSchema,
    ClosedTradeSchema,
    CostPreviewRequest,
    CostPreviewSchema,
    ImportSummarySchema,
    PortfolioResponse,
    PortfolioStatsSchema,
    PriceOverrideRequest,
    PriceOverrideSchema,
    StockSummarySchema,
)
from .trades import TradeCreateRequest, TradeSchema, TradeUpdateRequest

__all__ = [
    "TradeCreateRequest",
    "TradeUpdateRequest",
    "TradeSchema",
    "JournalEntryRequest",
    "JournalEntrySchema",
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
