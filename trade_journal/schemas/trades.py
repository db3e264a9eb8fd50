"""Pydantic schemas for trade records."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator

from trade_journal.records import TradePhase, TradeSide


class TradeBase(BaseModel):
    stock_code: str = Field(..., min_length=1, max_length=20, examples=["2330"])
    date: date
    side: TradeSide
    price: float = Field(..., gt=0)
    shares: float = Field(..., gt=0)
    is_etf: bool = False
    phase: TradePhase = TradePhase.TREND
    note: str = ""
    timestamp: int | None = Field(
        default=None,
        description="Execution time in epoch milliseconds; defaults to midnight UTC of the trade date.",
    )

    @field_validator("stock_code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not normalized:
            raise ValueError("Stock code must not be empty")
        return normalized


class TradeCreateRequest(TradeBase):
    id: str | None = Field(default=None, max_length=64, description="Client-supplied identifier")


class TradeUpdateRequest(TradeBase):
    pass


class TradeSchema(BaseModel):
    id: str
    stock_code: str
    date: date
    side: TradeSide
    price: float
    shares: float
    is_etf: bool
    phase: TradePhase
    note: str
    timestamp: int
    gross_value: float
    fee: float
    tax: float
    net_cash_effect: float


__all__ = ["TradeCreateRequest", "TradeUpdateRequest", "TradeSchema"]
