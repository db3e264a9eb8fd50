"""Portfolio analytics, price override and cost preview endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.core.telemetry import portfolio_span
from trade_journal.db import Database
from trade_journal.records import PortfolioResult
from trade_journal.schemas import (
    ClosedTradeSchema,
    CostPreviewRequest,
    CostPreviewSchema,
    PortfolioResponse,
    PortfolioStatsSchema,
    PriceOverrideRequest,
    PriceOverrideSchema,
    StockSummarySchema,
)
from trade_journal.services import journal_store
from trade_journal.services.costs import FeeSchedule, compute_transaction_cost
from trade_journal.services.portfolio import compute_portfolio

from ..dependencies import get_fee_schedule


async def _compute(session: AsyncSession, fees: FeeSchedule) -> PortfolioResult:
    snapshot = await journal_store.load_snapshot(session)
    with portfolio_span(len(snapshot.trades)):
        return compute_portfolio(snapshot.capital, snapshot.trades, snapshot.price_overrides, fees=fees)


def get_portfolio_router(database: Database) -> APIRouter:
    router = APIRouter(prefix="/portfolio", tags=["portfolio"])

    @router.get("", response_model=PortfolioResponse)
    async def get_portfolio(
        session: AsyncSession = Depends(database.get_session),
        fees: FeeSchedule = Depends(get_fee_schedule),
    ) -> PortfolioResponse:
        result = await _compute(session, fees)
        return PortfolioResponse(
            stats=PortfolioStatsSchema(**asdict(result.stats)),
            summaries=[StockSummarySchema(**asdict(summary)) for summary in result.summaries],
        )

    @router.get("/closed-trades", response_model=list[ClosedTradeSchema])
    async def get_closed_trades(
        session: AsyncSession = Depends(database.get_session),
        fees: FeeSchedule = Depends(get_fee_schedule),
    ) -> list[ClosedTradeSchema]:
        result = await _compute(session, fees)
        return [ClosedTradeSchema(**asdict(closed)) for closed in result.closed_trades]

    @router.put("/prices/{stock_code}", response_model=PriceOverrideSchema)
    async def put_price(
        stock_code: str,
        payload: PriceOverrideRequest,
        session: AsyncSession = Depends(database.get_session),
    ) -> PriceOverrideSchema:
        normalized = stock_code.strip().upper()
        await journal_store.set_price_override(session, normalized, payload.price)
        return PriceOverrideSchema(stock_code=normalized, price=payload.price)

    @router.delete("/prices/{stock_code}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_price(stock_code: str, session: AsyncSession = Depends(database.get_session)) -> Response:
        normalized = stock_code.strip().upper()
        if not await journal_store.clear_price_override(session, normalized):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No manual price for {normalized}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.post("/cost", response_model=CostPreviewSchema)
    async def post_cost_preview(
        payload: CostPreviewRequest,
        fees: FeeSchedule = Depends(get_fee_schedule),
    ) -> CostPreviewSchema:
        cost = compute_transaction_cost(payload.price, payload.shares, payload.side, payload.is_etf, fees)
        return CostPreviewSchema(**asdict(cost))

    return router


__all__ = ["get_portfolio_router"]
