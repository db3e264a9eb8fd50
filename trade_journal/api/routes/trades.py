"""Trade record endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.db import Database
from trade_journal.records import Trade, midnight_timestamp
from trade_journal.schemas import TradeCreateRequest, TradeSchema, TradeUpdateRequest
from trade_journal.services import journal_store
from trade_journal.services.costs import FeeSchedule, compute_transaction_cost

from ..dependencies import get_fee_schedule


def serialize_trade(trade: Trade, fees: FeeSchedule) -> TradeSchema:
    cost = compute_transaction_cost(trade.price, trade.shares, trade.side, trade.is_etf, fees)
    return TradeSchema(
        id=trade.id,
        stock_code=trade.stock_code,
        date=trade.date,
        side=trade.side,
        price=trade.price,
        shares=trade.shares,
        is_etf=trade.is_etf,
        phase=trade.phase,
        note=trade.note,
        timestamp=trade.timestamp,
        gross_value=cost.gross_value,
        fee=cost.fee,
        tax=cost.tax,
        net_cash_effect=cost.net_cash_effect,
    )


def _to_trade(trade_id: str, payload: TradeCreateRequest | TradeUpdateRequest) -> Trade:
    return Trade(
        id=trade_id,
        stock_code=payload.stock_code,
        date=payload.date,
        side=payload.side,
        price=payload.price,
        shares=payload.shares,
        is_etf=payload.is_etf,
        phase=payload.phase,
        note=payload.note,
        timestamp=payload.timestamp if payload.timestamp is not None else midnight_timestamp(payload.date),
    )


def get_trades_router(database: Database) -> APIRouter:
    router = APIRouter(prefix="/trades", tags=["trades"])

    @router.get("", response_model=list[TradeSchema])
    async def get_trades(
        session: AsyncSession = Depends(database.get_session),
        fees: FeeSchedule = Depends(get_fee_schedule),
    ) -> list[TradeSchema]:
        trades = await journal_store.list_trades(session)
        return [serialize_trade(trade, fees) for trade in trades]

    @router.post("", response_model=TradeSchema, status_code=status.HTTP_201_CREATED)
    async def post_trade(
        payload: TradeCreateRequest,
        session: AsyncSession = Depends(database.get_session),
        fees: FeeSchedule = Depends(get_fee_schedule),
    ) -> TradeSchema:
        trade = _to_trade(payload.id or journal_store.new_record_id(), payload)
        try:
            await journal_store.add_trade(session, trade)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        return serialize_trade(trade, fees)

    @router.put("/{trade_id}", response_model=TradeSchema)
    async def put_trade(
        trade_id: str,
        payload: TradeUpdateRequest,
        session: AsyncSession = Depends(database.get_session),
        fees: FeeSchedule = Depends(get_fee_schedule),
    ) -> TradeSchema:
        trade = _to_trade(trade_id, payload)
        try:
            await journal_store.update_trade(session, trade)
        except journal_store.TradeNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return serialize_trade(trade, fees)

    @router.delete("/{trade_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_trade(
        trade_id: str,
        session: AsyncSession = Depends(database.get_session),
    ) -> Response:
        try:
            await journal_store.delete_trade(session, trade_id)
        except journal_store.TradeNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


__all__ = ["get_trades_router", "serialize_trade"]
