"""Capital settings and CSV import/export endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.core.telemetry import portfolio_span, record_import
from trade_journal.db import Database
from trade_journal.schemas import CapitalSchema, ImportSummarySchema
from trade_journal.services import csv_codec, journal_store
from trade_journal.services.costs import FeeSchedule
from trade_journal.services.portfolio import compute_portfolio

from ..dependencies import get_fee_schedule

logger = logging.getLogger(__name__)


def get_data_router(database: Database) -> APIRouter:
    router = APIRouter(tags=["data"])

    @router.get("/settings/capital", response_model=CapitalSchema)
    async def get_capital(session: AsyncSession = Depends(database.get_session)) -> CapitalSchema:
        return CapitalSchema(capital=await journal_store.get_capital(session))

    @router.put("/settings/capital", response_model=CapitalSchema)
    async def put_capital(
        payload: CapitalSchema,
        session: AsyncSession = Depends(database.get_session),
    ) -> CapitalSchema:
        try:
            capital = await journal_store.set_capital(session, payload.capital)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return CapitalSchema(capital=capital)

    @router.get("/data/export")
    async def export_journal(
        session: AsyncSession = Depends(database.get_session),
        fees: FeeSchedule = Depends(get_fee_schedule),
    ) -> Response:
        snapshot = await journal_store.load_snapshot(session)
        with portfolio_span(len(snapshot.trades)):
            result = compute_portfolio(snapshot.capital, snapshot.trades, snapshot.price_overrides, fees=fees)
        content = csv_codec.export_csv(snapshot, result.stats, result.summaries)
        filename = csv_codec.export_filename()
        return Response(
            content=content.encode("utf-8"),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @router.post("/data/import", response_model=ImportSummarySchema)
    async def import_journal(request: Request, session: AsyncSession = Depends(database.get_session)) -> ImportSummarySchema:
        raw = await request.body()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Import must be UTF-8 text") from exc
        imported = csv_codec.parse_csv(text)
        record_import(len(imported.trades) + len(imported.notes), imported.skipped_rows)
        await journal_store.replace_journal(session, imported.capital, imported.trades, imported.notes)
        logger.info("Imported journal from CSV (%d bytes)", len(raw))
        return ImportSummarySchema(
            trades=len(imported.trades),
            journal_entries=len(imported.notes),
            capital=imported.capital,
            skipped_rows=imported.skipped_rows,
        )

    return router


__all__ = ["get_data_router"]
