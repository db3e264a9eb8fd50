"""Review note endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.db import Database
from trade_journal.records import JournalEntry, midnight_timestamp
from trade_journal.schemas import JournalEntryRequest, JournalEntrySchema
from trade_journal.services import journal_store


def _to_entry(entry_id: str, payload: JournalEntryRequest) -> JournalEntry:
    return JournalEntry(
        id=entry_id,
        date=payload.date,
        content=payload.content,
        stock_code=payload.stock_code.strip().upper(),
        timestamp=payload.timestamp if payload.timestamp is not None else midnight_timestamp(payload.date),
    )


def _serialize(entry: JournalEntry) -> JournalEntrySchema:
    return JournalEntrySchema(
        id=entry.id,
        date=entry.date,
        content=entry.content,
        stock_code=entry.stock_code,
        timestamp=entry.timestamp,
    )


def get_journal_router(database: Database) -> APIRouter:
    router = APIRouter(prefix="/journal", tags=["journal"])

    @router.get("", response_model=list[JournalEntrySchema])
    async def get_entries(session: AsyncSession = Depends(database.get_session)) -> list[JournalEntrySchema]:
        return [_serialize(entry) for entry in await journal_store.list_notes(session)]

    @router.post("", response_model=JournalEntrySchema, status_code=status.HTTP_201_CREATED)
    async def post_entry(
        payload: JournalEntryRequest,
        session: AsyncSession = Depends(database.get_session),
    ) -> JournalEntrySchema:
        entry = _to_entry(journal_store.new_record_id(), payload)
        await journal_store.add_note(session, entry)
        return _serialize(entry)

    @router.put("/{entry_id}", response_model=JournalEntrySchema)
    async def put_entry(
        entry_id: str,
        payload: JournalEntryRequest,
        session: AsyncSession = Depends(database.get_session),
    ) -> JournalEntrySchema:
        entry = _to_entry(entry_id, payload)
        try:
            await journal_store.update_note(session, entry)
        except journal_store.JournalEntryNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return _serialize(entry)

    @router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entry(entry_id: str, session: AsyncSession = Depends(database.get_session)) -> Response:
        try:
            await journal_store.delete_note(session, entry_id)
        except journal_store.JournalEntryNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


__all__ = ["get_journal_router"]
