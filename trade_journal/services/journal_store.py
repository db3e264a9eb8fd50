"""Persistence for trades, journal notes, price overrides and capital."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.config import get_settings
from trade_journal.models import AccountSettings, JournalNote, PriceOverride, TradeRecord
from trade_journal.records import JournalEntry, JournalSnapshot, Trade, TradePhase, TradeSide

logger = logging.getLogger(__name__)

_ACCOUNT_ROW_ID = 1


class TradeNotFoundError(LookupError):
    pass


class JournalEntryNotFoundError(LookupError):
    pass


def new_record_id() -> str:
    return uuid4().hex


def _to_trade(record: TradeRecord) -> Trade:
    return Trade(
        id=record.trade_id,
        stock_code=record.stock_code,
        date=record.date,
        side=TradeSide(record.side),
        price=record.price,
        shares=record.shares,
        is_etf=record.is_etf,
        phase=TradePhase(record.phase),
        note=record.note or "",
        timestamp=record.timestamp,
    )


def _to_entry(note: JournalNote) -> JournalEntry:
    return JournalEntry(
        id=note.entry_id,
        date=note.date,
        content=note.content,
        stock_code=note.stock_code or "",
        timestamp=note.timestamp,
    )


def _apply_trade(record: TradeRecord, trade: Trade) -> None:
    record.stock_code = trade.stock_code
    record.date = trade.date
    record.side = trade.side.value
    record.price = trade.price
    record.shares = trade.shares
    record.is_etf = trade.is_etf
    record.phase = trade.phase.value
    record.note = trade.note
    record.timestamp = trade.timestamp


def _new_trade_record(trade: Trade) -> TradeRecord:
    record = TradeRecord(trade_id=trade.id)
    _apply_trade(record, trade)
    return record


def _new_note(entry: JournalEntry) -> JournalNote:
    return JournalNote(
        entry_id=entry.id,
        stock_code=entry.stock_code,
        date=entry.date,
        content=entry.content,
        timestamp=entry.timestamp,
    )


async def _get_trade_record(session: AsyncSession, trade_id: str) -> TradeRecord:
    result = await session.execute(select(TradeRecord).where(TradeRecord.trade_id == trade_id))
    record = result.scalars().first()
    if record is None:
        raise TradeNotFoundError(f"Trade {trade_id} not found")
    return record


async def _get_note(session: AsyncSession, entry_id: str) -> JournalNote:
    result = await session.execute(select(JournalNote).where(JournalNote.entry_id == entry_id))
    note = result.scalars().first()
    if note is None:
        raise JournalEntryNotFoundError(f"Journal entry {entry_id} not found")
    return note


# Trades


async def list_trades(session: AsyncSession) -> list[Trade]:
    """Return trades in the order they were recorded."""

    result = await session.execute(select(TradeRecord).order_by(TradeRecord.seq))
    return [_to_trade(record) for record in result.scalars().all()]


async def add_trade(session: AsyncSession, trade: Trade) -> Trade:
    """Record a trade and make its price the instrument's current price."""

    existing = await session.execute(select(TradeRecord.seq).where(TradeRecord.trade_id == trade.id))
    if existing.first() is not None:
        raise ValueError(f"Trade {trade.id} already exists")
    session.add(_new_trade_record(trade))
    await _upsert_price(session, trade.stock_code, trade.price)
    await session.commit()
    logger.info("Recorded %s %s x%s @ %s", trade.side.value, trade.stock_code, trade.shares, trade.price)
    return trade


async def update_trade(session: AsyncSession, trade: Trade) -> Trade:
    """Replace the stored trade carrying the same id."""

    record = await _get_trade_record(session, trade.id)
    _apply_trade(record, trade)
    await session.commit()
    return trade


async def delete_trade(session: AsyncSession, trade_id: str) -> None:
    record = await _get_trade_record(session, trade_id)
    await session.delete(record)
    await session.commit()
    logger.info("Deleted trade %s", trade_id)


# Journal notes


async def list_notes(session: AsyncSession) -> list[JournalEntry]:
    """Return journal notes, newest first."""

    result = await session.execute(
        select(JournalNote).order_by(JournalNote.timestamp.desc(), JournalNote.seq.desc())
    )
    return [_to_entry(note) for note in result.scalars().all()]


async def add_note(session: AsyncSession, entry: JournalEntry) -> JournalEntry:
    existing = await session.execute(select(JournalNote.seq).where(JournalNote.entry_id == entry.id))
    if existing.first() is not None:
        raise ValueError(f"Journal entry {entry.id} already exists")
    session.add(_new_note(entry))
    await session.commit()
    return entry


async def update_note(session: AsyncSession, entry: JournalEntry) -> JournalEntry:
    note = await _get_note(session, entry.id)
    note.date = entry.date
    note.content = entry.content
    note.stock_code = entry.stock_code
    note.timestamp = entry.timestamp
    await session.commit()
    return entry


async def delete_note(session: AsyncSession, entry_id: str) -> None:
    note = await _get_note(session, entry_id)
    await session.delete(note)
    await session.commit()


# Prices and capital


async def _upsert_price(session: AsyncSession, stock_code: str, price: float) -> None:
    override = await session.get(PriceOverride, stock_code)
    if override is None:
        session.add(PriceOverride(stock_code=stock_code, price=price))
    else:
        override.price = price


async def list_price_overrides(session: AsyncSession) -> dict[str, float]:
    result = await session.execute(select(PriceOverride))
    return {row.stock_code: row.price for row in result.scalars().all()}


async def set_price_override(session: AsyncSession, stock_code: str, price: float) -> None:
    await _upsert_price(session, stock_code, price)
    await session.commit()


async def clear_price_override(session: AsyncSession, stock_code: str) -> bool:
    """Drop a manual price; return whether one existed."""

    override = await session.get(PriceOverride, stock_code)
    if override is None:
        return False
    await session.delete(override)
    await session.commit()
    return True


async def get_capital(session: AsyncSession) -> float:
    row = await session.get(AccountSettings, _ACCOUNT_ROW_ID)
    if row is None:
        return get_settings().default_capital
    return row.capital


async def _store_capital(session: AsyncSession, capital: float) -> None:
    row = await session.get(AccountSettings, _ACCOUNT_ROW_ID)
    if row is None:
        session.add(AccountSettings(id=_ACCOUNT_ROW_ID, capital=capital))
    else:
        row.capital = capital


async def set_capital(session: AsyncSession, capital: float) -> float:
    if capital < 0:
        raise ValueError("Capital must not be negative")
    await _store_capital(session, capital)
    await session.commit()
    return capital


# Snapshots


async def load_snapshot(session: AsyncSession) -> JournalSnapshot:
    """Read the complete journal state for one engine pass or export."""

    return JournalSnapshot(
        capital=await get_capital(session),
        trades=await list_trades(session),
        notes=await list_notes(session),
        price_overrides=await list_price_overrides(session),
    )


async def replace_journal(
    session: AsyncSession,
    capital: float,
    trades: Sequence[Trade],
    notes: Iterable[JournalEntry],
) -> None:
    """Swap all trades and notes for imported ones; price overrides are kept."""

    await session.execute(delete(TradeRecord))
    await session.execute(delete(JournalNote))
    session.add_all(_new_trade_record(trade) for trade in trades)
    session.add_all(_new_note(entry) for entry in notes)
    await _store_capital(session, capital)
    await session.commit()
    logger.info("Replaced journal with %d imported trades", len(trades))


__all__ = [
    "TradeNotFoundError",
    "JournalEntryNotFoundError",
    "new_record_id",
    "list_trades",
    "add_trade",
    "update_trade",
    "delete_trade",
    "list_notes",
    "add_note",
    "update_note",
    "delete_note",
    "list_price_overrides",
    "set_price_override",
    "clear_price_override",
    "get_capital",
    "set_capital",
    "load_snapshot",
    "replace_journal",
]
