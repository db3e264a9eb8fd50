"""Trade, journal note, price override and account tables."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import BigInteger, Boolean, Date, DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from trade_journal.db.base import Base

TRADE_SIDES = ("BUY", "SELL")
TRADE_PHASES = ("TRIAL", "TREND", "DRAWDOWN")


class TradeRecord(Base):
    __tablename__ = "trade"

    # Insertion sequence breaks timestamp ties in the engine's replay order.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    trade_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    stock_code: Mapped[str] = mapped_column(String(20), index=True)
    date: Mapped[date] = mapped_column(Date)
    side: Mapped[str] = mapped_column(Enum(*TRADE_SIDES, name="trade_side"))
    price: Mapped[float] = mapped_column(Float)
    shares: Mapped[float] = mapped_column(Float)
    is_etf: Mapped[bool] = mapped_column(Boolean, default=False)
    phase: Mapped[str] = mapped_column(Enum(*TRADE_PHASES, name="trade_phase"), default="TREND")
    note: Mapped[str] = mapped_column(Text, default="")
    # Epoch milliseconds overflow a 32-bit INTEGER.
    timestamp: Mapped[int] = mapped_column(BigInteger)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class JournalNote(Base):
    __tablename__ = "journal_note"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    stock_code: Mapped[str] = mapped_column(String(20), default="")
    date: Mapped[date] = mapped_column(Date)
    content: Mapped[str] = mapped_column(Text)
    # Epoch milliseconds overflow a 32-bit INTEGER.
    timestamp: Mapped[int] = mapped_column(BigInteger)


class PriceOverride(Base):
    __tablename__ = "price_override"

    stock_code: Mapped[str] = mapped_column(String(20), primary_key=True)
    price: Mapped[float] = mapped_column(Float)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )


class AccountSettings(Base):
    """Single row holding the capital baseline."""

    __tablename__ = "account_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    capital: Mapped[float] = mapped_column(Float)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow
    )
