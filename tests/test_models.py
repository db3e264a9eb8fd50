"""Table definitions must hold epoch-millisecond timestamps on every backend."""

from __future__ import annotations

from datetime import date

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from trade_journal.models import JournalNote, TradeRecord
from trade_journal.records import midnight_timestamp

INT32_MAX = 2_147_483_647


def _postgres_ddl(table) -> str:
    return str(CreateTable(table).compile(dialect=postgresql.dialect()))


def test_timestamps_exceed_32_bit_range():
    assert midnight_timestamp(date(2024, 1, 2)) > INT32_MAX


def test_trade_timestamp_is_bigint_on_postgres():
    assert "timestamp BIGINT" in _postgres_ddl(TradeRecord.__table__)


def test_journal_note_timestamp_is_bigint_on_postgres():
    assert "timestamp BIGINT" in _postgres_ddl(JournalNote.__table__)
