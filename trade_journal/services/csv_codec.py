"""CSV export and import of the journal.

An export is a human-readable report (portfolio figures and per-instrument
results) followed by the machine-readable sections that an import restores:
``TRADE`` rows, ``JOURNAL`` rows and a trailing ``CAPITAL`` row. Import reads
only those three record types and silently skips rows that are too short.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence

from trade_journal.config import DEFAULT_CAPITAL
from trade_journal.records import (
    JournalEntry,
    JournalSnapshot,
    PortfolioStats,
    StockSummary,
    Trade,
    TradePhase,
    TradeSide,
    midnight_timestamp,
)
from trade_journal.schemas.trades import TradeCreateRequest

logger = logging.getLogger(__name__)

BOM = "\ufeff"

TRADE_HEADER = ["RecordType", "ID", "Type", "StockCode", "Date", "Price", "Shares", "IsETF", "Phase", "Note", "Timestamp"]
JOURNAL_HEADER = ["RecordType", "ID", "Date", "StockCode", "Content", "Timestamp"]
SUMMARY_HEADER = [
    "StockCode",
    "SharesHeld",
    "InvestedCost",
    "CurrentPrice",
    "UnrealizedPL",
    "RealizedPL",
    "RealizedROI%",
    "Allocation%",
    "AvgHoldingDays",
    "AnnualizedROI%",
]

STATS_SECTION = "[Portfolio Performance]"
SUMMARY_SECTION = "[Stock Performance]"
TRADE_SECTION = "[Trade Records]"
JOURNAL_SECTION = "[Review Notes]"


@dataclass
class ImportedJournal:
    capital: float = DEFAULT_CAPITAL
    trades: List[Trade] = field(default_factory=list)
    notes: List[JournalEntry] = field(default_factory=list)
    skipped_rows: int = 0


def format_number(value: float) -> str:
    """Render a number the way a spreadsheet expects: integral values without ``.0``."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def export_filename(today: Optional[date] = None) -> str:
    return f"trade-journal-{(today or date.today()):%Y%m%d}.csv"


def _stats_rows(stats: PortfolioStats) -> list[list[str]]:
    return [
        ["Item", "Value"],
        ["Total capital", format_number(stats.total_capital)],
        ["Total market value", format_number(stats.total_market_value)],
        ["Cash balance", format_number(stats.cash_balance)],
        ["Floating P&L", format_number(stats.floating_pl)],
        ["Realized cumulative P&L", format_number(stats.realized_cumulative_pl)],
        ["YTD return", f"{format_number(stats.total_roi_ytd)}%"],
        ["All-time return", f"{format_number(stats.total_roi_all_time)}%"],
        ["Max drawdown", f"{format_number(stats.max_drawdown)}%"],
        ["Win rate", f"{format_number(stats.win_rate)}%"],
        ["Win/loss ratio", format_number(stats.avg_win_loss_ratio)],
    ]


def _summary_row(summary: StockSummary) -> list[str]:
    return [
        summary.stock_code,
        format_number(summary.shares_held),
        format_number(summary.total_invested_cost),
        format_number(summary.current_price),
        format_number(summary.unrealized_pl),
        format_number(summary.realized_pl),
        f"{summary.realized_roi * 100:.2f}",
        f"{summary.allocation_percent:.2f}",
        f"{summary.avg_holding_days:.1f}",
        f"{summary.annualized_roi * 100:.2f}",
    ]


def _trade_row(trade: Trade) -> list[str]:
    return [
        "TRADE",
        trade.id,
        trade.side.value,
        trade.stock_code,
        trade.date.isoformat(),
        format_number(trade.price),
        format_number(trade.shares),
        "TRUE" if trade.is_etf else "FALSE",
        trade.phase.value,
        trade.note or "",
        str(trade.timestamp),
    ]


def _journal_row(entry: JournalEntry) -> list[str]:
    return [
        "JOURNAL",
        entry.id,
        entry.date.isoformat(),
        entry.stock_code or "",
        entry.content or "",
        str(entry.timestamp),
    ]


def export_csv(
    snapshot: JournalSnapshot,
    stats: Optional[PortfolioStats] = None,
    summaries: Optional[Sequence[StockSummary]] = None,
) -> str:
    """Serialize the journal (and optionally its computed report) to CSV text."""

    buffer = io.StringIO()
    buffer.write(BOM)
    plain = csv.writer(buffer, lineterminator="\n")
    quoted = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_ALL)

    if stats is not None:
        buffer.write(f"{STATS_SECTION}\n")
        plain.writerows(_stats_rows(stats))
        buffer.write("\n")

    if summaries:
        buffer.write(f"{SUMMARY_SECTION}\n")
        plain.writerow(SUMMARY_HEADER)
        plain.writerows(_summary_row(summary) for summary in summaries)
        buffer.write("\n")

    buffer.write(f"{TRADE_SECTION}\n")
    plain.writerow(TRADE_HEADER)
    quoted.writerows(_trade_row(trade) for trade in snapshot.trades)
    buffer.write("\n")

    buffer.write(f"{JOURNAL_SECTION}\n")
    plain.writerow(JOURNAL_HEADER)
    quoted.writerows(_journal_row(entry) for entry in snapshot.notes)

    buffer.write(f"\nCAPITAL,CONFIG,{format_number(snapshot.capital)},,,,,,,,\n")
    return buffer.getvalue()


def _parse_trade(row: list[str]) -> Trade:
    parsed_date = date.fromisoformat(row[4].strip())
    timestamp = row[10].strip()
    # Schema validation rejects unknown sides and phases and non-positive amounts.
    request = TradeCreateRequest(
        id=row[1],
        side=TradeSide(row[2].strip() or TradeSide.BUY.value),
        stock_code=row[3],
        date=parsed_date,
        price=float(row[5]),
        shares=float(row[6]),
        is_etf=row[7].strip() == "TRUE",
        phase=TradePhase(row[8].strip() or TradePhase.TREND.value),
        note=row[9],
        timestamp=int(float(timestamp)) if timestamp else midnight_timestamp(parsed_date),
    )
    return Trade(
        id=request.id or "",
        stock_code=request.stock_code,
        date=request.date,
        side=request.side,
        price=request.price,
        shares=request.shares,
        is_etf=request.is_etf,
        phase=request.phase,
        note=request.note,
        timestamp=request.timestamp or 0,
    )


def _parse_journal(row: list[str]) -> JournalEntry:
    parsed_date = date.fromisoformat(row[2].strip())
    timestamp = row[5].strip()
    return JournalEntry(
        id=row[1],
        date=parsed_date,
        stock_code=row[3].strip().upper(),
        content=row[4],
        timestamp=int(float(timestamp)) if timestamp else midnight_timestamp(parsed_date),
    )


def _read_rows(text: str) -> Iterable[list[str]]:
    if text.startswith(BOM):
        text = text[1:]
    for row in csv.reader(io.StringIO(text, newline="")):
        if row and row[0].strip():
            yield row


def parse_csv(text: str) -> ImportedJournal:
    """Restore trades, journal notes and capital from exported CSV text."""

    imported = ImportedJournal()
    trade_ids: set[str] = set()
    note_ids: set[str] = set()

    for line_no, row in enumerate(_read_rows(text), start=1):
        record_type = row[0].strip()
        try:
            if record_type == "TRADE":
                if len(row) < len(TRADE_HEADER):
                    imported.skipped_rows += 1
                    continue
                trade = _parse_trade(row)
                if not trade.id or trade.id in trade_ids:
                    raise ValueError(f"missing or duplicate trade id {trade.id!r}")
                trade_ids.add(trade.id)
                imported.trades.append(trade)
            elif record_type == "JOURNAL":
                if len(row) < len(JOURNAL_HEADER):
                    imported.skipped_rows += 1
                    continue
                entry = _parse_journal(row)
                if not entry.id or entry.id in note_ids:
                    raise ValueError(f"missing or duplicate journal id {entry.id!r}")
                note_ids.add(entry.id)
                imported.notes.append(entry)
            elif record_type == "CAPITAL" and len(row) > 2:
                capital = float(row[2])
                if capital < 0:
                    raise ValueError("negative capital")
                imported.capital = capital
        except ValueError as exc:
            logger.warning("Skipping unreadable %s row %d: %s", record_type, line_no, exc)
            imported.skipped_rows += 1

    logger.info(
        "Parsed CSV import: %d trades, %d journal entries, %d rows skipped",
        len(imported.trades),
        len(imported.notes),
        imported.skipped_rows,
    )
    return imported


__all__ = [
    "ImportedJournal",
    "TRADE_HEADER",
    "JOURNAL_HEADER",
    "export_csv",
    "export_filename",
    "format_number",
    "parse_csv",
]
