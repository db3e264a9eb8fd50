"""FIFO lot matching and average-cost position tracking.

Realized profit on each sale is measured against the oldest open lots (FIFO),
while the remaining open position is carried at average cost. The two bases
can drift apart for an instrument that was bought at several prices; the
position view exists for display and allocation, realized figures always come
from the lots.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import date
from typing import Deque, Dict, Iterable, List, Optional, Sequence

from trade_journal.records import ClosedTrade, OpenPosition, Trade, TradeSide
from trade_journal.services.costs import DEFAULT_FEE_SCHEDULE, FeeSchedule, compute_transaction_cost

logger = logging.getLogger(__name__)


@dataclass
class Lot:
    """An open purchase awaiting sale matching."""

    price: float
    shares: float
    date: date
    fee_per_share: float

    @property
    def cost_per_share(self) -> float:
        return self.price + self.fee_per_share


def sort_trades(trades: Iterable[Trade]) -> List[Trade]:
    """Order trades by execution timestamp, keeping input order on ties."""

    return sorted(trades, key=lambda trade: trade.timestamp)


def holding_days(entry: date, exit_: date) -> float:
    return float(max(1, (exit_ - entry).days))


class PositionBook:
    """Open quantity and average cost per instrument."""

    def __init__(self) -> None:
        self._positions: Dict[str, OpenPosition] = {}

    def get(self, stock_code: str) -> Optional[OpenPosition]:
        return self._positions.get(stock_code)

    def record_buy(self, trade: Trade, fee: float) -> OpenPosition:
        position = self._positions.get(trade.stock_code)
        if position is None:
            position = OpenPosition(
                stock_code=trade.stock_code,
                shares=0.0,
                avg_cost=0.0,
                total_cost=0.0,
                first_buy_date=trade.date,
                is_etf=trade.is_etf,
            )
            self._positions[trade.stock_code] = position
        position.total_cost += trade.price * trade.shares + fee
        position.shares += trade.shares
        position.avg_cost = position.total_cost / position.shares
        position.is_etf = trade.is_etf
        return position

    def record_sell(self, trade: Trade) -> Optional[OpenPosition]:
        position = self._positions.get(trade.stock_code)
        if position is None:
            return None
        remaining = position.shares - trade.shares
        if remaining <= 0:
            del self._positions[trade.stock_code]
            return None
        # Prorated at average cost, not at the FIFO basis of the sale.
        position.total_cost -= position.avg_cost * trade.shares
        position.shares = remaining
        return position


class FifoLedger:
    """Replays trades through per-instrument FIFO lot queues.

    A ledger lives for a single computation; build a new one per pass.
    """

    def __init__(self, fees: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> None:
        self._fees = fees
        self._queues: Dict[str, Deque[Lot]] = {}
        self.positions = PositionBook()
        self.closed_trades: List[ClosedTrade] = []

    def lots(self, stock_code: str) -> Sequence[Lot]:
        return tuple(self._queues.get(stock_code, ()))

    def open_lot_shares(self, stock_code: str) -> float:
        return sum(lot.shares for lot in self._queues.get(stock_code, ()))

    def apply(self, trade: Trade) -> Optional[ClosedTrade]:
        """Apply one trade; return the realized event for a SELL."""

        queue = self._queues.setdefault(trade.stock_code, deque())
        cost = compute_transaction_cost(trade.price, trade.shares, trade.side, trade.is_etf, self._fees)

        if trade.side is TradeSide.BUY:
            queue.append(
                Lot(
                    price=trade.price,
                    shares=trade.shares,
                    date=trade.date,
                    fee_per_share=cost.fee / trade.shares,
                )
            )
            self.positions.record_buy(trade, cost.fee)
            return None

        to_sell = trade.shares
        cost_basis = 0.0
        entry_date = trade.date
        while to_sell > 0 and queue:
            lot = queue[0]
            taken = min(to_sell, lot.shares)
            cost_basis += taken * lot.cost_per_share
            # Entry date is the last lot touched, which understates holding
            # time when one sale spans lots of different ages.
            entry_date = lot.date
            lot.shares -= taken
            to_sell -= taken
            if lot.shares == 0:
                queue.popleft()
        if to_sell > 0:
            logger.debug(
                "Sell of %s %s exceeds recorded inventory by %s shares",
                trade.shares,
                trade.stock_code,
                to_sell,
            )

        proceeds = cost.net_cash_effect
        realized = proceeds - cost_basis
        closed = ClosedTrade(
            stock_code=trade.stock_code,
            entry_date=entry_date,
            exit_date=trade.date,
            cost_basis=cost_basis,
            sell_proceeds=proceeds,
            realized_pl=realized,
            roi=realized / cost_basis if cost_basis > 0 else 0.0,
            holding_days=holding_days(entry_date, trade.date),
            phase=trade.phase,
        )
        self.closed_trades.append(closed)
        self.positions.record_sell(trade)
        return closed


def replay(trades: Iterable[Trade], fees: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> FifoLedger:
    """Build a ledger from the full trade history in execution order."""

    ledger = FifoLedger(fees)
    for trade in sort_trades(trades):
        ledger.apply(trade)
    return ledger


__all__ = [
    "Lot",
    "PositionBook",
    "FifoLedger",
    "replay",
    "sort_trades",
    "holding_days",
]
