"""Portfolio calculation engine.

``compute_portfolio`` is a pure function of the capital baseline, the trade
history and the manual price overrides. Every call replays the full history;
nothing is cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from trade_journal.records import (
    ClosedTrade,
    OpenPosition,
    PortfolioResult,
    PortfolioStats,
    StockSummary,
    Trade,
    TradeSide,
)
from trade_journal.services.costs import DEFAULT_FEE_SCHEDULE, FeeSchedule, compute_transaction_cost
from trade_journal.services.ledger import replay, sort_trades

logger = logging.getLogger(__name__)

WIN_LOSS_RATIO_CAP = 100.0
DAYS_PER_YEAR = 365


@dataclass
class _RealizedTotals:
    total_pl: float = 0.0
    roi_sum: float = 0.0
    days_sum: float = 0.0
    count: int = 0

    def add(self, closed: ClosedTrade) -> None:
        self.total_pl += closed.realized_pl
        self.roi_sum += closed.roi
        self.days_sum += closed.holding_days
        self.count += 1


def resolve_current_price(
    stock_code: str,
    overrides: Mapping[str, float],
    trades_newest_first: Sequence[Trade],
    position: Optional[OpenPosition],
) -> float:
    """Manual override, then last traded price, then average cost, then zero."""

    override = overrides.get(stock_code)
    if override:
        return float(override)
    for trade in trades_newest_first:
        if trade.stock_code == stock_code:
            return trade.price
    if position is not None:
        return position.avg_cost
    return 0.0


def annualize(realized_roi: float, avg_holding_days: float) -> float:
    if avg_holding_days <= 0:
        return 0.0
    if realized_roi <= -1:
        # Total loss or worse; a negative base would compound to a complex number.
        return -1.0
    return (1 + realized_roi) ** (DAYS_PER_YEAR / max(avg_holding_days, 1)) - 1


def compile_summary(
    stock_code: str,
    position: Optional[OpenPosition],
    realized: _RealizedTotals,
    current_price: float,
    capital: float,
    fees: FeeSchedule,
) -> StockSummary:
    shares_held = position.shares if position else 0.0
    invested = position.total_cost if position else 0.0
    market_value = shares_held * current_price

    unrealized = 0.0
    if shares_held > 0:
        est_fee = fees.fee_for(market_value)
        est_tax = fees.tax_for(market_value, position.is_etf)
        unrealized = (market_value - est_fee - est_tax) - invested

    realized_roi = realized.roi_sum / realized.count if realized.count else 0.0
    avg_days = realized.days_sum / realized.count if realized.count else 0.0
    annualized = annualize(realized_roi, avg_days) if realized.count else 0.0

    return StockSummary(
        stock_code=stock_code,
        shares_held=shares_held,
        total_invested_cost=invested,
        realized_pl=realized.total_pl,
        realized_roi=realized_roi,
        avg_holding_days=avg_days,
        annualized_roi=annualized,
        allocation_percent=invested / capital * 100 if capital > 0 else 0.0,
        current_price=current_price,
        unrealized_pl=unrealized,
    )


def replay_cash(capital: float, trades: Iterable[Trade], fees: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> float:
    """Cash left after settling every trade against the starting capital."""

    cash = capital
    for trade in sort_trades(trades):
        net = compute_transaction_cost(trade.price, trade.shares, trade.side, trade.is_etf, fees).net_cash_effect
        if trade.side is TradeSide.BUY:
            cash -= net
        else:
            cash += net
    return cash


def max_drawdown_pct(capital: float, closed_trades: Iterable[ClosedTrade]) -> float:
    """Largest peak-to-trough decline of the realized equity curve, in percent.

    Floating P&L is not part of the curve.
    """

    peak = capital
    equity = capital
    worst = 0.0
    for closed in closed_trades:
        equity += closed.realized_pl
        if equity > peak:
            peak = equity
        if peak <= 0:
            continue
        drawdown = (peak - equity) / peak
        if drawdown > worst:
            worst = drawdown
    return worst * 100


def win_loss_ratio(closed_trades: Sequence[ClosedTrade]) -> float:
    wins = [t.realized_pl for t in closed_trades if t.realized_pl > 0]
    losses = [t.realized_pl for t in closed_trades if t.realized_pl <= 0]
    avg_win = sum(wins) / (len(wins) or 1)
    avg_loss = abs(sum(losses) / (len(losses) or 1))
    if avg_loss > 0:
        return avg_win / avg_loss
    return WIN_LOSS_RATIO_CAP if avg_win > 0 else 0.0


def compile_stats(
    capital: float,
    trades: Sequence[Trade],
    summaries: Sequence[StockSummary],
    closed_trades: Sequence[ClosedTrade],
    *,
    fees: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    as_of: Optional[date] = None,
) -> PortfolioStats:
    total_invested = sum(s.total_invested_cost for s in summaries)
    floating = sum(s.unrealized_pl for s in summaries)
    realized = sum(s.realized_pl for s in summaries)

    cash = replay_cash(capital, trades, fees)
    market_value = cash + sum(s.shares_held * s.current_price for s in summaries)

    year = (as_of or date.today()).year
    ytd_pl = sum(t.realized_pl for t in closed_trades if t.exit_date.year == year) + floating

    winners = sum(1 for t in closed_trades if t.realized_pl > 0)
    win_rate = winners / len(closed_trades) * 100 if closed_trades else 0.0

    return PortfolioStats(
        total_capital=capital,
        total_market_value=market_value,
        cash_balance=cash,
        total_invested=total_invested,
        floating_pl=floating,
        realized_cumulative_pl=realized,
        total_roi_ytd=ytd_pl / capital * 100 if capital > 0 else 0.0,
        total_roi_all_time=(market_value - capital) / capital * 100 if capital > 0 else 0.0,
        max_drawdown=max_drawdown_pct(capital, closed_trades),
        win_rate=win_rate,
        avg_win_loss_ratio=win_loss_ratio(closed_trades),
        trade_count=len(trades),
    )


def compute_portfolio(
    capital: float,
    trades: Iterable[Trade],
    price_overrides: Optional[Mapping[str, float]] = None,
    *,
    fees: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    as_of: Optional[date] = None,
) -> PortfolioResult:
    """Rebuild lots, summaries and portfolio statistics from scratch."""

    trades = list(trades)
    overrides = dict(price_overrides or {})
    ordered = sort_trades(trades)
    ledger = replay(ordered, fees)

    realized_by_code: Dict[str, _RealizedTotals] = {}
    for closed in ledger.closed_trades:
        realized_by_code.setdefault(closed.stock_code, _RealizedTotals()).add(closed)

    newest_first = ordered[::-1]
    summaries: List[StockSummary] = []
    for code in dict.fromkeys(trade.stock_code for trade in ordered):
        position = ledger.positions.get(code)
        summaries.append(
            compile_summary(
                code,
                position,
                realized_by_code.get(code, _RealizedTotals()),
                resolve_current_price(code, overrides, newest_first, position),
                capital,
                fees,
            )
        )

    stats = compile_stats(capital, trades, summaries, ledger.closed_trades, fees=fees, as_of=as_of)
    logger.debug(
        "Computed portfolio: %d trades, %d instruments, %d closed trades",
        len(trades),
        len(summaries),
        len(ledger.closed_trades),
    )
    return PortfolioResult(stats=stats, summaries=summaries, closed_trades=list(ledger.closed_trades))


__all__ = [
    "compute_portfolio",
    "compile_stats",
    "compile_summary",
    "resolve_current_price",
    "replay_cash",
    "max_drawdown_pct",
    "win_loss_ratio",
    "annualize",
]
