"""Portfolio summary and statistics tests."""

from __future__ import annotations

from datetime import date

import pytest

from trade_journal import compute_portfolio
from trade_journal.records import ClosedTrade, Trade, TradePhase, TradeSide, midnight_timestamp
from trade_journal.services.costs import FeeSchedule
from trade_journal.services.portfolio import annualize, max_drawdown_pct, win_loss_ratio

CAPITAL = 1_000_000


def _trade(trade_id, side, price, shares, day, *, code="2330", is_etf=False, timestamp=None):
    return Trade(
        id=trade_id,
        stock_code=code,
        date=day,
        side=TradeSide(side),
        price=price,
        shares=shares,
        is_etf=is_etf,
        timestamp=midnight_timestamp(day) if timestamp is None else timestamp,
    )


def _closed(realized_pl, exit_day=date(2024, 6, 1)):
    return ClosedTrade(
        stock_code="2330",
        entry_date=date(2024, 1, 1),
        exit_date=exit_day,
        cost_basis=10_000,
        sell_proceeds=10_000 + realized_pl,
        realized_pl=realized_pl,
        roi=realized_pl / 10_000,
        holding_days=30,
        phase=TradePhase.TREND,
    )


def _round_trip():
    return [
        _trade("b1", "BUY", 100, 1000, date(2024, 1, 2)),
        _trade("s1", "SELL", 110, 500, date(2024, 2, 1)),
    ]


def test_annualize_floors_losses_beyond_total_at_minus_one():
    assert annualize(-1.0, 30) == -1.0
    assert annualize(-1.5, 30) == -1.0
    assert annualize(0.0, 0) == 0.0


def test_costs_exceeding_gross_value_keep_annualized_roi_real():
    punitive = FeeSchedule(fee_rate=1.0, fee_discount=2.0)
    result = compute_portfolio(CAPITAL, _round_trip(), {}, fees=punitive, as_of=date(2024, 12, 31))
    [summary] = result.summaries
    assert summary.realized_roi < -1
    assert isinstance(summary.annualized_roi, float)
    assert summary.annualized_roi == -1.0

def test_zero_trades():
    result = compute_portfolio(CAPITAL, [], {})
    stats = result.stats
    assert result.summaries == []
    assert result.closed_trades == []
    assert stats.cash_balance == CAPITAL
    assert stats.total_market_value == CAPITAL
    assert stats.floating_pl == 0
    assert stats.realized_cumulative_pl == 0
    assert stats.total_roi_all_time == 0
    assert stats.total_roi_ytd == 0
    assert stats.max_drawdown == 0
    assert stats.win_rate == 0
    assert stats.avg_win_loss_ratio == 0
    assert stats.trade_count == 0


def test_round_trip_summary_and_stats():
    result = compute_portfolio(CAPITAL, _round_trip(), {}, as_of=date(2024, 12, 31))
    [summary] = result.summaries
    assert summary.stock_code == "2330"
    assert summary.shares_held == 500
    assert summary.total_invested_cost == pytest.approx(50_021)
    assert summary.realized_pl == pytest.approx(4_791)
    assert summary.current_price == 110
    # 55000 market value less 23 fee and 165 tax, against 50021 invested.
    assert summary.unrealized_pl == pytest.approx(4_791)
    assert summary.avg_holding_days == 30
    assert summary.realized_roi == pytest.approx(4_791 / 50_021)
    assert summary.annualized_roi == pytest.approx((1 + 4_791 / 50_021) ** (365 / 30) - 1)
    assert summary.allocation_percent == pytest.approx(5.0021)

    stats = result.stats
    assert stats.cash_balance == pytest.approx(CAPITAL - 100_042 + 54_812)
    assert stats.total_market_value == pytest.approx(stats.cash_balance + 55_000)
    assert stats.total_roi_all_time == pytest.approx((stats.total_market_value - CAPITAL) / CAPITAL * 100)
    assert stats.total_roi_ytd == pytest.approx((4_791 + 4_791) / CAPITAL * 100)
    assert stats.win_rate == 100
    assert stats.avg_win_loss_ratio == 100
    assert stats.trade_count == 2


def test_ytd_only_counts_exits_in_current_year():
    result = compute_portfolio(CAPITAL, _round_trip(), {}, as_of=date(2025, 3, 1))
    assert result.stats.total_roi_ytd == pytest.approx(result.stats.floating_pl / CAPITAL * 100)


def test_manual_price_drives_unrealized_pl():
    trades = [_trade("b1", "BUY", 100, 1000, date(2024, 1, 2))]
    result = compute_portfolio(CAPITAL, trades, {"2330": 110})
    [summary] = result.summaries
    assert summary.current_price == 110
    # 110000 - floor(47.025) - floor(330) - 100042
    assert summary.unrealized_pl == pytest.approx(9_581)
    assert summary.allocation_percent == pytest.approx(10.0042)
    assert result.stats.total_market_value == pytest.approx(CAPITAL - 100_042 + 110_000)


def test_etf_position_uses_etf_exit_tax():
    trades = [_trade("b1", "BUY", 100, 1000, date(2024, 1, 2), code="0050", is_etf=True)]
    [summary] = compute_portfolio(CAPITAL, trades, {"0050": 110}).summaries
    assert summary.unrealized_pl == pytest.approx(110_000 - 47 - 110 - 100_042)


def test_price_resolution_falls_back_to_latest_trade():
    trades = [
        _trade("late", "BUY", 12, 100, date(2024, 1, 5)),
        _trade("early", "BUY", 10, 100, date(2024, 1, 1)),
    ]
    # A zero override counts as unset.
    [summary] = compute_portfolio(CAPITAL, trades, {"2330": 0}).summaries
    assert summary.current_price == 12


def test_summaries_follow_first_trade_order():
    trades = [
        _trade("b2", "BUY", 50, 10, date(2024, 1, 3), code="2317"),
        _trade("b1", "BUY", 100, 10, date(2024, 1, 1), code="2330"),
        _trade("s1", "SELL", 110, 10, date(2024, 1, 4), code="2330"),
    ]
    codes = [s.stock_code for s in compute_portfolio(CAPITAL, trades, {}).summaries]
    assert codes == ["2330", "2317"]


def test_closed_instrument_keeps_realized_history():
    trades = [
        _trade("b1", "BUY", 10, 100, date(2024, 1, 1)),
        _trade("s1", "SELL", 12, 100, date(2024, 1, 11)),
    ]
    [summary] = compute_portfolio(CAPITAL, trades, {}).summaries
    assert summary.shares_held == 0
    assert summary.total_invested_cost == 0
    assert summary.unrealized_pl == 0
    assert summary.allocation_percent == 0
    assert summary.avg_holding_days == 10
    assert summary.realized_pl == pytest.approx(1_200 - 0 - 3 - 1_000)


def test_realized_sums_match_across_levels():
    trades = [
        _trade("a1", "BUY", 100, 1000, date(2024, 1, 2)),
        _trade("a2", "SELL", 90, 400, date(2024, 2, 1)),
        _trade("a3", "SELL", 120, 300, date(2024, 3, 1)),
        _trade("c1", "BUY", 50, 2000, date(2024, 1, 5), code="2317"),
        _trade("c2", "SELL", 55, 2500, date(2024, 4, 1), code="2317"),
    ]
    result = compute_portfolio(CAPITAL, trades, {})
    for summary in result.summaries:
        realized = sum(t.realized_pl for t in result.closed_trades if t.stock_code == summary.stock_code)
        assert summary.realized_pl == pytest.approx(realized)
    assert result.stats.realized_cumulative_pl == pytest.approx(sum(s.realized_pl for s in result.summaries))
    assert result.stats.win_rate == pytest.approx(2 / 3 * 100)


def test_identical_inputs_give_identical_output():
    trades = _round_trip() + [_trade("b2", "BUY", 105, 200, date(2024, 2, 1))]
    first = compute_portfolio(CAPITAL, trades, {"2330": 108}, as_of=date(2024, 6, 1))
    second = compute_portfolio(CAPITAL, list(trades), {"2330": 108}, as_of=date(2024, 6, 1))
    assert first == second


def test_non_positive_capital_disables_ratios():
    result = compute_portfolio(0, _round_trip(), {})
    assert result.stats.total_roi_all_time == 0
    assert result.stats.total_roi_ytd == 0
    assert result.summaries[0].allocation_percent == 0


def test_max_drawdown_tracks_realized_equity_only():
    closed = [_closed(1_000), _closed(-3_000), _closed(500)]
    # Peak 101000 after the first trade, trough 98000 after the second.
    assert max_drawdown_pct(100_000, closed) == pytest.approx(3_000 / 101_000 * 100)
    assert max_drawdown_pct(100_000, closed) == pytest.approx(2.97, abs=0.01)


def test_max_drawdown_without_losses_is_zero():
    assert max_drawdown_pct(100_000, [_closed(100), _closed(200)]) == 0


def test_win_loss_ratio():
    assert win_loss_ratio([_closed(1_000), _closed(-3_000), _closed(500)]) == pytest.approx(750 / 3_000)
    assert win_loss_ratio([_closed(1_000), _closed(200)]) == 100
    assert win_loss_ratio([_closed(-100), _closed(-300)]) == 0
    assert win_loss_ratio([]) == 0
