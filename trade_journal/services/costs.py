"""Brokerage fee and transaction tax calculation."""

from __future__ import annotations

import math
from dataclasses import dataclass

from trade_journal.records import TradeSide

FEE_RATE = 0.001425
FEE_DISCOUNT = 0.3
TAX_RATE_STOCK = 0.003
TAX_RATE_ETF = 0.001


@dataclass(frozen=True)
class FeeSchedule:
    """Broker commission and securities transaction tax rates."""

    fee_rate: float = FEE_RATE
    fee_discount: float = FEE_DISCOUNT
    stock_tax_rate: float = TAX_RATE_STOCK
    etf_tax_rate: float = TAX_RATE_ETF

    def fee_for(self, gross_value: float) -> float:
        # Brokers truncate the commission, they do not round it.
        return math.floor(gross_value * self.fee_rate * self.fee_discount)

    def tax_for(self, gross_value: float, is_etf: bool) -> float:
        rate = self.etf_tax_rate if is_etf else self.stock_tax_rate
        return math.floor(gross_value * rate)


DEFAULT_FEE_SCHEDULE = FeeSchedule()


@dataclass(frozen=True)
class TransactionCost:
    gross_value: float
    fee: float
    tax: float
    net_cash_effect: float


def compute_transaction_cost(
    price: float,
    shares: float,
    side: TradeSide | str,
    is_etf: bool,
    fees: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> TransactionCost:
    """Return the gross value, fee, tax and net cash effect of a trade.

    Inputs are not validated; non-positive prices or share counts are the
    caller's responsibility.
    """

    side = TradeSide(side)
    gross_value = price * shares
    fee = fees.fee_for(gross_value)
    if side is TradeSide.SELL:
        tax = fees.tax_for(gross_value, is_etf)
        net = gross_value - fee - tax
    else:
        tax = 0
        net = gross_value + fee
    return TransactionCost(gross_value=gross_value, fee=fee, tax=tax, net_cash_effect=net)


__all__ = [
    "FEE_RATE",
    "FEE_DISCOUNT",
    "TAX_RATE_STOCK",
    "TAX_RATE_ETF",
    "FeeSchedule",
    "DEFAULT_FEE_SCHEDULE",
    "TransactionCost",
    "compute_transaction_cost",
]
