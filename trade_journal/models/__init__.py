"""Database model exports."""

from .journal import TRADE_PHASES, TRADE_SIDES, AccountSettings, JournalNote, PriceOverride, TradeRecord

__all__ = [
    "TradeRecord",
    "JournalNote",
    "PriceOverride",
    "AccountSettings",
    "TRADE_SIDES",
    "TRADE_PHASES",
]
