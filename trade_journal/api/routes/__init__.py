"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from trade_journal.db import Database

from .data import get_data_router
from .journal import get_journal_router
from .portfolio import get_portfolio_router
from .trades import get_trades_router


def get_api_router(database: Database) -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(get_trades_router(database))
    api_router.include_router(get_journal_router(database))
    api_router.include_router(get_portfolio_router(database))
    api_router.include_router(get_data_router(database))
    return api_router


__all__ = ["get_api_router"]
