"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from trade_journal.config import JournalSettings
from trade_journal.services.costs import FeeSchedule


def get_app_settings(request: Request) -> JournalSettings:
    return request.app.state.settings


def get_fee_schedule(request: Request) -> FeeSchedule:
    return get_app_settings(request).fee_schedule()


__all__ = ["get_app_settings", "get_fee_schedule"]
