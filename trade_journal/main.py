"""Entrypoint for the trade journal FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from trade_journal.api.routes import get_api_router
from trade_journal.config import JournalSettings, get_settings
from trade_journal.core.logging import setup_logging
from trade_journal.core.telemetry import setup_telemetry
from trade_journal.db import Database

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: datetime


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database):
    await db.create_all()
    yield
    await db.dispose()


def create_app(db: Database | None = None, settings: JournalSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    database_instance = db or Database(settings.database_url)

    setup_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lambda app: _lifespan(app, database_instance),
    )
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_telemetry(app, settings, engine=database_instance.engine)
    app.include_router(get_api_router(database_instance))

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service=settings.app_name, timestamp=datetime.now())

    logger.info("Trade journal configuration", extra={"settings": settings.dict_for_logging()})
    return app


app = create_app()


__all__ = ["app", "create_app"]
