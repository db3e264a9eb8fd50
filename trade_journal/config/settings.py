"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

from trade_journal.services.costs import (
    FEE_DISCOUNT,
    FEE_RATE,
    TAX_RATE_ETF,
    TAX_RATE_STOCK,
    FeeSchedule,
)

DEFAULT_CAPITAL = 1_000_000.0
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./trade_journal.db"


class JournalSettings(BaseSettings):
    """Configuration options for the trade journal service."""

    app_name: str = Field(default="Trade Journal")
    database_url: str = Field(default=DEFAULT_DATABASE_URL, description="SQLAlchemy async database URL.")
    log_level: str = Field(default="INFO")

    default_capital: float = Field(
        default=DEFAULT_CAPITAL,
        ge=0,
        description="Capital baseline used until the user sets one.",
    )
    fee_rate: float = Field(default=FEE_RATE, ge=0, description="Broker commission rate.")
    fee_discount: float = Field(default=FEE_DISCOUNT, ge=0, description="Negotiated commission discount factor.")
    stock_tax_rate: float = Field(default=TAX_RATE_STOCK, ge=0)
    etf_tax_rate: float = Field(default=TAX_RATE_ETF, ge=0)

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:4200"])

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="trade-journal")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_prefix = "JOURNAL_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    def fee_schedule(self) -> FeeSchedule:
        return FeeSchedule(
            fee_rate=self.fee_rate,
            fee_discount=self.fee_discount,
            stock_tax_rate=self.stock_tax_rate,
            etf_tax_rate=self.etf_tax_rate,
        )

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"database_url"}
        return {k: ("***" if k in hidden and "@" in str(v) else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> JournalSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return JournalSettings(**overrides)
    return JournalSettings()


__all__ = [
    "JournalSettings",
    "DEFAULT_CAPITAL",
    "DEFAULT_DATABASE_URL",
    "get_settings",
]
