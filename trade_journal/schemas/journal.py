"""Pydantic schemas for journal notes."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class JournalEntryRequest(BaseModel):
    date: date
    content: str = Field(..., min_length=1)
    stock_code: str = Field(default="", max_length=20)
    timestamp: int | None = None


class JournalEntrySchema(BaseModel):
    id: str
    date: date
    content: str
    stock_code: str
    timestamp: int


__all__ = ["JournalEntryRequest", "JournalEntrySchema"]
