"""Database engine and session helpers."""

from .database import Base, Database

__all__ = ["Base", "Database"]
