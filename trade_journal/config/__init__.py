"""Configuration package for the trade journal service."""

from .settings import DEFAULT_CAPITAL, JournalSettings, get_settings

__all__ = ["DEFAULT_CAPITAL", "JournalSettings", "get_settings"]
