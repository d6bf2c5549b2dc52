"""Core: settings, database sessions, token security and HTTP middleware."""

from nhatroso.core.config import Settings, get_settings, settings
from nhatroso.core.database import SessionLocal, get_db

__all__ = ["Settings", "SessionLocal", "get_settings", "settings", "get_db"]
