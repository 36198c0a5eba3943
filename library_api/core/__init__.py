"""Core app configuration, database bootstrap and shared context."""

from library_api.core.config import Settings, get_settings
from library_api.core.context import AppContext, StartupState, get_db

__all__ = ["AppContext", "Settings", "StartupState", "get_db", "get_settings"]
