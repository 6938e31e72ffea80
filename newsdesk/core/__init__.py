"""Core app configuration, database and security primitives."""

from newsdesk.core.config import get_settings, settings
from newsdesk.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
