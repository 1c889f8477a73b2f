"""Core app configuration, database and error types."""

from guardroster.core.config import get_settings, settings
from guardroster.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
