"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import Preference
from .preferences import PreferenceStore

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "Preference",
    "PreferenceStore",
]
