"""Durable key-value storage on top of the SQLite database.

Values are opaque strings; callers do their own encoding.  Storage
errors are logged and treated as "nothing stored" so a broken database
never takes the app down.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from .db import get_session
from .models import Preference

logger = logging.getLogger(__name__)


class PreferenceStore:
    """get / set / remove / clear of string blobs keyed by name."""

    def get(self, key: str) -> str | None:
        try:
            with get_session() as db:
                row = db.get(Preference, key)
                return row.value if row is not None else None
        except SQLAlchemyError:
            logger.exception("Storage get error for %r", key)
            return None

    def set(self, key: str, value: str) -> None:
        try:
            with get_session() as db:
                row = db.get(Preference, key)
                if row is None:
                    db.add(Preference(key=key, value=value))
                else:
                    row.value = value
        except SQLAlchemyError:
            logger.exception("Storage set error for %r", key)

    def remove(self, key: str) -> None:
        try:
            with get_session() as db:
                row = db.get(Preference, key)
                if row is not None:
                    db.delete(row)
        except SQLAlchemyError:
            logger.exception("Storage remove error for %r", key)

    def clear(self) -> None:
        try:
            with get_session() as db:
                db.execute(delete(Preference))
        except SQLAlchemyError:
            logger.exception("Storage clear error")
