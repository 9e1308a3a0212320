"""Completed-session history.

Newest first, unbounded, append-only apart from :meth:`clear`.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

from PyQt6.QtCore import QObject, pyqtSignal

from .timer.models import Session

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "pomodoro-history"


def export_filename(day: date | None = None) -> str:
    """``pomodoro-history-YYYY-MM-DD.json`` for *day* (default today)."""
    day = day or date.today()
    return f"{EXPORT_PREFIX}-{day.isoformat()}.json"


class SessionHistoryStore(QObject):
    """Owns the ordered list of past sessions.

    Signals
    -------
    changed()
        Emitted after ``add`` or ``clear``.
    """

    changed = pyqtSignal()

    def __init__(
        self,
        sessions: list[Session] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._sessions: list[Session] = list(sessions or [])

    @property
    def sessions(self) -> list[Session]:
        """A copy of the history, newest first."""
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def add(self, session: Session) -> None:
        self._sessions.insert(0, session)
        logger.debug("History += %s (%s)", session.id, session.phase.value)
        self.changed.emit()

    def clear(self) -> None:
        self._sessions = []
        logger.info("History cleared")
        self.changed.emit()

    def replace_all(self, sessions: list[Session]) -> None:
        self._sessions = list(sessions)
        self.changed.emit()

    def export(self) -> str:
        """Pretty-printed JSON array of every session, newest first."""
        return json.dumps(
            [s.to_dict() for s in self._sessions],
            indent=2,
            ensure_ascii=False,
        )

    def write_export(self, directory: Path, day: date | None = None) -> Path:
        """Write :meth:`export` to a dated file in *directory*."""
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / export_filename(day)
        path.write_text(self.export() + "\n", encoding="utf-8")
        logger.info("Exported %d sessions to %s", len(self._sessions), path)
        return path
