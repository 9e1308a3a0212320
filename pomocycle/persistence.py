"""Map ``{settings, history, timer}`` to one JSON document and back.

The whole triple is written under a single key on every change (last
writer wins; no merging).  Loading is forgiving: an unreadable document
gives the defaults, a malformed field gives that field's default, and a
malformed history entry is dropped.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Optional, Protocol

from .settings import Settings
from .timer.models import Phase, Session, TimerState, TimerStatus

logger = logging.getLogger(__name__)

STORAGE_KEY = "pomodoro-storage"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...
    def clear(self) -> None: ...


@dataclass
class Snapshot:
    settings: Settings = field(default_factory=Settings)
    history: list[Session] = field(default_factory=list)
    timer: TimerState = field(default_factory=TimerState)


# ── field parsing ─────────────────────────────────────────────────────────


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_enum(kind, value: Any):
    try:
        return kind(value)
    except ValueError:
        return None


def parse_settings(data: Any) -> Settings:
    if not isinstance(data, dict):
        return Settings()
    defaults = Settings()
    values = {}
    for f in fields(Settings):
        default = getattr(defaults, f.name)
        raw = data.get(f.name, default)
        if isinstance(default, bool):
            ok = isinstance(raw, bool)
        elif isinstance(default, int):
            raw = _as_int(raw)
            ok = raw is not None
        else:
            ok = isinstance(raw, str)
        if not ok:
            logger.warning("Malformed setting %r; using default", f.name)
            raw = default
        values[f.name] = raw
    return Settings(**values)


def parse_session(data: Any) -> Optional[Session]:
    """Build a :class:`Session`, or ``None`` if a required field is bad."""
    if not isinstance(data, dict):
        return None
    session_id = data.get("id")
    if isinstance(session_id, int) and not isinstance(session_id, bool):
        session_id = str(session_id)
    start_time = _as_int(data.get("start_time"))
    duration = _as_int(data.get("duration"))
    phase = _as_enum(Phase, data.get("phase"))
    if (
        not isinstance(session_id, str) or not session_id
        or start_time is None or duration is None or phase is None
    ):
        return None

    completed = data.get("completed", False)
    end_time = _as_int(data.get("end_time"))
    if end_time is not None and end_time < start_time:
        end_time = None
    return Session(
        id=session_id,
        start_time=start_time,
        duration=duration,
        phase=phase,
        completed=completed if isinstance(completed, bool) else False,
        end_time=end_time,
    )


def parse_history(data: Any) -> list[Session]:
    if not isinstance(data, list):
        return []
    sessions = []
    for item in data:
        session = parse_session(item)
        if session is None:
            logger.warning("Dropping malformed history entry: %r", item)
            continue
        sessions.append(session)
    return sessions


def parse_timer(data: Any) -> TimerState:
    if not isinstance(data, dict):
        return TimerState()
    defaults = TimerState()

    status = _as_enum(TimerStatus, data.get("status")) or defaults.status
    phase = _as_enum(Phase, data.get("phase")) or defaults.phase
    current = data.get("current_session")
    session = parse_session(current) if current is not None else None

    remaining = _as_int(data.get("remaining_time"))
    if remaining is None or remaining < 0:
        remaining = defaults.remaining_time
    completed = _as_int(data.get("completed_work_sessions"))
    if completed is None or completed < 0:
        completed = defaults.completed_work_sessions

    return TimerState(
        status=status,
        current_session=session,
        remaining_time=remaining,
        phase=phase,
        completed_work_sessions=completed,
        paused_at=_as_int(data.get("paused_at")),
    )


# ── adapter ───────────────────────────────────────────────────────────────


class PersistenceAdapter:
    """Stateless bridge between the in-memory triple and a stored blob."""

    def __init__(self, storage: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    @staticmethod
    def dumps(
        settings: Settings,
        history: list[Session],
        timer: TimerState,
    ) -> str:
        return json.dumps(
            {
                "settings": settings.to_dict(),
                "history": [s.to_dict() for s in history],
                "timer": timer.to_dict(),
            },
            ensure_ascii=False,
        )

    @staticmethod
    def loads(blob: Optional[str]) -> Snapshot:
        if not blob:
            return Snapshot()
        try:
            data = json.loads(blob)
        except (TypeError, ValueError):
            logger.warning("Stored state is not valid JSON; using defaults")
            return Snapshot()
        if not isinstance(data, dict):
            logger.warning("Stored state is not an object; using defaults")
            return Snapshot()
        return Snapshot(
            settings=parse_settings(data.get("settings")),
            history=parse_history(data.get("history")),
            timer=parse_timer(data.get("timer")),
        )

    def save(
        self,
        settings: Settings,
        history: list[Session],
        timer: TimerState,
    ) -> None:
        self._storage.set(self._key, self.dumps(settings, history, timer))

    def load(self) -> Snapshot:
        return self.loads(self._storage.get(self._key))

    def clear(self) -> None:
        self._storage.remove(self._key)
