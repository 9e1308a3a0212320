"""Value types shared by the timer engine, history and persistence.

Times are integer milliseconds since the epoch; durations are integer
milliseconds.
"""

from __future__ import annotations

import zlib
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    WORK = "work"
    BREAK = "break"

    @property
    def opposite(self) -> "Phase":
        return Phase.BREAK if self is Phase.WORK else Phase.WORK


class TimerStatus(Enum):
    """Idle / Running / Paused.

    A single enum instead of an ``is_running`` + ``is_paused`` pair, so
    "running and paused at once" cannot be represented.
    """

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


# ── records ───────────────────────────────────────────────────────────────


@dataclass
class Session:
    """One concrete run of a phase.

    ``duration`` is fixed when the session is created; later settings
    edits never touch an in-flight session.  Only ``completed`` and
    ``end_time`` change afterwards.
    """

    id: str
    start_time: int
    duration: int
    phase: Phase
    completed: bool = False
    end_time: Optional[int] = None

    @property
    def deadline(self) -> int:
        """Absolute instant (ms) at which the session completes."""
        return self.start_time + self.duration

    @property
    def notification_id(self) -> int:
        """Numeric id for the platform notification API."""
        if self.id.isdigit():
            return int(self.id)
        return zlib.crc32(self.id.encode("utf-8"))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["phase"] = self.phase.value
        if self.end_time is None:
            del data["end_time"]
        return data


@dataclass
class TimerState:
    """Everything the engine owns.  Mutated only by ``TimerEngine``."""

    status: TimerStatus = TimerStatus.IDLE
    current_session: Optional[Session] = None
    remaining_time: int = 0  # ms
    phase: Phase = Phase.WORK  # phase of the current or next session
    completed_work_sessions: int = 0
    paused_at: Optional[int] = None  # set only while PAUSED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "current_session": (
                self.current_session.to_dict()
                if self.current_session is not None else None
            ),
            "remaining_time": self.remaining_time,
            "phase": self.phase.value,
            "completed_work_sessions": self.completed_work_sessions,
            "paused_at": self.paused_at,
        }
