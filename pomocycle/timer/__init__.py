"""Timer package."""

from .engine import (
    TimerEngine,
    TICK_INTERVAL_MS,
    AUTO_START_DELAY_MS,
    NOTIFICATION_TEXT,
)
from .models import Phase, Session, TimerState, TimerStatus

__all__ = [
    "TimerEngine",
    "TimerState",
    "TimerStatus",
    "Phase",
    "Session",
    "TICK_INTERVAL_MS",
    "AUTO_START_DELAY_MS",
    "NOTIFICATION_TEXT",
]
