"""Wall-clock source for the timer engine.

The engine never reads the global clock directly; it is handed a
zero-argument callable returning milliseconds since the epoch.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in ms since the epoch."""
    return int(time.time() * 1000)


def ms_to_datetime(ms: int) -> datetime:
    """Local naive datetime for an epoch-ms timestamp."""
    return datetime.fromtimestamp(ms / 1000)


def format_remaining(ms: int) -> str:
    """Format milliseconds as ``M:SS`` (rounded up to the next second)."""
    seconds = -(-max(0, ms) // 1000)
    m, s = divmod(seconds, 60)
    return f"{m}:{s:02d}"


def format_duration(ms: int) -> str:
    """Whole minutes, e.g. ``25 min``."""
    return f"{ms // 60_000} min"
