"""Haptic feedback pulses.

Desktop hosts rarely have an actuator, so pulses go to an optional
``backend(kind, value)`` callable (e.g. a game-pad rumble bridge) and are
always logged.  Failures are swallowed.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ImpactStyle(Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class NotificationType(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class HapticsService:
    def __init__(self, backend: Optional[Callable[[str, str], None]] = None) -> None:
        self._backend = backend

    def light(self) -> None:
        self._impact(ImpactStyle.LIGHT)

    def medium(self) -> None:
        self._impact(ImpactStyle.MEDIUM)

    def heavy(self) -> None:
        self._impact(ImpactStyle.HEAVY)

    def selection(self) -> None:
        self._pulse("selection", "tick")

    def notification(self, kind: str | NotificationType) -> None:
        try:
            kind = NotificationType(kind)
        except ValueError:
            logger.warning("Unknown haptic notification type %r", kind)
            return
        self._pulse("notification", kind.value)

    def _impact(self, style: ImpactStyle) -> None:
        self._pulse("impact", style.value)

    def _pulse(self, kind: str, value: str) -> None:
        logger.debug("Haptic %s: %s", kind, value)
        if self._backend is None:
            return
        try:
            self._backend(kind, value)
        except Exception:
            logger.exception("Haptics %s error", kind)
