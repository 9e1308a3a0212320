"""Local "phase complete" notifications.

Each scheduled notification is a single-shot ``QTimer`` keyed by its
integer id; when it fires the message is shown through the system tray
(if one was given) and announced on :attr:`NotificationService.delivered`.

Every method is best-effort: failures are logged, never raised.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal
from PyQt6.QtWidgets import QSystemTrayIcon

logger = logging.getLogger(__name__)

_MAX_TIMER_MS = 2**31 - 1  # QTimer interval is a signed 32-bit int


class NotificationService(QObject):
    """Schedules, cancels and delivers local notifications.

    Signals
    -------
    delivered(id: int, title: str, body: str)
        Emitted when a scheduled notification fires.
    """

    delivered = pyqtSignal(int, str, str)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        tray: QSystemTrayIcon | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(parent)
        self._tray = tray
        self._now = now
        self._pending: dict[int, tuple[QTimer, str, str, datetime]] = {}
        self._granted: bool | None = None

    # ── public API ────────────────────────────────────────────────────

    def request_permissions(self) -> bool:
        """True when the host can display notification messages."""
        if self._granted:
            return True
        try:
            self._granted = bool(
                self._tray is not None
                and QSystemTrayIcon.isSystemTrayAvailable()
                and QSystemTrayIcon.supportsMessages()
            )
        except Exception:
            logger.exception("Notification permission error")
            self._granted = False
        if not self._granted:
            logger.info("Notifications unavailable; alerts will be signal-only")
        return self._granted

    def schedule_notification(
        self, notification_id: int, title: str, body: str, fire_at: datetime,
    ) -> None:
        """Arrange for a notification at *fire_at* (replaces same id)."""
        try:
            self.cancel_notification(notification_id)

            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.timeout.connect(partial(self._deliver, notification_id))
            self._pending[notification_id] = (timer, title, body, fire_at)
            delay_ms = self._arm(timer, fire_at)
            logger.debug(
                "Scheduled notification %s in %d ms", notification_id, delay_ms,
            )
        except Exception:
            logger.exception("Schedule notification error")
    def cancel_notification(self, notification_id: int) -> None:
        try:
            entry = self._pending.pop(notification_id, None)
            if entry is None:
                return
            timer = entry[0]
            timer.stop()
            timer.deleteLater()
            logger.debug("Cancelled notification %s", notification_id)
        except Exception:
            logger.exception("Cancel notification error")

    def get_pending(self) -> list[int]:
        return sorted(self._pending)

    def cancel_all_notifications(self) -> None:
        try:
            for notification_id in self.get_pending():
                self.cancel_notification(notification_id)
        except Exception:
            logger.exception("Cancel all notifications error")

    # ── internal ──────────────────────────────────────────────────────

    def _ms_until(self, fire_at: datetime) -> int:
        return max(0, int((fire_at - self._now()).total_seconds() * 1000))

    def _arm(self, timer: QTimer, fire_at: datetime) -> int:
        # Delays beyond the QTimer range are covered in chunks; _deliver
        # re-arms until fire_at is reached.
        delay_ms = self._ms_until(fire_at)
        timer.setInterval(min(_MAX_TIMER_MS, delay_ms))
        timer.start()
        return delay_ms

    def _deliver(self, notification_id: int) -> None:
        entry = self._pending.get(notification_id)
        if entry is None:
            return
        timer, title, body, fire_at = entry
        if self._ms_until(fire_at) > 0:
            self._arm(timer, fire_at)
            return

        del self._pending[notification_id]
        timer.stop()
        timer.deleteLater()
        logger.info("Notification %s: %s", notification_id, title)
        self.delivered.emit(notification_id, title, body)
        if self._tray is not None:
            try:
                self._tray.showMessage(title, body)
            except Exception:
                logger.exception("Show notification error")
