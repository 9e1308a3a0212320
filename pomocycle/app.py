"""Application core: builds the stores and engine, rehydrates, autosaves.

``PomoCycleApp`` is the one object a front end talks to.  It owns no
state of its own; settings, history and timer live in their stores, and
every change to any of them re-serializes the whole triple through the
:class:`~pomocycle.persistence.PersistenceAdapter`.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject

from .clock import Clock, system_clock
from .history import SessionHistoryStore
from .persistence import KeyValueStore, PersistenceAdapter
from .settings import Settings, SettingsStore
from .timer.engine import TimerEngine
from .timer.models import Session, TimerState

if TYPE_CHECKING:
    from .audio.sounds import SoundManager
    from .services.haptics import HapticsService
    from .services.notifications import NotificationService

logger = logging.getLogger(__name__)


class PomoCycleApp(QObject):
    """Wires settings, history, timer engine and persistence together."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        storage: KeyValueStore | None = None,
        clock: Clock = system_clock,
        notifications: NotificationService | None = None,
        audio: SoundManager | None = None,
        haptics: HapticsService | None = None,
        shift_deadline_on_resume: bool = False,
    ) -> None:
        super().__init__(parent)

        if storage is None:
            from .database.preferences import PreferenceStore
            storage = PreferenceStore()
        self._persistence = PersistenceAdapter(storage)
        self._notifications = notifications
        self._audio = audio

        snapshot = self._persistence.load()
        logger.info(
            "Loaded state: %d history entries, timer %s",
            len(snapshot.history), snapshot.timer.status.value,
        )

        self.settings = SettingsStore(snapshot.settings, parent=self)
        self.history = SessionHistoryStore(snapshot.history, parent=self)
        self.engine = TimerEngine(
            self.settings,
            self.history,
            clock=clock,
            notifications=notifications,
            audio=audio,
            haptics=haptics,
            shift_deadline_on_resume=shift_deadline_on_resume,
            parent=self,
        )

        self._initialize_platform()
        self.engine.restore(snapshot.timer)

        # ── autosave ──────────────────────────────────────────────────
        self.settings.changed.connect(self.save)
        self.history.changed.connect(self.save)
        self.engine.state_changed.connect(self.save)

    # ══════════════════════════════════════════════════════════════════
    #  TIMER
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        self.engine.start()

    def pause(self) -> None:
        self.engine.pause()

    def resume(self) -> None:
        self.engine.resume()

    def reset(self) -> None:
        self.engine.reset()

    @property
    def timer(self) -> TimerState:
        return self.engine.state

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS / HISTORY
    # ══════════════════════════════════════════════════════════════════

    def update_settings(self, **patch) -> Settings:
        return self.settings.update(**patch)

    def add_to_history(self, session: Session) -> None:
        self.history.add(session)

    def clear_history(self) -> None:
        self.history.clear()

    def export_history(self) -> str:
        return self.history.export()

    def write_export(self, directory: Path, day: date | None = None) -> Path:
        return self.history.write_export(directory, day)

    # ══════════════════════════════════════════════════════════════════
    #  PERSISTENCE
    # ══════════════════════════════════════════════════════════════════

    def save(self, *_args) -> None:
        """Write the full ``{settings, history, timer}`` document.

        Runs inside signal slots, so a failing store is logged and the
        timer carries on.
        """
        try:
            self._persistence.save(
                self.settings.settings,
                self.history.sessions,
                self.engine.state,
            )
        except Exception:
            logger.exception("Failed to persist state")

    def shutdown(self) -> None:
        """Final save before the event loop exits."""
        self.save()
        if self._audio is not None:
            self._audio.unload_all_sounds()
        logger.info("Shut down")

    # ── internal ──────────────────────────────────────────────────────

    def _initialize_platform(self) -> None:
        if self._audio is not None:
            try:
                self._audio.preload_alarm()
            except Exception:
                logger.exception("Failed to preload alarm")
        if self._notifications is not None:
            try:
                self._notifications.request_permissions()
            except Exception:
                logger.exception("Notification permission error")
