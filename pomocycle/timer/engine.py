"""Timer state machine for PomoCycle.

States
------
IDLE          No countdown.  ``phase`` says what the next session will be.
RUNNING       Countdown advancing; the ticker is armed.
PAUSED        Countdown frozen; no ticker.

Transitions
-----------
IDLE | PAUSED → RUNNING     (start, always a fresh session)
RUNNING → PAUSED            (pause)
PAUSED → RUNNING            (resume, same session)
RUNNING → IDLE, phase flips (tick reaches the deadline → complete_session)
Any → IDLE                  (reset, phase kept)

Countdown
---------
Remaining time is never decremented.  Every tick recomputes it as
``session.duration - (now - session.start_time)``, so missed ticks
(sleep, a stalled event loop) correct themselves on the next one.

Pause accounting
----------------
By default the deadline is *not* moved by a pause: time spent paused
still counts against the session, and the notification rescheduled on
resume fires at the original ``start_time + duration``.  Pass
``shift_deadline_on_resume=True`` to exclude paused time instead; resume
then moves the session's ``start_time`` forward by the paused interval
(the session keeps its id).

Side effects
------------
Notifications, sound and haptics are best-effort.  Every call goes
through :meth:`TimerEngine._safely`, which logs and swallows failures so
they never reach the timer state.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..clock import Clock, ms_to_datetime, system_clock
from .models import Phase, Session, TimerState, TimerStatus

if TYPE_CHECKING:
    from ..audio.sounds import AudioService
    from ..history import SessionHistoryStore
    from ..services.haptics import HapticsService
    from ..services.notifications import NotificationService
    from ..settings import SettingsStore

logger = logging.getLogger(__name__)


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 1000
AUTO_START_DELAY_MS = 1000  # let completion effects settle first

NOTIFICATION_TEXT: dict[Phase, tuple[str, str]] = {
    Phase.WORK: ("Work Session Complete!", "Time for a break! 🎉"),
    Phase.BREAK: ("Break Time!", "Ready to get back to work? 💪"),
}


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Work/break countdown with history, notifications and feedback.

    Signals
    -------
    state_changed(state: TimerState)
        Emitted after every mutation, ticks included.  Carries a copy.
    status_changed(status: TimerStatus)
        Emitted on IDLE / RUNNING / PAUSED transitions.
    ticked(remaining_ms: int)
        Emitted on every tick while RUNNING.
    phase_changed(phase: Phase)
        Emitted when a completion flips the phase.
    session_completed(session: Session)
        Emitted with the finished (completed=True) session.
    """

    state_changed = pyqtSignal(object)
    status_changed = pyqtSignal(object)
    ticked = pyqtSignal(int)
    phase_changed = pyqtSignal(object)
    session_completed = pyqtSignal(object)

    def __init__(
        self,
        settings: SettingsStore,
        history: SessionHistoryStore,
        *,
        clock: Clock = system_clock,
        notifications: NotificationService | None = None,
        audio: AudioService | None = None,
        haptics: HapticsService | None = None,
        shift_deadline_on_resume: bool = False,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)

        # ── collaborators ─────────────────────────────────────────────
        self._settings = settings
        self._history = history
        self._clock = clock
        self._notifications = notifications
        self._audio = audio
        self._haptics = haptics
        self._shift_deadline_on_resume = shift_deadline_on_resume

        # ── state ─────────────────────────────────────────────────────
        self._state = TimerState()
        self._last_session_ms = 0

        # ── Qt timers ─────────────────────────────────────────────────
        self._ticker = QTimer(self)
        self._ticker.setInterval(TICK_INTERVAL_MS)
        self._ticker.timeout.connect(self.tick)

        self._auto_start_timer = QTimer(self)
        self._auto_start_timer.setSingleShot(True)
        self._auto_start_timer.setInterval(AUTO_START_DELAY_MS)
        self._auto_start_timer.timeout.connect(self._on_auto_start)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        """A copy of the current timer state."""
        return replace(self._state)

    @property
    def status(self) -> TimerStatus:
        return self._state.status

    @property
    def phase(self) -> Phase:
        """Phase of the current session, or of the next one when IDLE."""
        return self._state.phase

    @property
    def remaining_time(self) -> int:
        """Milliseconds left, as of the last tick."""
        return self._state.remaining_time

    @property
    def current_session(self) -> Session | None:
        return self._state.current_session

    @property
    def completed_work_sessions(self) -> int:
        return self._state.completed_work_sessions

    @property
    def is_running(self) -> bool:
        return self._state.status is TimerStatus.RUNNING

    @property
    def shift_deadline_on_resume(self) -> bool:
        return self._shift_deadline_on_resume

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Begin a fresh session for the current phase.

        No-op while RUNNING.  From PAUSED the paused session is dropped
        and a new one begins.
        """
        if self._state.status is TimerStatus.RUNNING:
            logger.debug("start() ignored: already running")
            return

        self._auto_start_timer.stop()
        now = self._clock()
        phase = self._state.phase
        duration = self._settings.duration_ms(phase)
        session = Session(
            id=self._next_session_id(now),
            start_time=now,
            duration=duration,
            phase=phase,
        )

        self._state.current_session = session
        self._state.remaining_time = duration
        self._state.paused_at = None
        self._set_status(TimerStatus.RUNNING)
        logger.info(
            "Started %s session %s (%d ms)", phase.value, session.id, duration,
        )

        if self._notifications is not None:
            self._safely(
                "request notification permission",
                self._notifications.request_permissions,
            )
        self._schedule_notification(session)
        self._ticker.start()
        self._emit_state()

    def pause(self) -> None:
        """Freeze the countdown.  No-op unless RUNNING."""
        if self._state.status is not TimerStatus.RUNNING:
            logger.debug("pause() ignored: status is %s", self._state.status.value)
            return

        self._ticker.stop()
        self._state.paused_at = self._clock()
        self._set_status(TimerStatus.PAUSED)
        self._cancel_notification(self._state.current_session)
        self._emit_state()

    def resume(self) -> None:
        """Continue the paused session.  No-op unless PAUSED."""
        if self._state.status is not TimerStatus.PAUSED:
            logger.debug("resume() ignored: status is %s", self._state.status.value)
            return

        session = self._state.current_session
        if (
            self._shift_deadline_on_resume
            and session is not None
            and self._state.paused_at is not None
        ):
            paused_for = max(0, self._clock() - self._state.paused_at)
            session = replace(session, start_time=session.start_time + paused_for)
            self._state.current_session = session

        self._state.paused_at = None
        self._set_status(TimerStatus.RUNNING)
        self._cancel_notification(session)
        self._schedule_notification(session)
        self._ticker.start()
        self._emit_state()

    def reset(self) -> None:
        """Drop the current session and return to IDLE, keeping the phase."""
        self._ticker.stop()
        self._auto_start_timer.stop()
        self._cancel_notification(self._state.current_session)

        self._state.current_session = None
        self._state.paused_at = None
        self._state.remaining_time = self._settings.duration_ms(self._state.phase)
        self._set_status(TimerStatus.IDLE)
        self._emit_state()

    def tick(self) -> None:
        """Recompute remaining time from the clock; complete at zero."""
        session = self._state.current_session
        if self._state.status is not TimerStatus.RUNNING or session is None:
            return

        elapsed = self._clock() - session.start_time
        remaining = max(0, session.duration - elapsed)
        self._state.remaining_time = remaining
        self.ticked.emit(remaining)
        self._emit_state()

        if remaining == 0:
            self.complete_session()

    def complete_session(self) -> None:
        """Finish the current session, log it, and flip the phase."""
        session = self._state.current_session
        if session is None:
            return

        self._ticker.stop()
        now = self._clock()
        finished = replace(
            session,
            completed=True,
            end_time=max(now, session.start_time),
        )

        # ── feedback ──────────────────────────────────────────────────
        settings = self._settings.settings
        if settings.sound_enabled and self._audio is not None:
            self._safely(
                "play alarm", self._audio.play_sound, settings.selected_sound,
            )
        if settings.haptics_enabled and self._haptics is not None:
            self._safely(
                "haptic pulse", self._haptics.notification, "success",
            )

        # ── counters / next phase ─────────────────────────────────────
        if finished.phase is Phase.WORK:
            self._state.completed_work_sessions += 1
        next_phase = self._state.phase.opposite
        self._state.phase = next_phase
        self._state.current_session = None
        self._state.paused_at = None
        self._state.remaining_time = self._settings.duration_ms(next_phase)
        self._set_status(TimerStatus.IDLE)

        # Logged only once the timer no longer holds the session, so no
        # saved document has it both running and in history.
        self._history.add(finished)

        self._cancel_notification(finished)
        logger.info(
            "Completed %s session %s; next up: %s",
            finished.phase.value, finished.id, next_phase.value,
        )

        self.phase_changed.emit(next_phase)
        self.session_completed.emit(finished)
        self._emit_state()

        if settings.auto_start:
            self._auto_start_timer.start()

    def restore(self, state: TimerState) -> None:
        """Adopt a rehydrated state.

        A RUNNING state gets its ticker and notification back; the next
        tick settles the remaining time (or completes the session if the
        deadline passed while the app was closed).
        """
        self._ticker.stop()
        self._auto_start_timer.stop()

        if state.status is not TimerStatus.IDLE and state.current_session is None:
            logger.warning(
                "Restored %s timer has no session; resetting to idle",
                state.status.value,
            )
            state = replace(
                state,
                status=TimerStatus.IDLE,
                paused_at=None,
                remaining_time=self._settings.duration_ms(state.phase),
            )

        self._state = replace(state)
        if state.current_session is not None:
            self._last_session_ms = max(
                self._last_session_ms, self._session_ms(state.current_session),
            )

        if state.status is TimerStatus.RUNNING:
            self._schedule_notification(state.current_session)
            self._ticker.start()
        self.status_changed.emit(state.status)
        self._emit_state()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_auto_start(self) -> None:
        logger.debug("Auto-starting %s session", self._state.phase.value)
        self.start()

    def _set_status(self, status: TimerStatus) -> None:
        changed = status is not self._state.status
        self._state.status = status
        if changed:
            self.status_changed.emit(status)

    def _emit_state(self) -> None:
        self.state_changed.emit(replace(self._state))

    def _next_session_id(self, now: int) -> str:
        # Time-derived, but strictly increasing so two starts in the
        # same millisecond still get distinct ids.
        ms = max(now, self._last_session_ms + 1)
        self._last_session_ms = ms
        return str(ms)

    @staticmethod
    def _session_ms(session: Session) -> int:
        try:
            return int(session.id)
        except ValueError:
            return 0

    def _schedule_notification(self, session: Session | None) -> None:
        if session is None or self._notifications is None:
            return
        title, body = NOTIFICATION_TEXT[session.phase]
        self._safely(
            "schedule notification",
            self._notifications.schedule_notification,
            session.notification_id,
            title,
            body,
            ms_to_datetime(session.deadline),
        )

    def _cancel_notification(self, session: Session | None) -> None:
        if session is None or self._notifications is None:
            return
        self._safely(
            "cancel notification",
            self._notifications.cancel_notification,
            session.notification_id,
        )

    @staticmethod
    def _safely(what: str, fn, *args):
        """Run a side effect; log and swallow any failure."""
        try:
            return fn(*args)
        except Exception:
            logger.exception("Failed to %s", what)
            return None
