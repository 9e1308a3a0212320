"""User settings and the store that owns them.

Usage::

    store = SettingsStore()
    store.update(work_minutes=50, auto_start=True)
    store.duration_ms(Phase.WORK)   # 3_000_000

Durations are accepted as given: zero or negative minutes are not
rejected here (the timer simply completes on its first tick).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict, fields, replace

from PyQt6.QtCore import QObject, pyqtSignal

from .timer.models import Phase

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_minutes: int = 25
    break_minutes: int = 5
    long_break_minutes: int = 15
    auto_start: bool = False

    # ── feedback ──────────────────────────────────────────────────────
    haptics_enabled: bool = True
    sound_enabled: bool = True
    selected_sound: str = "default"

    def duration_ms(self, phase: Phase) -> int:
        minutes = self.work_minutes if phase is Phase.WORK else self.break_minutes
        return minutes * 60 * 1000

    def to_dict(self) -> dict:
        return asdict(self)


_FIELD_TYPES: dict[str, type] = {
    "work_minutes": int,
    "break_minutes": int,
    "long_break_minutes": int,
    "auto_start": bool,
    "haptics_enabled": bool,
    "sound_enabled": bool,
    "selected_sound": str,
}


def coerce_field(name: str, value):
    """Convert *value* to the declared type of settings field *name*.

    Raises ``ValueError`` when the value cannot be represented.
    """
    kind = _FIELD_TYPES[name]
    if kind is bool:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "1", "yes", "on"):
                return True
            if lowered in ("false", "0", "no", "off", ""):
                return False
            raise ValueError(f"{name}: not a boolean: {value!r}")
        return bool(value)
    if kind is int:
        if isinstance(value, bool):
            raise ValueError(f"{name}: expected a number, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name}: expected a number, got {value!r}") from exc
    return str(value)


class SettingsStore(QObject):
    """Owns the singleton :class:`Settings`.

    Signals
    -------
    changed(settings: Settings)
        Emitted after every successful update.
    """

    changed = pyqtSignal(object)

    def __init__(
        self,
        settings: Settings | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings if settings is not None else Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def duration_ms(self, phase: Phase) -> int:
        return self._settings.duration_ms(phase)

    def update(self, **patch) -> Settings:
        """Merge a partial patch into the current settings.

        Unknown keys are ignored.  All values are coerced before anything
        is applied, so a bad value leaves the settings untouched.
        """
        valid_keys = {f.name for f in fields(Settings)}
        clean = {}
        for key, value in patch.items():
            if key not in valid_keys:
                logger.warning("Ignoring unknown setting %r", key)
                continue
            clean[key] = coerce_field(key, value)

        if not clean:
            return self._settings

        self._settings = replace(self._settings, **clean)
        logger.debug("Settings updated: %s", clean)
        self.changed.emit(self._settings)
        return self._settings

    def replace_all(self, settings: Settings) -> None:
        """Swap in a whole settings object (used on rehydrate)."""
        self._settings = settings
        self.changed.emit(self._settings)
