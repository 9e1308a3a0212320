"""Alarm synthesis and playback using numpy + QSoundEffect.

Alarm sounds are generated programmatically as WAV files using sine-wave
synthesis with ADSR envelopes.  Files are cached to disk so subsequent
launches skip the synthesis.

Alarm ids
---------
- ``default`` — bright arpeggio (C5→E5→G5→C6)
- ``bell``    — soft meditation bell
- ``chime``   — short ascending chime
- ``beep``    — classic triple beep
"""

from __future__ import annotations

import io
import logging
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..paths import SOUNDS_DIR

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
DEFAULT_SOUND = "default"


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  ALARM GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_arpeggio() -> bytes:
    """Default alarm — C5→E5→G5→C6, last note held."""
    notes = [523.25, 659.25, 783.99, 1046.50]
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        if i == len(notes) - 1:
            tone = _sine(freq, 0.35) * 0.5
            env = _make_envelope(len(tone), attack=80, decay=300, sustain_level=0.5, release=600)
        else:
            tone = _sine(freq, 0.10) * 0.5
            env = _make_envelope(len(tone), attack=60, decay=150, sustain_level=0.3, release=200)
        parts.append(tone * env)
        if i < len(notes) - 1:
            parts.append(_silence(0.02))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_bell() -> bytes:
    """A4 with a faint octave overtone, slow attack, long decay."""
    duration = 1.2
    combined = _sine(440.0, duration) * 0.35 + _sine(880.0, duration) * 0.08
    env = _make_envelope(
        len(combined),
        attack=int(SAMPLE_RATE * 0.08),
        decay=int(SAMPLE_RATE * 0.3),
        sustain_level=0.25,
        release=int(SAMPLE_RATE * 0.7),
    )
    return _to_wav_bytes(combined * env)


def _generate_chime() -> bytes:
    """Three ascending notes (C5→E5→G5)."""
    parts: list[np.ndarray] = []
    for freq in (523.25, 659.25, 783.99):
        tone = _sine(freq, 0.12) * 0.6
        env = _make_envelope(len(tone), attack=100, decay=200, sustain_level=0.4, release=300)
        parts.append(tone * env)
        parts.append(_silence(0.03))
    parts.append(_silence(0.05))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_beep() -> bytes:
    """Three short 880 Hz beeps."""
    beep = _sine(880.0, 0.15) * 0.45
    beep = beep * _make_envelope(len(beep), attack=60, decay=120, sustain_level=0.8, release=300)
    gap = _silence(0.12)
    return _to_wav_bytes(np.concatenate([beep, gap, beep, gap, beep, _silence(0.05)]))


@dataclass(frozen=True)
class Sound:
    id: str
    name: str
    file: str


ALARMS: tuple[Sound, ...] = (
    Sound("default", "Default Alarm", "default.wav"),
    Sound("bell", "Meditation Bell", "bell.wav"),
    Sound("chime", "Chime", "chime.wav"),
    Sound("beep", "Classic Beep", "beep.wav"),
)

_GENERATORS: dict[str, Callable[[], bytes]] = {
    "default": _generate_arpeggio,
    "bell": _generate_bell,
    "chime": _generate_chime,
    "beep": _generate_beep,
}


# ═══════════════════════════════════════════════════════════════════════════
#  PLAYBACK
# ═══════════════════════════════════════════════════════════════════════════


class AudioService(QObject):
    """Keyed sound effects: preload, play, unload.

    ``play_sound`` on a key that was never preloaded is a no-op.  Errors
    are logged and swallowed.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._volume = 1.0  # 0.0–1.0
        self._effects: dict[str, QSoundEffect] = {}

    def preload_sound(self, key: str, path: Path | str) -> None:
        try:
            path = Path(path)
            if not path.exists():
                logger.warning("Sound file missing: %s", path)
                return
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume)
            self.unload_sound(key)
            self._effects[key] = effect
        except Exception:
            logger.exception("Preload sound error for %r", key)

    def play_sound(self, key: str) -> None:
        try:
            effect = self._effects.get(key)
            if effect is not None:
                effect.play()
        except Exception:
            logger.exception("Play sound error for %r", key)

    def unload_sound(self, key: str) -> None:
        try:
            effect = self._effects.pop(key, None)
            if effect is not None:
                effect.stop()
                effect.deleteLater()
        except Exception:
            logger.exception("Unload sound error for %r", key)

    def unload_all_sounds(self) -> None:
        for key in list(self._effects):
            self.unload_sound(key)

    def is_loaded(self, key: str) -> bool:
        return key in self._effects

    @property
    def loaded(self) -> list[str]:
        return sorted(self._effects)

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    @property
    def volume(self) -> int:
        return round(self._volume * 100)


class SoundManager(AudioService):
    """Synthesizes, caches and plays the selectable alarm sounds.

    Unknown alarm ids fall back to ``default``, so a stale
    ``selected_sound`` still rings.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.preload_alarm()
        mgr.play_sound("bell")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._volume = 0.7
        self._sounds_dir = sounds_dir or SOUNDS_DIR

    @property
    def sounds_dir(self) -> Path:
        return self._sounds_dir

    def load_sounds(self) -> list[Sound]:
        """The selectable alarms, generating any missing WAV files."""
        try:
            self._ensure_wav_files()
        except OSError:
            logger.exception("Could not write alarm sounds to %s", self._sounds_dir)
        return list(ALARMS)

    def preload_alarm(self) -> None:
        """Make every alarm ready to play."""
        for sound in self.load_sounds():
            self.preload_sound(sound.id, self._sounds_dir / sound.file)

    def play_sound(self, key: str) -> None:
        if not self.is_loaded(key):
            key = DEFAULT_SOUND
        super().play_sound(key)

    def play_alarm(self, sound_id: str = DEFAULT_SOUND) -> None:
        self.play_sound(sound_id)

    def _ensure_wav_files(self) -> None:
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for sound in ALARMS:
            path = self._sounds_dir / sound.file
            if not path.exists():
                path.write_bytes(_GENERATORS[sound.id]())
