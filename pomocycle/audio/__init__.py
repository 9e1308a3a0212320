"""Audio package."""

from .sounds import ALARMS, DEFAULT_SOUND, AudioService, Sound, SoundManager

__all__ = ["ALARMS", "DEFAULT_SOUND", "AudioService", "Sound", "SoundManager"]
