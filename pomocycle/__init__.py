"""PomoCycle: focus/break work cycles with history and reminders."""

__version__ = "0.1.0"
