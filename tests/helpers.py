"""Shared test helpers for PomoCycle."""

from pomocycle.timer.engine import TimerEngine


T0 = 1_700_000_000_000  # an arbitrary wall-clock origin (ms)


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now

    def set(self, ms: int) -> None:
        self.now = ms


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class RecordingNotifications:
    """Stand-in for NotificationService that records every call."""

    def __init__(self, granted: bool = True):
        self.granted = granted
        self.calls: list[tuple] = []
        self.pending: dict[int, tuple] = {}

    def request_permissions(self) -> bool:
        self.calls.append(("request_permissions",))
        return self.granted

    def schedule_notification(self, notification_id, title, body, fire_at):
        self.calls.append(("schedule", notification_id, title, body, fire_at))
        self.pending[notification_id] = (title, body, fire_at)

    def cancel_notification(self, notification_id):
        self.calls.append(("cancel", notification_id))
        self.pending.pop(notification_id, None)

    def cancel_all_notifications(self):
        self.calls.append(("cancel_all",))
        self.pending.clear()

    def get_pending(self):
        return sorted(self.pending)

    def named(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]


class RecordingAudio:
    def __init__(self):
        self.played: list[str] = []
        self.preloaded = False
        self.unloaded = False

    def preload_alarm(self):
        self.preloaded = True

    def play_sound(self, key: str):
        self.played.append(key)

    def unload_all_sounds(self):
        self.unloaded = True


class RecordingHaptics:
    def __init__(self):
        self.pulses: list[str] = []

    def notification(self, kind):
        self.pulses.append(kind)


class Exploding:
    """Every method call raises; used to prove side effects are isolated."""

    def __getattr__(self, name):
        def boom(*args, **kwargs):
            raise RuntimeError(f"{name} exploded")
        return boom


class MemoryStore:
    """Dict-backed key-value store."""

    def __init__(self, data: dict | None = None):
        self.data: dict[str, str] = dict(data or {})
        self.writes = 0

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.writes += 1
        self.data[key] = value

    def remove(self, key):
        self.data.pop(key, None)

    def clear(self):
        self.data.clear()


def run_to_completion(engine: TimerEngine, clock: FakeClock) -> None:
    """Jump the clock to the current session's deadline and tick."""
    session = engine.current_session
    clock.set(session.start_time + session.duration)
    engine.tick()
