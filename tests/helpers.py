"""Shared test helpers for Pomodoro."""

from pomodoro.database.history import HistoryStore
from pomodoro.timer.engine import TimerEngine, TimerEvent
from pomodoro.timer.scheduler import REMOVE


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


class EventCollector:
    """Subscribes to every engine event and records ``(event, payload)``."""

    def __init__(self, engine: TimerEngine):
        self.items: list = []
        for event in TimerEvent:
            engine.connect(event, lambda payload, e=event: self.items.append((e, payload)))

    def of(self, event: TimerEvent) -> list:
        return [payload for e, payload in self.items if e is event]

    def names(self) -> list[str]:
        return [e.value for e, _ in self.items]

    def clear(self):
        self.items.clear()


class ManualScheduler:
    """Scheduler whose ticks are fired by the test instead of a clock."""

    def __init__(self):
        self.callbacks: list = []

    def add_seconds(self, interval, callback):
        self.callbacks.append(callback)

    def tick(self, n: int = 1) -> None:
        for _ in range(n):
            for callback in list(self.callbacks):
                if callback() is REMOVE:
                    self.callbacks.remove(callback)

    def __len__(self):
        return len(self.callbacks)


class FakeNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send(self, title, body):
        self.sent.append((title, body))

    def titles(self) -> list[str]:
        return [title for title, _ in self.sent]


class FakeSoundPlayer:
    def __init__(self):
        self.played: list[str] = []

    def play(self, sound_settings):
        self.played.append(sound_settings)


class FakeStatusReporter:
    def __init__(self):
        self.messages: list[str] = []

    def set_status(self, message):
        self.messages.append(message)


class FailingCollaborator:
    """Raises from every method; stands in for a broken store/notifier/player."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise RuntimeError(f"{name} failed")
        return _fail


class RecordingStore:
    """Wraps a real ``HistoryStore`` and records the engine-facing calls."""

    def __init__(self, store: HistoryStore):
        self._store = store
        self.saves: list = []
        self.updates: list = []
        self.deletes: list = []

    def save(self, item):
        self.saves.append(item.copy())
        return self._store.save(item)

    def update(self, item):
        self.updates.append(item.copy())
        return self._store.update(item)

    def delete(self, item_id):
        self.deletes.append(item_id)
        return self._store.delete(item_id)

    def __getattr__(self, name):
        return getattr(self._store, name)


def run_ticks(engine: TimerEngine, n: int) -> None:
    """Fire *n* ticks straight into the engine's current loop."""
    for _ in range(n):
        engine._on_tick()
