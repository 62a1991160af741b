"""Shared test helpers for Training Timer."""

from trainingtimer.timer.engine import TimerEngine
from trainingtimer.timer.models import TimerItem, TrainingState


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


class FakeScheduler:
    """Stands in for the one-second QTimer; tests fire ticks by hand."""

    def __init__(self):
        self.callback = None
        self.starts = 0
        self.stops = 0
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self, callback):
        self.callback = callback
        self.starts += 1
        self._active = True

    def stop(self):
        self.stops += 1
        self._active = False

    def fire(self, times: int = 1):
        for _ in range(times):
            if self._active and self.callback is not None:
                self.callback()


class RecordingCuePlayer:
    def __init__(self):
        self.played: list = []

    def play(self, kind):
        self.played.append(kind)


def make_state(*specs, names=None) -> TrainingState:
    """Plan from ``(work, interval, sets)`` tuples, ids ``"A"``, ``"B"``, ...

    Positioned at the start of the first work phase, not running.
    """
    timers = tuple(
        TimerItem(
            id=chr(ord("A") + i),
            name=(names[i] if names else ""),
            work_duration=work,
            interval_duration=interval,
            sets=sets,
        )
        for i, (work, interval, sets) in enumerate(specs)
    )
    return TrainingState(timers=timers, remaining_time=timers[0].work_duration)


def run_phase(engine: TimerEngine, scheduler: FakeScheduler) -> None:
    """Tick until the current phase is exhausted and the engine advances."""
    scheduler.fire(engine.remaining)
