"""Plan and position data for the training timer.

A ``TrainingState`` is the whole session: the plan (ordered
``TimerItem`` tuple plus the default interval) and the cursor the
phase engine moves through it.  Everything here is immutable; the
reducer builds new instances with ``dataclasses.replace``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from enum import Enum


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_WORK_DURATION = 60        # seconds, for new timers
DEFAULT_INTERVAL = 30             # seconds, seeds the default plan
DEFAULT_SETS = 1


def new_timer_id() -> str:
    return str(uuid.uuid4())


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    WORK = "work"
    INTERVAL = "interval"
    FINISHED = "finished"


class CueKind(Enum):
    BEEP = "beep"
    FINISH = "finish"


class TimerField(Enum):
    """Fields of a ``TimerItem`` that an update may touch."""

    NAME = "name"
    WORK_DURATION = "work_duration"
    INTERVAL_DURATION = "interval_duration"
    SETS = "sets"


# ── plan ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerItem:
    """One work block: a named exercise with its own durations and sets."""

    id: str
    name: str = ""
    work_duration: int = DEFAULT_WORK_DURATION
    interval_duration: int = DEFAULT_INTERVAL
    sets: int = DEFAULT_SETS

    def updated(self, updates: dict[TimerField, int | str]) -> TimerItem:
        return replace(self, **{f.value: v for f, v in updates.items()})


@dataclass(frozen=True)
class TrainingState:
    """Plan + position, persisted as one unit."""

    timers: tuple[TimerItem, ...]
    default_interval: int = DEFAULT_INTERVAL
    current_timer_index: int = 0
    current_set_index: int = 0
    is_interval: bool = False
    remaining_time: int = 0
    is_running: bool = False
    is_finished: bool = False

    @property
    def phase(self) -> Phase:
        if self.is_finished:
            return Phase.FINISHED
        return Phase.INTERVAL if self.is_interval else Phase.WORK

    @property
    def current_timer(self) -> TimerItem | None:
        if 0 <= self.current_timer_index < len(self.timers):
            return self.timers[self.current_timer_index]
        return None

    @property
    def is_last_set(self) -> bool:
        item = self.current_timer
        return item is None or self.current_set_index >= item.sets - 1

    @property
    def is_last_timer(self) -> bool:
        return self.current_timer_index >= len(self.timers) - 1

    def index_of(self, timer_id: str) -> int:
        """Position of *timer_id* in the plan, or -1."""
        for i, item in enumerate(self.timers):
            if item.id == timer_id:
                return i
        return -1

    # ── wire format ───────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "defaultInterval": self.default_interval,
            "timers": [
                {
                    "id": t.id,
                    "name": t.name,
                    "workDuration": t.work_duration,
                    "intervalDuration": t.interval_duration,
                    "sets": t.sets,
                }
                for t in self.timers
            ],
            "currentTimerIndex": self.current_timer_index,
            "currentSetIndex": self.current_set_index,
            "isInterval": self.is_interval,
            "remainingTime": self.remaining_time,
            "isRunning": self.is_running,
            "isFinished": self.is_finished,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TrainingState:
        """Build a state from its wire form.

        Raises ``KeyError``/``TypeError``/``ValueError`` on malformed
        input, including values outside the ranges the editor allows;
        older blobs without ``sets`` or ``currentSetIndex`` are migrated
        to 1 and 0.
        """
        timers = tuple(
            TimerItem(
                id=str(t["id"]),
                name=str(t.get("name") or ""),
                work_duration=_bounded(t["workDuration"], 1, "workDuration"),
                interval_duration=_bounded(
                    t["intervalDuration"], 0, "intervalDuration",
                ),
                sets=_bounded(
                    DEFAULT_SETS if t.get("sets") is None else t["sets"], 1, "sets",
                ),
            )
            for t in data["timers"]
        )
        if not timers:
            raise ValueError("a plan needs at least one timer")
        index = int(data.get("currentTimerIndex") or 0)
        if not 0 <= index < len(timers):
            raise ValueError(f"currentTimerIndex {index} out of range")
        set_index = _bounded(data.get("currentSetIndex") or 0, 0, "currentSetIndex")
        if set_index >= timers[index].sets:
            raise ValueError(f"currentSetIndex {set_index} out of range")
        is_running = bool(data.get("isRunning", False))
        is_finished = bool(data.get("isFinished", False))
        if is_running and is_finished:
            raise ValueError("a finished workout cannot be running")
        return cls(
            timers=timers,
            default_interval=_bounded(
                data.get("defaultInterval", DEFAULT_INTERVAL), 0, "defaultInterval",
            ),
            current_timer_index=index,
            current_set_index=set_index,
            is_interval=bool(data.get("isInterval", False)),
            remaining_time=_bounded(data.get("remainingTime") or 0, 0, "remainingTime"),
            is_running=is_running,
            is_finished=is_finished,
        )


def _bounded(raw: object, minimum: int, name: str) -> int:
    value = int(raw)
    if value < minimum:
        raise ValueError(f"{name} {value} is below {minimum}")
    return value


def default_state() -> TrainingState:
    """A fresh single-timer plan positioned at the start of its work phase."""
    item = TimerItem(
        id=new_timer_id(),
        work_duration=DEFAULT_WORK_DURATION,
        interval_duration=DEFAULT_INTERVAL,
        sets=DEFAULT_SETS,
    )
    return TrainingState(
        timers=(item,),
        default_interval=DEFAULT_INTERVAL,
        remaining_time=item.work_duration,
    )


# ── caller-side validation ────────────────────────────────────────────────


_MINIMUMS: dict[TimerField, int] = {
    TimerField.WORK_DURATION: 1,
    TimerField.INTERVAL_DURATION: 0,
    TimerField.SETS: 1,
}


def _parse_int(raw: object, minimum: int) -> int | None:
    if isinstance(raw, bool):
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value >= minimum else None


def parse_field_value(timer_field: TimerField, raw: object) -> int | str | None:
    """Validate raw input for *timer_field*.

    Returns the value to put in an ``UpdateTimer`` payload, or ``None``
    when the input must not be dispatched.
    """
    if timer_field is TimerField.NAME:
        return str(raw)
    return _parse_int(raw, _MINIMUMS[timer_field])


def parse_default_interval(raw: object) -> int | None:
    return _parse_int(raw, 0)
