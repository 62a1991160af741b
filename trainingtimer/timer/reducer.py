"""Phase state machine for the training timer.

States
------
Work(t, s)      Counting down the work phase of set *s* of timer *t*.
Interval(t, s)  Counting down the rest after that work phase.
Finished        Terminal; every set of every timer is done.

Running is an orthogonal flag: a paused workout is Work/Interval with
``is_running=False``.

Transitions
-----------
Work(t, s)     → Interval(t, s)                 (next_phase)
Work(t, s)     → Finished                       (next_phase, last set of last timer)
Interval(t, s) → Work(t, s+1)                   (next_phase, more sets)
Interval(t, s) → Work(t+1, 0)                   (next_phase, more timers)
Interval(t, s) → Finished                       (next_phase)
Any            → Work(0, 0)                     (reset)

``reduce`` is pure and total: a disallowed event returns the very same
state object, which callers use to skip persistence and cues.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union

from .models import (
    CueKind,
    DEFAULT_SETS,
    DEFAULT_WORK_DURATION,
    TimerField,
    TimerItem,
    TrainingState,
    new_timer_id,
)


# ── events ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class NextPhase:
    pass


@dataclass(frozen=True)
class AddTimer:
    timer_id: str = field(default_factory=new_timer_id)


@dataclass(frozen=True)
class RemoveTimer:
    timer_id: str


@dataclass(frozen=True)
class UpdateTimer:
    """Merge *updates* into the timer with *timer_id*.

    Values must already be validated (see ``parse_field_value``).
    """

    timer_id: str
    updates: dict[TimerField, int | str]


@dataclass(frozen=True)
class SetDefaultInterval:
    seconds: int


@dataclass(frozen=True)
class ReorderTimer:
    source_index: int
    destination_index: int


@dataclass(frozen=True)
class LoadState:
    state: TrainingState


Event = Union[
    Start, Stop, Reset, Tick, NextPhase, AddTimer, RemoveTimer,
    UpdateTimer, SetDefaultInterval, ReorderTimer, LoadState,
]


# ── effects ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Effects:
    """What the session has to do after a transition."""

    persist: bool = False
    cue: CueKind | None = None
    advance: bool = False


def plan_effects(previous: TrainingState, current: TrainingState) -> Effects:
    """Describe the side effects of moving from *previous* to *current*.

    Any change is persisted.  A running state with no time left has
    exhausted its phase: play the finish cue and advance.
    """
    if current is previous:
        return Effects()
    exhausted = current.is_running and current.remaining_time <= 0
    return Effects(
        persist=True,
        cue=CueKind.FINISH if exhausted else None,
        advance=exhausted,
    )


# ── transitions ───────────────────────────────────────────────────────────


def _finished(state: TrainingState) -> TrainingState:
    return replace(state, is_finished=True, is_running=False, remaining_time=0)


def _at_work_start(state: TrainingState, timer_index: int) -> TrainingState:
    return replace(
        state,
        current_timer_index=timer_index,
        current_set_index=0,
        is_interval=False,
        remaining_time=state.timers[timer_index].work_duration,
    )


def _next_phase(state: TrainingState) -> TrainingState:
    if state.is_finished:
        return state
    item = state.timers[state.current_timer_index]

    if not state.is_interval:
        # No rest after the very last work set.
        if state.is_last_set and state.is_last_timer:
            return _finished(state)
        return replace(state, is_interval=True, remaining_time=item.interval_duration)

    if state.current_set_index < item.sets - 1:
        return replace(
            state,
            is_interval=False,
            current_set_index=state.current_set_index + 1,
            remaining_time=item.work_duration,
        )
    if state.current_timer_index + 1 < len(state.timers):
        return _at_work_start(state, state.current_timer_index + 1)
    return _finished(state)


def _reset(state: TrainingState) -> TrainingState:
    first = state.timers[0] if state.timers else None
    return replace(
        state,
        current_timer_index=0,
        current_set_index=0,
        is_interval=False,
        remaining_time=first.work_duration if first else 0,
        is_running=False,
        is_finished=False,
    )


def _add_timer(state: TrainingState, timer_id: str) -> TrainingState:
    item = TimerItem(
        id=timer_id,
        name="",
        work_duration=DEFAULT_WORK_DURATION,
        interval_duration=state.default_interval,
        sets=DEFAULT_SETS,
    )
    return replace(state, timers=state.timers + (item,))


def _remove_timer(state: TrainingState, timer_id: str) -> TrainingState:
    if len(state.timers) <= 1:
        return state
    index = state.index_of(timer_id)
    if index < 0:
        return state

    timers = state.timers[:index] + state.timers[index + 1:]
    removed = replace(state, timers=timers)
    current = state.current_timer_index
    if index < current:
        return replace(removed, current_timer_index=current - 1)
    if index > current:
        return removed

    # The active timer went away: restart at whatever now holds its slot.
    new_index = min(current, len(timers) - 1)
    if state.is_finished:
        return replace(removed, current_timer_index=new_index, current_set_index=0)
    return _at_work_start(removed, new_index)


def _update_timer(
    state: TrainingState,
    timer_id: str,
    updates: dict[TimerField, int | str],
) -> TrainingState:
    index = state.index_of(timer_id)
    if index < 0 or not updates:
        return state

    old = state.timers[index]
    new = old.updated(updates)
    if new == old:
        return state
    timers = state.timers[:index] + (new,) + state.timers[index + 1:]
    remaining = state.remaining_time
    set_index = state.current_set_index

    if index == state.current_timer_index:
        # Resync only an untouched, paused phase.
        if not state.is_running:
            if (
                not state.is_interval
                and TimerField.WORK_DURATION in updates
                and state.remaining_time == old.work_duration
            ):
                remaining = new.work_duration
            if (
                state.is_interval
                and TimerField.INTERVAL_DURATION in updates
                and state.remaining_time == old.interval_duration
            ):
                remaining = new.interval_duration
        if set_index > new.sets - 1:
            set_index = new.sets - 1

    return replace(
        state,
        timers=timers,
        remaining_time=remaining,
        current_set_index=set_index,
    )


def _reorder_timer(state: TrainingState, source: int, destination: int) -> TrainingState:
    count = len(state.timers)
    if not (0 <= source < count and 0 <= destination < count) or source == destination:
        return state

    active_id = state.timers[state.current_timer_index].id
    timers = list(state.timers)
    moved = timers.pop(source)
    timers.insert(destination, moved)
    reordered = replace(state, timers=tuple(timers))
    return replace(reordered, current_timer_index=reordered.index_of(active_id))


# ── reducer ───────────────────────────────────────────────────────────────


def reduce(state: TrainingState, event: Event) -> TrainingState:
    """Apply *event* to *state* and return the next state."""
    if isinstance(event, Start):
        if state.is_finished or state.is_running:
            return state
        return replace(state, is_running=True)

    if isinstance(event, Stop):
        if not state.is_running:
            return state
        return replace(state, is_running=False)

    if isinstance(event, Reset):
        reset = _reset(state)
        return state if reset == state else reset

    if isinstance(event, Tick):
        if not state.is_running or state.remaining_time <= 0:
            return state
        return replace(state, remaining_time=state.remaining_time - 1)

    if isinstance(event, NextPhase):
        return _next_phase(state)

    if isinstance(event, AddTimer):
        return _add_timer(state, event.timer_id)

    if isinstance(event, RemoveTimer):
        return _remove_timer(state, event.timer_id)

    if isinstance(event, UpdateTimer):
        return _update_timer(state, event.timer_id, event.updates)

    if isinstance(event, SetDefaultInterval):
        if event.seconds == state.default_interval:
            return state
        return replace(state, default_interval=event.seconds)

    if isinstance(event, ReorderTimer):
        return _reorder_timer(state, event.source_index, event.destination_index)

    if isinstance(event, LoadState):
        return event.state

    return state
