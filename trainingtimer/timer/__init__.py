"""Timer package."""

from .models import (
    TimerItem,
    TrainingState,
    TimerField,
    Phase,
    CueKind,
    default_state,
    parse_field_value,
    parse_default_interval,
)
from .reducer import (
    Start,
    Stop,
    Reset,
    Tick,
    NextPhase,
    AddTimer,
    RemoveTimer,
    UpdateTimer,
    SetDefaultInterval,
    ReorderTimer,
    LoadState,
    reduce,
)
from .engine import TimerEngine, QtTickScheduler

__all__ = [
    "TimerItem",
    "TrainingState",
    "TimerField",
    "Phase",
    "CueKind",
    "default_state",
    "parse_field_value",
    "parse_default_interval",
    "Start",
    "Stop",
    "Reset",
    "Tick",
    "NextPhase",
    "AddTimer",
    "RemoveTimer",
    "UpdateTimer",
    "SetDefaultInterval",
    "ReorderTimer",
    "LoadState",
    "reduce",
    "TimerEngine",
    "QtTickScheduler",
]
