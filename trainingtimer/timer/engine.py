"""Session object that drives the phase state machine.

``TimerEngine`` owns the current ``TrainingState`` and is the single
dispatch point for every event (ticks, controls, plan edits).  After
each transition it asks ``plan_effects`` what to do and hands the
answer to its collaborators:

- *repository* — ``load() -> TrainingState`` / ``save(state)``
- *cue_player* — ``play(CueKind)``, fire-and-forget
- *scheduler*  — ``start(callback)`` / ``stop()`` / ``is_active``,
  a one-second repeating callback, running exactly while the workout is.

Signals
-------
state_changed(state: TrainingState)
    Emitted after every transition that changed the state.
tick(remaining_seconds: int)
    Emitted whenever the remaining time changes.
phase_changed(phase: Phase)
    Emitted when the cursor enters a new phase (or set, or timer).
finished()
    Emitted once when the workout reaches the terminal state.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .models import CueKind, TrainingState, default_state
from .reducer import Event, NextPhase, Reset, Start, Stop, Tick, plan_effects, reduce

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


# ── collaborators ─────────────────────────────────────────────────────────


class StateRepository(Protocol):
    def load(self) -> TrainingState: ...

    def save(self, state: TrainingState) -> None: ...


class CuePlayer(Protocol):
    def play(self, kind: CueKind) -> None: ...


class TickScheduler(Protocol):
    @property
    def is_active(self) -> bool: ...

    def start(self, callback: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


class QtTickScheduler(QObject):
    """Repeating one-second ``QTimer`` behind the scheduler interface."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._callback: Callable[[], None] | None = None
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._fire)

    @property
    def is_active(self) -> bool:
        return self._qt_timer.isActive()

    def start(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._qt_timer.start()

    def stop(self) -> None:
        self._qt_timer.stop()

    def _fire(self) -> None:
        if self._callback is not None:
            self._callback()


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Interval-training session: plan, cursor, and the effects around them."""

    state_changed = pyqtSignal(object)
    tick = pyqtSignal(int)
    phase_changed = pyqtSignal(object)
    finished = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        repository: StateRepository | None = None,
        cue_player: CuePlayer | None = None,
        scheduler: TickScheduler | None = None,
        initial_state: TrainingState | None = None,
    ) -> None:
        super().__init__(parent)
        self._repository = repository
        self._cue_player = cue_player
        self._scheduler: TickScheduler = scheduler or QtTickScheduler(self)

        if initial_state is None:
            initial_state = repository.load() if repository else default_state()
        self._state: TrainingState = initial_state

        self._pending: deque[Event] = deque()
        self._dispatching = False

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TrainingState:
        return self._state

    @property
    def remaining(self) -> int:
        """Seconds left in the current phase."""
        return self._state.remaining_time

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def dispatch(self, event: Event) -> None:
        """Apply *event* and everything it triggers, in order.

        Events dispatched from a signal handler while another event is
        being applied are queued behind it.
        """
        self._pending.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                self._apply(self._pending.popleft())
        finally:
            self._dispatching = False
            self._pending.clear()

    def start(self) -> None:
        self.dispatch(Start())

    def stop(self) -> None:
        """Pause; position and remaining time are kept."""
        self.dispatch(Stop())

    def reset(self) -> None:
        self.dispatch(Reset())

    def shutdown(self) -> None:
        """Stop ticking and write the final state."""
        self._scheduler.stop()
        self._persist(self._state)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        self.dispatch(Tick())

    def _apply(self, event: Event) -> None:
        previous = self._state
        current = reduce(previous, event)
        if current is previous:
            return

        effects = plan_effects(previous, current)
        self._state = current
        logger.debug("%s -> %s", type(event).__name__, current)

        if effects.persist:
            self._persist(current)
        self._sync_scheduler()

        self.state_changed.emit(current)
        if current.remaining_time != previous.remaining_time:
            self.tick.emit(current.remaining_time)
        if _cursor(current) != _cursor(previous):
            logger.info(
                "Phase %s (timer %d, set %d)",
                current.phase.value,
                current.current_timer_index + 1,
                current.current_set_index + 1,
            )
            self.phase_changed.emit(current.phase)
        if current.is_finished and not previous.is_finished:
            self.finished.emit()

        if effects.cue is not None:
            self._play_cue(effects.cue)
        if effects.advance:
            # Ahead of anything queued by signal handlers.
            self._pending.appendleft(NextPhase())

    def _sync_scheduler(self) -> None:
        if self._state.is_running and not self._scheduler.is_active:
            self._scheduler.start(self._on_tick)
        elif not self._state.is_running and self._scheduler.is_active:
            self._scheduler.stop()

    def _persist(self, state: TrainingState) -> None:
        if self._repository is None:
            return
        try:
            self._repository.save(state)
        except Exception:
            logger.warning("Saving timer state failed", exc_info=True)

    def _play_cue(self, kind: CueKind) -> None:
        if self._cue_player is None:
            return
        try:
            self._cue_player.play(kind)
        except Exception:
            logger.warning("Cue %s failed", kind.value, exc_info=True)


def _cursor(state: TrainingState) -> tuple:
    item = state.current_timer
    return (state.phase, item.id if item else None, state.current_set_index)
