"""Tests for the TimerEngine session object.

Covers: the tick loop driving phase changes, finish cues, the
scheduler running exactly while the workout runs, persistence after
every change, signals, and event serialisation.
"""

from dataclasses import replace

import pytest

from trainingtimer.timer.engine import QtTickScheduler, TimerEngine
from trainingtimer.timer.models import CueKind, Phase, TimerField
from trainingtimer.timer.reducer import (
    AddTimer, LoadState, RemoveTimer, Tick, UpdateTimer,
)

from helpers import FakeScheduler, SignalCollector, make_state, run_phase


def cursor(engine):
    s = engine.state
    return (s.phase, s.current_timer_index, s.current_set_index)


# ═══════════════════════════════════════════════════════════════════════════
#  CONTROLS / SCHEDULER
# ═══════════════════════════════════════════════════════════════════════════


class TestControls:

    def test_initial_state(self, engine):
        assert cursor(engine) == (Phase.WORK, 0, 0)
        assert engine.remaining == 10
        assert engine.is_running is False

    def test_start_starts_scheduler(self, engine, scheduler):
        engine.start()
        assert engine.is_running is True
        assert scheduler.is_active is True

    def test_stop_stops_scheduler(self, engine, scheduler):
        engine.start()
        scheduler.fire(3)
        engine.stop()
        assert scheduler.is_active is False
        assert engine.remaining == 7

    def test_start_twice_starts_scheduler_once(self, engine, scheduler):
        engine.start()
        engine.start()
        assert scheduler.starts == 1

    def test_reset_stops_and_rewinds(self, engine, scheduler):
        engine.start()
        run_phase(engine, scheduler)
        engine.reset()
        assert scheduler.is_active is False
        assert cursor(engine) == (Phase.WORK, 0, 0)
        assert engine.remaining == 10

    def test_tick_while_paused_is_ignored(self, engine):
        engine._on_tick()
        assert engine.remaining == 10

    def test_runs_without_persistence(self, engine_no_db, scheduler):
        engine_no_db.start()
        scheduler.fire(10)
        assert cursor(engine_no_db) == (Phase.INTERVAL, 0, 0)

    def test_default_state_without_repository(self, qapp):
        eng = TimerEngine(scheduler=FakeScheduler())
        assert len(eng.state.timers) == 1
        assert eng.remaining == 60


# ═══════════════════════════════════════════════════════════════════════════
#  PHASE LOOP
# ═══════════════════════════════════════════════════════════════════════════


class TestPhaseLoop:

    def test_exhaustion_advances_in_same_tick(self, engine, scheduler):
        engine.start()
        scheduler.fire(9)
        assert cursor(engine) == (Phase.WORK, 0, 0)
        assert engine.remaining == 1
        scheduler.fire()
        assert cursor(engine) == (Phase.INTERVAL, 0, 0)
        assert engine.remaining == 5

    def test_full_two_set_workout(self, engine, scheduler, cues):
        engine.start()
        seen = [cursor(engine)]
        while not engine.state.is_finished:
            run_phase(engine, scheduler)
            seen.append(cursor(engine))

        assert seen == [
            (Phase.WORK, 0, 0),
            (Phase.INTERVAL, 0, 0),
            (Phase.WORK, 0, 1),
            (Phase.FINISHED, 0, 1),
        ]
        assert cues.played == [CueKind.FINISH] * 3
        assert engine.is_running is False
        assert scheduler.is_active is False

    def test_single_set_finishes_without_rest(self, qapp, scheduler, cues):
        eng = TimerEngine(
            scheduler=scheduler, cue_player=cues, initial_state=make_state((3, 5, 1)),
        )
        eng.start()
        scheduler.fire(3)
        assert eng.state.is_finished is True
        assert eng.remaining == 0
        assert cues.played == [CueKind.FINISH]

    def test_zero_interval_passes_through_with_its_own_cue(self, qapp, scheduler, cues):
        eng = TimerEngine(
            scheduler=scheduler, cue_player=cues,
            initial_state=make_state((2, 0, 2)),
        )
        eng.start()
        scheduler.fire(2)
        assert cursor(eng) == (Phase.WORK, 0, 1)
        assert eng.remaining == 2
        assert cues.played == [CueKind.FINISH, CueKind.FINISH]

    def test_moves_to_next_timer(self, qapp, scheduler, cues):
        eng = TimerEngine(
            scheduler=scheduler, cue_player=cues,
            initial_state=make_state((2, 1, 1), (4, 1, 1)),
        )
        eng.start()
        scheduler.fire(3)
        assert cursor(eng) == (Phase.WORK, 1, 0)
        assert eng.remaining == 4

    def test_start_at_zero_advances_immediately(self, qapp, scheduler, cues):
        state = replace(make_state((5, 3, 2)), remaining_time=0)
        eng = TimerEngine(scheduler=scheduler, cue_player=cues, initial_state=state)
        eng.start()
        assert cursor(eng) == (Phase.INTERVAL, 0, 0)
        assert cues.played == [CueKind.FINISH]

    def test_negative_remaining_cannot_stall(self, qapp, scheduler, cues):
        state = replace(make_state((5, 3, 1), (4, 1, 1)), remaining_time=-3)
        eng = TimerEngine(scheduler=scheduler, cue_player=cues, initial_state=state)
        eng.start()
        assert cursor(eng) == (Phase.INTERVAL, 0, 0)
        assert eng.remaining == 3
        assert cues.played == [CueKind.FINISH]

    def test_start_after_finish_is_noop(self, qapp, scheduler):
        eng = TimerEngine(scheduler=scheduler, initial_state=make_state((1, 0, 1)))
        eng.start()
        scheduler.fire()
        assert eng.state.is_finished
        eng.start()
        assert eng.is_running is False
        assert scheduler.is_active is False


# ═══════════════════════════════════════════════════════════════════════════
#  CUES
# ═══════════════════════════════════════════════════════════════════════════


class TestCues:

    def test_no_cue_without_exhaustion(self, engine, scheduler, cues):
        engine.start()
        scheduler.fire(5)
        assert cues.played == []

    def test_failing_cue_player_does_not_break_loop(self, qapp, scheduler):
        class Broken:
            def play(self, kind):
                raise RuntimeError("no audio device")

        eng = TimerEngine(
            scheduler=scheduler, cue_player=Broken(), initial_state=make_state((1, 2, 2)),
        )
        eng.start()
        scheduler.fire()
        assert cursor(eng) == (Phase.INTERVAL, 0, 0)

    def test_missing_cue_player_is_tolerated(self, qapp, scheduler):
        eng = TimerEngine(scheduler=scheduler, initial_state=make_state((1, 2, 1)))
        eng.start()
        scheduler.fire()
        assert eng.state.is_finished


# ═══════════════════════════════════════════════════════════════════════════
#  PERSISTENCE
# ═══════════════════════════════════════════════════════════════════════════


class TestPersistence:

    def test_every_change_is_saved(self, engine, store, scheduler):
        engine.start()
        scheduler.fire(2)
        assert store.load().remaining_time == 8

    def test_saved_state_never_resumes_running(self, engine, store):
        engine.start()
        assert store.load().is_running is False

    def test_loads_from_repository(self, qapp, scheduler, store):
        store.save(replace(make_state((40, 5, 1)), remaining_time=12))
        eng = TimerEngine(repository=store, scheduler=scheduler)
        assert eng.remaining == 12

    def test_noop_event_does_not_save(self, qapp, scheduler):
        saves = []

        class Repo:
            def load(self):
                return make_state((10, 5, 1))

            def save(self, state):
                saves.append(state)

        eng = TimerEngine(repository=Repo(), scheduler=scheduler)
        eng.dispatch(Tick())
        eng.stop()
        assert saves == []

    def test_shutdown_stops_and_saves(self, engine, scheduler, store):
        engine.start()
        scheduler.fire()
        engine.shutdown()
        assert scheduler.is_active is False
        assert store.load().remaining_time == 9

    def test_failing_save_does_not_stall_the_loop(self, qapp, scheduler, cues):
        failures = []

        class FlakyRepo:
            def load(self):
                return make_state((2, 3, 1), (4, 1, 1))

            def save(self, state):
                if state.remaining_time == 0 and not failures:
                    failures.append(state)
                    raise RuntimeError("disk full")

        eng = TimerEngine(repository=FlakyRepo(), scheduler=scheduler, cue_player=cues)
        eng.start()
        scheduler.fire(2)
        assert len(failures) == 1
        assert cursor(eng) == (Phase.INTERVAL, 0, 0)
        assert eng.remaining == 3
        assert cues.played == [CueKind.FINISH]
        assert scheduler.is_active is True

    def test_failing_shutdown_save_is_logged(self, qapp, scheduler):
        class Broken:
            def load(self):
                return make_state((5, 1, 1))

            def save(self, state):
                raise RuntimeError("disk full")

        eng = TimerEngine(repository=Broken(), scheduler=scheduler)
        eng.shutdown()
        assert scheduler.is_active is False

    def test_edits_are_saved(self, engine, store):
        engine.dispatch(AddTimer("X"))
        engine.dispatch(UpdateTimer("X", {TimerField.NAME: "Plank"}))
        ids = [(t.id, t.name) for t in store.load().timers]
        assert ids == [("A", ""), ("X", "Plank")]


# ═══════════════════════════════════════════════════════════════════════════
#  SIGNALS
# ═══════════════════════════════════════════════════════════════════════════


class TestSignals:

    def test_state_changed_on_transition(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        assert c.last is engine.state

    def test_state_changed_not_emitted_for_noop(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.stop()
        engine.dispatch(RemoveTimer("A"))
        assert len(c) == 0

    def test_tick_signal_carries_remaining(self, engine, scheduler):
        c = SignalCollector()
        engine.tick.connect(c)
        engine.start()
        scheduler.fire(2)
        assert c.items == [9, 8]

    def test_phase_changed(self, engine, scheduler):
        c = SignalCollector()
        engine.phase_changed.connect(c)
        engine.start()
        run_phase(engine, scheduler)
        run_phase(engine, scheduler)
        assert c.items == [Phase.INTERVAL, Phase.WORK]

    def test_finished_emitted_once(self, engine, scheduler):
        c = SignalCollector()
        engine.finished.connect(c)
        engine.start()
        while not engine.state.is_finished:
            run_phase(engine, scheduler)
        engine.start()
        assert len(c) == 1


# ═══════════════════════════════════════════════════════════════════════════
#  SERIALISED DISPATCH
# ═══════════════════════════════════════════════════════════════════════════


class TestDispatchOrdering:

    def test_dispatch_from_handler_is_queued(self, engine):
        seen = []

        def on_change(state):
            seen.append(state.remaining_time)
            if state.is_running and state.remaining_time == 10:
                engine.dispatch(Tick())
                # Not applied yet: the running transition is still being handled.
                seen.append(("after nested dispatch", engine.state.remaining_time))

        engine.state_changed.connect(on_change)
        engine.start()
        assert seen == [10, ("after nested dispatch", 10), 9]
        assert engine.remaining == 9

    def test_load_state_replaces_session(self, engine):
        other = make_state((30, 10, 3), (15, 0, 1))
        engine.dispatch(LoadState(other))
        assert engine.state is other


# ═══════════════════════════════════════════════════════════════════════════
#  QT SCHEDULER
# ═══════════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestQtTickScheduler:

    def test_start_and_stop(self):
        sched = QtTickScheduler(interval_ms=1000)
        assert sched.is_active is False
        sched.start(lambda: None)
        assert sched.is_active is True
        sched.stop()
        assert sched.is_active is False

    def test_fire_invokes_callback(self):
        calls = []
        sched = QtTickScheduler()
        sched.start(lambda: calls.append(1))
        sched._fire()
        sched.stop()
        assert calls == [1]

    def test_engine_uses_qt_scheduler_by_default(self):
        eng = TimerEngine(initial_state=make_state((5, 5, 1)))
        eng.start()
        assert eng._scheduler.is_active is True
        eng.shutdown()
        assert eng._scheduler.is_active is False
