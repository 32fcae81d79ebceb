"""Tests for the KAI timer engine.

Covers: start/stop/reset, the eight-phase pomodoro cycle, long-break
selection, session recording, simple-timer mode, mode and duration
changes, settings, history operations and the completion signals.
"""

import uuid

import pytest

from kai.core.cycle import Phase
from kai.core.ledger import SessionLedger
from kai.core.models import (
    ActivityLabel, AppSettings, DurationConfig, SessionStatus, SessionType,
    TimerMode,
)
from kai.core.timer_engine import TimerEngine, describe_next_phase

from helpers import (
    BrokenNotifier, ManualTicker, SignalCollector, complete_phase, run_cycle,
)

WORK_SECONDS = 60
SHORT_SECONDS = 60
LONG_SECONDS = 120
SIMPLE_SECONDS = 30


# ==================== Start / stop / reset ====================


class TestStateTransitions:

    def test_initial_state_is_idle(self, engine):
        state = engine.state
        assert not state.is_running
        assert state.mode == TimerMode.POMODORO
        assert state.label == ActivityLabel.STUDY
        assert state.remaining_time == WORK_SECONDS
        assert state.current_cycle_position == 1
        assert state.completed_pomodoros == 0
        assert state.current_group_id is None

    def test_start_runs_the_ticker(self, engine, ticker):
        engine.start()
        assert engine.is_running
        assert ticker.is_active()

    def test_start_mints_group_for_new_cycle(self, engine):
        engine.start()
        state = engine.state
        assert isinstance(state.current_group_id, uuid.UUID)
        assert state.current_cycle_position == 1
        assert state.session_start_time is not None

    def test_start_is_noop_when_running(self, engine, ticker):
        engine.start()
        group = engine.state.current_group_id
        ticker.fire(3)
        engine.start()
        assert engine.remaining_time == WORK_SECONDS - 3
        assert engine.state.current_group_id == group
        assert ticker.start_count == 1

    def test_tick_decrements_remaining(self, engine, ticker):
        engine.start()
        ticker.fire(5)
        assert engine.remaining_time == WORK_SECONDS - 5

    def test_tick_ignored_when_idle(self, engine):
        engine._on_tick()
        assert engine.remaining_time == WORK_SECONDS

    def test_stop_halts_and_keeps_remaining(self, engine, ticker):
        engine.start()
        ticker.fire(10)
        engine.stop()
        assert not engine.is_running
        assert not ticker.is_active()
        assert engine.remaining_time == WORK_SECONDS - 10

    def test_stop_when_idle_records_nothing(self, engine):
        engine.stop()
        assert len(engine.ledger) == 0

    def test_resume_keeps_cycle_group(self, engine, ticker):
        engine.start()
        group = engine.state.current_group_id
        ticker.fire(10)
        engine.stop()
        engine.start()
        assert engine.state.current_group_id == group
        assert engine.remaining_time == WORK_SECONDS - 10

    def test_reset_clears_cycle(self, engine, ticker):
        engine.start()
        complete_phase(engine, ticker)
        engine.start()
        ticker.fire(5)

        engine.reset()

        state = engine.state
        assert not state.is_running
        assert state.remaining_time == WORK_SECONDS
        assert state.current_cycle_position == 1
        assert state.completed_pomodoros == 0
        assert state.current_group_id is None
        assert not state.is_cycle_completed

    def test_state_is_a_snapshot(self, engine):
        snapshot = engine.state
        snapshot.remaining_time = 1
        snapshot.is_running = True
        assert engine.remaining_time == WORK_SECONDS
        assert not engine.is_running


# ==================== Session recording ====================


class TestSessionRecording:

    def test_stop_records_interrupted_session(self, engine, ticker, clock):
        engine.start()
        started = clock()
        ticker.fire(12)
        clock.advance(seconds=12)
        engine.stop()

        (session,) = engine.ledger.sessions
        assert not session.completed
        assert session.status == SessionStatus.INTERRUPTED
        assert session.duration == 12
        assert session.start_time == started
        assert session.end_time == clock()
        assert session.type == SessionType.POMODORO
        assert session.cycle_position == 1

    def test_stop_without_ticks_records_aborted_session(self, engine):
        engine.start()
        engine.stop()
        (session,) = engine.ledger.sessions
        assert session.duration == 0
        assert session.status == SessionStatus.ABORTED

    def test_natural_completion_records_completed_session(self, engine, ticker):
        engine.start()
        group = engine.state.current_group_id
        complete_phase(engine, ticker)

        (session,) = engine.ledger.sessions
        assert session.completed
        assert session.duration == WORK_SECONDS
        assert session.group_id == group
        assert session.cycle_position == 1

    def test_records_at_most_once_per_start(self, engine, ticker):
        engine.start()
        ticker.fire(4)
        engine.stop()
        engine.stop()
        engine.cleanup()
        assert len(engine.ledger) == 1

    def test_tick_after_completion_does_not_record_again(self, engine, ticker):
        engine.start()
        callback = ticker.callback
        complete_phase(engine, ticker)
        # A tick already in flight when the phase ended
        callback()
        assert len(engine.ledger) == 1

    def test_label_is_recorded(self, engine, ticker):
        engine.set_label(ActivityLabel.HEALTH)
        complete_phase(engine, ticker)
        assert engine.ledger.sessions[0].label == ActivityLabel.HEALTH

    def test_sessions_persist(self, engine, ticker, storage):
        complete_phase(engine, ticker)
        engine.start()
        engine.stop()
        assert SessionLedger(storage).sessions == engine.ledger.sessions

    def test_break_duration_counts_break_length(self, make_engine, ticker):
        engine = make_engine(DurationConfig(
            pomodoro_minutes=2, short_break_minutes=1, long_break_minutes=3,
        ))
        complete_phase(engine, ticker)
        engine.start()
        ticker.fire(20)
        engine.stop()

        interrupted_break = engine.ledger.sessions[0]
        assert interrupted_break.cycle_position == 2
        assert interrupted_break.duration == 20


# ==================== Pomodoro cycle ====================


class TestPomodoroCycle:

    def test_positions_walk_through_cycle(self, engine, ticker):
        positions = []
        counts = []
        for _ in range(8):
            complete_phase(engine, ticker)
            positions.append(engine.state.current_cycle_position)
            counts.append(engine.state.completed_pomodoros)

        assert positions == [2, 3, 4, 5, 6, 7, 8, 0]
        assert counts == [1, 1, 2, 2, 3, 3, 4, 0]

    def test_phase_lengths_across_cycle(self, engine, ticker):
        lengths = []
        for _ in range(8):
            lengths.append(engine.remaining_time)
            complete_phase(engine, ticker)

        assert lengths == [
            WORK_SECONDS, SHORT_SECONDS, WORK_SECONDS, SHORT_SECONDS,
            WORK_SECONDS, SHORT_SECONDS, WORK_SECONDS, LONG_SECONDS,
        ]

    def test_position_eight_is_long_break(self, engine, ticker):
        for _ in range(7):
            complete_phase(engine, ticker)
        state = engine.state
        assert state.current_cycle_position == 8
        assert state.phase == Phase.LONG_BREAK
        assert state.remaining_time == LONG_SECONDS

    def test_cycle_records_one_group(self, engine, ticker):
        run_cycle(engine, ticker)

        sessions = engine.ledger.sessions
        assert len(sessions) == 8
        assert len({s.group_id for s in sessions}) == 1
        assert sorted(s.cycle_position for s in sessions) == list(range(1, 9))

        (group,) = engine.grouped_sessions()
        assert group.is_fully_completed
        assert [s.cycle_position for s in group.sessions] == list(range(1, 9))

    def test_finished_cycle_waits_for_new_start(self, engine, ticker):
        run_cycle(engine, ticker)
        state = engine.state
        assert state.current_cycle_position == 0
        assert state.completed_pomodoros == 0
        assert state.current_group_id is None
        assert state.remaining_time == WORK_SECONDS
        assert not state.is_running

    def test_next_start_opens_new_group(self, engine, ticker):
        run_cycle(engine, ticker)
        first_group = engine.ledger.sessions[0].group_id

        engine.start()
        state = engine.state
        assert state.current_cycle_position == 1
        assert state.current_group_id not in (None, first_group)

    def test_completion_does_not_auto_start(self, engine, ticker):
        complete_phase(engine, ticker)
        assert not engine.is_running
        assert not ticker.is_active()
        assert engine.state.is_cycle_completed

    def test_next_start_clears_completed_flag(self, engine, ticker):
        complete_phase(engine, ticker)
        engine.start()
        assert not engine.state.is_cycle_completed


class TestDefaultDurationsScenario:

    @pytest.fixture
    def engine(self, make_engine):
        return make_engine(DurationConfig(
            pomodoro_minutes=25, short_break_minutes=5, long_break_minutes=15,
        ))

    def test_first_pomodoro_then_short_break(self, engine, ticker):
        engine.start()
        complete_phase(engine, ticker)

        state = engine.state
        assert state.current_cycle_position == 2
        assert state.completed_pomodoros == 1
        assert state.remaining_time == 5 * 60

        session = engine.ledger.sessions[0]
        assert session.type == SessionType.POMODORO
        assert session.completed
        assert session.cycle_position == 1
        assert session.duration == 25 * 60

    def test_long_break_after_fourth_pomodoro(self, engine, ticker):
        for _ in range(7):
            complete_phase(engine, ticker)
        assert engine.remaining_time == 15 * 60


# ==================== Simple timer ====================


class TestSimpleTimer:

    @pytest.fixture
    def engine(self, make_engine):
        engine = make_engine()
        engine.set_mode(TimerMode.SIMPLE)
        return engine

    def test_uses_simple_duration(self, engine):
        assert engine.remaining_time == SIMPLE_SECONDS
        assert engine.state.phase == Phase.SIMPLE

    def test_start_does_not_open_group(self, engine):
        engine.start()
        assert engine.state.current_group_id is None

    def test_completion_records_ungrouped_session(self, engine, ticker):
        complete_phase(engine, ticker)

        (session,) = engine.ledger.sessions
        assert session.type == SessionType.SIMPLE
        assert session.completed
        assert session.duration == SIMPLE_SECONDS
        assert session.group_id is None
        assert session.cycle_position is None

    def test_completion_does_not_advance(self, engine, ticker):
        complete_phase(engine, ticker)
        state = engine.state
        assert not state.is_running
        assert state.remaining_time == 0
        assert state.current_cycle_position == 1
        assert state.completed_pomodoros == 0

    def test_restart_after_completion_reloads_duration(self, engine, ticker):
        complete_phase(engine, ticker)
        engine.start()
        assert engine.remaining_time == SIMPLE_SECONDS

    def test_interrupted_session_is_ungrouped(self, engine, ticker):
        engine.start()
        ticker.fire(3)
        engine.stop()
        session = engine.ledger.sessions[0]
        assert session.group_id is None
        assert session.cycle_position is None

    def test_each_run_is_its_own_group(self, engine, ticker):
        complete_phase(engine, ticker)
        complete_phase(engine, ticker)
        groups = list(engine.grouped_sessions())
        assert len(groups) == 2
        assert all(g.is_simple for g in groups)

    def test_zero_length_timer_completes_on_first_tick(self, make_engine, ticker):
        engine = make_engine(DurationConfig(simple_minutes=0, simple_seconds=0))
        engine.set_mode(TimerMode.SIMPLE)
        engine.start()
        ticker.fire()
        assert not engine.is_running
        assert engine.ledger.sessions[0].completed


# ==================== Mode and duration changes ====================


class TestModeChanges:

    def test_same_mode_is_noop(self, engine):
        states = SignalCollector(engine.state_changed)
        engine.set_mode(TimerMode.POMODORO)
        assert states.count == 0

    def test_switch_while_idle_reloads_duration(self, engine):
        engine.set_mode(TimerMode.SIMPLE)
        assert engine.remaining_time == SIMPLE_SECONDS
        engine.set_mode(TimerMode.POMODORO)
        assert engine.remaining_time == WORK_SECONDS

    def test_switch_while_idle_clears_cycle(self, engine, ticker):
        complete_phase(engine, ticker)
        engine.set_mode(TimerMode.SIMPLE)
        state = engine.state
        assert state.current_cycle_position == 1
        assert state.completed_pomodoros == 0
        assert state.current_group_id is None

    def test_switch_while_running_leaves_countdown(self, engine, ticker):
        engine.start()
        ticker.fire(5)
        engine.set_mode(TimerMode.SIMPLE)
        assert engine.mode == TimerMode.SIMPLE
        assert engine.is_running
        assert engine.remaining_time == WORK_SECONDS - 5


class TestDurationChanges:

    def test_idle_change_applies_to_pending_work(self, engine):
        engine.set_pomodoro_minutes(3)
        assert engine.remaining_time == 180

    def test_idle_change_applies_to_pending_break(self, engine, ticker):
        complete_phase(engine, ticker)
        engine.set_short_break_minutes(4)
        assert engine.remaining_time == 240

    def test_idle_change_at_position_eight_loads_pomodoro(self, engine, ticker):
        for _ in range(7):
            complete_phase(engine, ticker)
        assert engine.remaining_time == LONG_SECONDS

        engine.set_pomodoro_minutes(3)
        assert engine.remaining_time == 180
        engine.set_long_break_minutes(5)
        assert engine.remaining_time == 180

    def test_elapsed_after_position_eight_recompute(self, engine, ticker):
        for _ in range(7):
            complete_phase(engine, ticker)
        engine.set_pomodoro_minutes(3)

        engine.start()
        ticker.fire(10)
        engine.stop()

        session = engine.ledger.sessions[0]
        assert session.cycle_position == 8
        assert session.duration == 10

    def test_idle_change_after_cycle_uses_pomodoro(self, engine, ticker):
        run_cycle(engine, ticker)
        engine.set_pomodoro_minutes(4)
        assert engine.remaining_time == 240

    def test_running_change_leaves_countdown(self, engine, ticker):
        engine.start()
        ticker.fire(2)
        engine.set_pomodoro_minutes(10)
        assert engine.remaining_time == WORK_SECONDS - 2
        assert engine.durations.pomodoro_minutes == 10

    def test_simple_duration_setter(self, engine):
        engine.set_mode(TimerMode.SIMPLE)
        engine.set_simple_duration(1, 2, 3)
        assert engine.remaining_time == 3723

    def test_changes_persist(self, engine, storage):
        engine.set_simple_duration(0, 45, 10)
        engine.set_long_break_minutes(20)

        reloaded = TimerEngine(storage, ticker=ManualTicker())
        assert reloaded.durations == engine.durations
        assert reloaded.durations.long_break_minutes == 20
        assert reloaded.durations.simple_seconds == 10


class TestSettings:

    def test_apply_settings_persists(self, engine, storage):
        engine.apply_settings(AppSettings(
            auto_open_window=False, notification_enabled=False, sound_enabled=True,
        ))
        reloaded = TimerEngine(storage, ticker=ManualTicker())
        assert reloaded.settings == engine.settings
        assert not reloaded.settings.auto_open_window

    def test_set_auto_open_window(self, engine):
        engine.set_auto_open_window(False)
        assert not engine.settings.auto_open_window
        assert engine.settings.notification_enabled


# ==================== History ====================


class TestHistory:

    def test_delete_group_removes_cycle(self, engine, ticker):
        complete_phase(engine, ticker)
        complete_phase(engine, ticker)
        engine.reset()
        engine.set_mode(TimerMode.SIMPLE)
        complete_phase(engine, ticker)

        cycle_id = engine.ledger.sessions[-1].group_id
        history = SignalCollector(engine.history_changed)

        assert engine.delete_group(cycle_id) == 2
        assert history.count == 1
        assert len(engine.ledger) == 1
        assert engine.ledger.sessions[0].type == SessionType.SIMPLE

    def test_delete_unknown_group_is_silent(self, engine, ticker):
        complete_phase(engine, ticker)
        history = SignalCollector(engine.history_changed)
        assert engine.delete_group(uuid.uuid4()) == 0
        assert history.count == 0
        assert len(engine.ledger) == 1

    def test_clear_all(self, engine, ticker):
        complete_phase(engine, ticker)
        history = SignalCollector(engine.history_changed)
        engine.clear_all()
        assert len(engine.ledger) == 0
        assert history.count == 1

    def test_statistics(self, engine, ticker):
        complete_phase(engine, ticker)
        engine.start()
        ticker.fire(15)
        engine.stop()

        stats = engine.statistics()
        assert stats.total_sessions == 2
        assert stats.completed_sessions == 1
        assert stats.total_seconds == WORK_SECONDS + 15


# ==================== Signals and notifications ====================


class TestSignals:

    def test_state_changed_on_every_tick(self, engine, ticker):
        engine.start()
        states = SignalCollector(engine.state_changed)
        ticker.fire(3)
        assert states.count == 3
        assert states.last.remaining_time == WORK_SECONDS - 3

    def test_session_recorded_carries_session(self, engine, ticker):
        recorded = SignalCollector(engine.session_recorded)
        history = SignalCollector(engine.history_changed)
        complete_phase(engine, ticker)
        assert recorded.count == 1
        assert recorded.last == engine.ledger.sessions[0]
        assert history.count == 1

    def test_phase_completed_carries_next_phase(self, engine, ticker):
        completed = SignalCollector(engine.phase_completed)
        complete_phase(engine, ticker)
        snapshot = completed.last
        assert snapshot.current_cycle_position == 2
        assert snapshot.phase == Phase.SHORT_BREAK
        assert snapshot.is_cycle_completed

    def test_completion_asks_for_foreground_and_window(self, engine, ticker):
        foreground = SignalCollector(engine.foreground_requested)
        window = SignalCollector(engine.window_open_requested)
        complete_phase(engine, ticker)
        assert foreground.count == 1
        assert window.count == 1

    def test_window_not_requested_when_auto_open_off(self, engine, ticker):
        engine.set_auto_open_window(False)
        foreground = SignalCollector(engine.foreground_requested)
        window = SignalCollector(engine.window_open_requested)
        complete_phase(engine, ticker)
        assert foreground.count == 1
        assert window.count == 0

    def test_stop_does_not_signal_completion(self, engine, ticker):
        completed = SignalCollector(engine.phase_completed)
        engine.start()
        ticker.fire(2)
        engine.stop()
        assert completed.count == 0


class TestNotifications:

    def test_completion_notifies(self, engine, ticker, notifier):
        complete_phase(engine, ticker)
        assert notifier.messages == [
            ("Session complete", "Your Study session has finished!"),
        ]

    def test_interruption_does_not_notify(self, engine, ticker, notifier):
        engine.start()
        engine.stop()
        assert notifier.messages == []

    def test_broken_notifier_does_not_break_completion(self, make_engine, ticker):
        engine = make_engine(notifier=BrokenNotifier())
        window = SignalCollector(engine.window_open_requested)
        complete_phase(engine, ticker)
        assert engine.state.current_cycle_position == 2
        assert len(engine.ledger) == 1
        assert window.count == 1

    def test_no_notifier(self, make_engine, ticker):
        engine = make_engine(notifier=None)
        complete_phase(engine, ticker)
        assert len(engine.ledger) == 1


class TestDescribeNextPhase:

    def test_after_pomodoro(self, engine, ticker):
        complete_phase(engine, ticker)
        assert describe_next_phase(engine.state) == (
            "Pomodoro complete! Next: short break of 1 minutes"
        )

    def test_before_long_break(self, engine, ticker):
        for _ in range(7):
            complete_phase(engine, ticker)
        assert describe_next_phase(engine.state) == (
            "Pomodoro complete! Next: long break of 2 minutes"
        )

    def test_after_break(self, engine, ticker):
        complete_phase(engine, ticker)
        complete_phase(engine, ticker)
        assert describe_next_phase(engine.state) == (
            "Break over! Next: pomodoro of 1 minutes"
        )

    def test_after_cycle(self, engine, ticker):
        run_cycle(engine, ticker)
        assert describe_next_phase(engine.state) == (
            "Pomodoro cycle complete! Start a new cycle?"
        )

    def test_simple_timer(self, engine, ticker):
        engine.set_mode(TimerMode.SIMPLE)
        complete_phase(engine, ticker)
        assert describe_next_phase(engine.state) == (
            "Timer finished! Start another timer?"
        )
