"""
Timer engine for the KAI timer.
Implements the pomodoro / simple-timer state machine on top of a
one-second ticker and records every finished phase in the session ledger.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterator, Optional

from PySide6.QtCore import QObject, Signal

from .clock import QtTicker, Ticker
from .cycle import CYCLE_LENGTH, Phase, advance
from .ledger import LedgerStats, SessionLedger
from .models import (
    ActivityLabel, AppSettings, DurationConfig, EngineState, Session,
    SessionGroup, SessionType, TimerMode
)
from .storage import Storage

logger = logging.getLogger(__name__)


class TimerEngine(QObject):
    """
    Core timer engine.

    States:
        Idle: nothing counting down (fresh, stopped, or after a completion)
        Running: the ticker is decrementing remaining_time once per second

    A completion passes through a transient "cycle completed" state, picks
    the next phase and lands back in Idle; the next phase starts on the
    next start().

    Signals:
        state_changed: Emitted with an EngineState snapshot on every tick and transition
        session_recorded: Emitted with the Session written to the ledger
        history_changed: Emitted whenever the session history changes
        phase_completed: Emitted with the post-completion snapshot when a phase runs out
        foreground_requested: Ask the UI to bring the app forward after a completion
        window_open_requested: Ask the UI to open the main window (auto-open option)
    """

    # Signals
    state_changed = Signal(EngineState)
    session_recorded = Signal(Session)
    history_changed = Signal()
    phase_completed = Signal(EngineState)
    foreground_requested = Signal()
    window_open_requested = Signal()

    def __init__(
        self,
        storage: Storage,
        ticker: Optional[Ticker] = None,
        notifier=None,
        now: Callable[[], datetime] = datetime.now,
        parent: Optional[QObject] = None
    ):
        """
        Initialize the timer engine.

        Args:
            storage: Storage for history, durations and settings.
            ticker: One-second tick source. Defaults to a QTimer-backed ticker.
            notifier: Object with a notify(title, body) method, or None.
            now: Clock used to timestamp sessions.
            parent: Optional Qt parent object.
        """
        super().__init__(parent)

        self.storage = storage
        self.ledger = SessionLedger(storage)
        self._durations = storage.get_durations()
        self._settings = storage.get_settings()

        self._ticker = ticker if ticker is not None else QtTicker(self)
        self._notifier = notifier
        self._now = now

        self._state = EngineState()
        # Full length of the phase last loaded into the countdown
        self._phase_seconds = 0
        self._load_phase(self._mode_seconds())

    # ==================== Read access ====================

    @property
    def state(self) -> EngineState:
        """Snapshot of the current state."""
        return replace(self._state)

    @property
    def durations(self) -> DurationConfig:
        return replace(self._durations)

    @property
    def settings(self) -> AppSettings:
        return replace(self._settings)

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def mode(self) -> TimerMode:
        return self._state.mode

    @property
    def label(self) -> ActivityLabel:
        return self._state.label

    @property
    def remaining_time(self) -> int:
        return self._state.remaining_time

    # ==================== Commands ====================

    def start(self):
        """Start (or resume) the countdown of the current phase."""
        state = self._state
        if state.is_running:
            return

        state.is_running = True
        state.is_cycle_completed = False
        state.session_start_time = self._now()

        if state.mode == TimerMode.POMODORO and state.current_group_id is None:
            state.current_group_id = uuid.uuid4()
            state.current_cycle_position = 1

        if state.remaining_time <= 0:
            self._load_phase(self._mode_seconds())

        state.initial_time = state.remaining_time
        self._phase_seconds = max(self._phase_seconds, state.remaining_time)

        logger.debug(
            "Started %s phase at position %d with %ds left",
            state.phase.value, state.current_cycle_position, state.remaining_time
        )
        self._ticker.start(self._on_tick)
        self._emit_state()

    def stop(self):
        """Stop the countdown and record the phase as not completed."""
        if not self._state.is_running:
            return

        self._halt()
        self._record_session(completed=False)
        self._emit_state()

    def reset(self):
        """Stop, reload the mode's duration and clear cycle progress."""
        self.stop()

        self._load_phase(self._mode_seconds())

        state = self._state
        state.current_cycle_position = 1
        state.completed_pomodoros = 0
        state.current_group_id = None
        state.is_cycle_completed = False
        self._emit_state()

    def set_mode(self, mode: TimerMode):
        """
        Switch between pomodoro and simple timer.
        While idle, cycle progress is cleared in either direction and the
        new mode's duration is loaded. While running, only the mode is
        stored; the countdown is untouched.
        """
        state = self._state
        if mode == state.mode:
            return

        state.mode = mode
        if state.is_running:
            logger.debug("Mode changed to %s while running", mode.value)
            self._emit_state()
            return

        self._clear_cycle()
        self._load_phase(self._mode_seconds())
        self._emit_state()

    def set_label(self, label: ActivityLabel):
        """Set the activity label used for subsequent sessions."""
        if label == self._state.label:
            return
        self._state.label = label
        self._emit_state()

    # ==================== Durations & settings ====================

    def set_durations(self, durations: DurationConfig):
        """
        Replace the duration config and persist it.
        While idle, the pending phase picks up its new length at once.
        """
        self._durations = replace(durations)
        self.storage.save_durations(self._durations)

        if self._state.is_running:
            return

        self._load_phase(self._pending_phase_seconds())
        self._emit_state()

    def set_pomodoro_minutes(self, minutes: int):
        self.set_durations(replace(self._durations, pomodoro_minutes=minutes))

    def set_short_break_minutes(self, minutes: int):
        self.set_durations(replace(self._durations, short_break_minutes=minutes))

    def set_long_break_minutes(self, minutes: int):
        self.set_durations(replace(self._durations, long_break_minutes=minutes))

    def set_simple_duration(self, hours: int, minutes: int, seconds: int):
        self.set_durations(replace(
            self._durations,
            simple_hours=hours,
            simple_minutes=minutes,
            simple_seconds=seconds
        ))

    def apply_settings(self, settings: AppSettings):
        """Store and persist application settings."""
        self._settings = replace(settings)
        self.storage.save_settings(self._settings)

    def set_auto_open_window(self, enabled: bool):
        self.apply_settings(replace(self._settings, auto_open_window=enabled))

    # ==================== History ====================

    def grouped_sessions(self) -> Iterator[SessionGroup]:
        return self.ledger.grouped_sessions()

    def statistics(self) -> LedgerStats:
        return self.ledger.statistics()

    def delete_group(self, group_id: uuid.UUID) -> int:
        """Delete a pomodoro cycle or a standalone session from history."""
        removed = self.ledger.delete_group(group_id)
        if removed:
            self.history_changed.emit()
        return removed

    def clear_all(self):
        """Delete the whole history."""
        self.ledger.clear_all()
        self.history_changed.emit()

    # ==================== Internals ====================

    def _on_tick(self):
        """Handle one ticker beat."""
        state = self._state
        if not state.is_running:
            return

        if state.remaining_time > 0:
            state.remaining_time -= 1
            self._emit_state()
        else:
            self._on_phase_complete()

    def _on_phase_complete(self):
        """Handle a phase that ran down to zero."""
        self._halt()

        state = self._state
        state.is_cycle_completed = True
        self._record_session(completed=True)

        if state.mode == TimerMode.SIMPLE:
            # The simple timer never rolls over into another run
            self._load_phase(0)
            state.current_group_id = None
        else:
            step = advance(state.current_cycle_position, state.completed_pomodoros)
            state.current_cycle_position = step.position
            state.completed_pomodoros = step.completed_pomodoros
            if step.cycle_finished:
                state.current_group_id = None
                self._load_phase(self._durations.pomodoro_seconds)
            else:
                self._load_phase(self._durations.seconds_for_phase(state.phase))

        snapshot = self.state
        logger.debug(
            "Phase complete, next position %d (%s)",
            snapshot.current_cycle_position, snapshot.phase.value
        )
        self.state_changed.emit(snapshot)
        self.phase_completed.emit(snapshot)

        self._notify_completion()
        self.foreground_requested.emit()
        if self._settings.auto_open_window:
            self.window_open_requested.emit()

    def _halt(self):
        self._ticker.stop()
        self._state.is_running = False

    def _record_session(self, completed: bool):
        """Write the phase in flight to the ledger, at most once per start()."""
        state = self._state
        start_time = state.session_start_time
        if start_time is None:
            return
        state.session_start_time = None

        is_pomodoro = state.mode == TimerMode.POMODORO
        session = Session(
            start_time=start_time,
            end_time=self._now(),
            duration=max(0, self._phase_seconds - state.remaining_time),
            type=SessionType.POMODORO if is_pomodoro else SessionType.SIMPLE,
            label=state.label,
            completed=completed,
            group_id=state.current_group_id if is_pomodoro else None,
            cycle_position=state.current_cycle_position if is_pomodoro else None
        )

        self.ledger.add(session)
        self.session_recorded.emit(session)
        self.history_changed.emit()

    def _notify_completion(self):
        if self._notifier is None:
            return
        try:
            self._notifier.notify(
                "Session complete",
                f"Your {self._state.label.value} session has finished!"
            )
        except Exception as e:
            logger.warning("Completion notification failed: %s", e)

    def _clear_cycle(self):
        self._state.current_cycle_position = 1
        self._state.completed_pomodoros = 0
        self._state.current_group_id = None

    def _mode_seconds(self) -> int:
        """Configured duration for the current mode (a pomodoro in pomodoro mode)."""
        if self._state.mode == TimerMode.SIMPLE:
            return self._durations.simple_total_seconds
        return self._durations.pomodoro_seconds

    def _pending_phase_seconds(self) -> int:
        """
        Duration to show while idle after a config change.
        Position 8 and beyond counts as a pending reset and shows a pomodoro.
        """
        state = self._state
        if state.mode == TimerMode.SIMPLE:
            return self._durations.simple_total_seconds
        if state.current_cycle_position >= CYCLE_LENGTH:
            return self._durations.pomodoro_seconds
        return self._durations.seconds_for_phase(state.phase)

    def _load_phase(self, seconds: int):
        """Put a full phase of ``seconds`` on the countdown."""
        self._state.remaining_time = seconds
        self._state.initial_time = seconds
        self._phase_seconds = seconds

    def _emit_state(self):
        self.state_changed.emit(self.state)

    def cleanup(self):
        """Cleanup resources. Call before application exit."""
        if self._state.is_running:
            self.stop()
        self._ticker.stop()


def describe_next_phase(state: EngineState) -> str:
    """Text for the prompt shown after a phase completes."""
    if state.mode == TimerMode.SIMPLE:
        return "Timer finished! Start another timer?"

    if state.current_cycle_position == 0:
        return "Pomodoro cycle complete! Start a new cycle?"

    minutes = state.remaining_time // 60
    phase = state.phase
    if phase.is_break:
        return f"Pomodoro complete! Next: {phase.title.lower()} of {minutes} minutes"
    return f"Break over! Next: {Phase.WORK.title.lower()} of {minutes} minutes"
