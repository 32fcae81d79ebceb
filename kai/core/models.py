"""
Data models for the KAI timer.
Uses dataclasses for clean, type-annotated data structures.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .cycle import Phase, phase_for_position


class TimerMode(Enum):
    """Which kind of timer the engine is running."""
    POMODORO = "pomodoro"
    SIMPLE = "simple"


class SessionType(Enum):
    """Type of a recorded session."""
    POMODORO = "pomodoro"
    SIMPLE = "simple"


class ActivityLabel(Enum):
    """Activity category a session is filed under."""
    STUDY = "Study"
    WORK = "Work"
    HEALTH = "Health"
    LEISURE = "Leisure"
    READING = "Reading"


class SessionStatus(Enum):
    """Outcome of a recorded session."""
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Session:
    """
    Record of one timed phase.
    Created once when the phase ends and never changed afterwards.
    """
    start_time: datetime
    end_time: datetime
    duration: int  # elapsed seconds
    type: SessionType
    label: ActivityLabel
    completed: bool
    group_id: Optional[uuid.UUID] = None  # pomodoro sessions only
    cycle_position: Optional[int] = None  # 1..8, pomodoro sessions only
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def status(self) -> SessionStatus:
        if self.completed:
            return SessionStatus.COMPLETED
        if self.duration > 0:
            return SessionStatus.INTERRUPTED
        return SessionStatus.ABORTED

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dict."""
        return {
            "id": str(self.id),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
            "type": self.type.value,
            "label": self.label.value,
            "completed": self.completed,
            "group_id": str(self.group_id) if self.group_id else None,
            "cycle_position": self.cycle_position,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """
        Build a session from a dict produced by to_dict().

        Raises:
            KeyError, ValueError, TypeError, OverflowError: If the data is malformed.
        """
        group_id = data.get("group_id")
        cycle_position = data.get("cycle_position")
        return cls(
            id=uuid.UUID(data["id"]),
            start_time=_parse_local_time(data["start_time"]),
            end_time=_parse_local_time(data["end_time"]),
            duration=max(0, int(data["duration"])),
            type=SessionType(data["type"]),
            label=ActivityLabel(data["label"]),
            completed=bool(data["completed"]),
            group_id=uuid.UUID(group_id) if group_id else None,
            cycle_position=int(cycle_position) if cycle_position is not None else None,
        )


def _parse_local_time(text: str) -> datetime:
    """Parse an ISO timestamp as naive local time, converting any UTC offset."""
    value = datetime.fromisoformat(text)
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class SessionGroup:
    """
    A pomodoro cycle (sessions sharing a group id) or a single
    simple-timer session shown on its own.
    Derived from the session history on every read.
    """
    id: uuid.UUID
    label: ActivityLabel
    start_time: datetime
    end_time: datetime
    sessions: Tuple[Session, ...]

    @property
    def total_duration(self) -> int:
        return sum(s.duration for s in self.sessions)

    @property
    def completed_count(self) -> int:
        return sum(1 for s in self.sessions if s.completed)

    @property
    def interrupted_count(self) -> int:
        return sum(1 for s in self.sessions if not s.completed and s.duration > 0)

    @property
    def is_fully_completed(self) -> bool:
        return bool(self.sessions) and all(s.completed for s in self.sessions)

    @property
    def is_simple(self) -> bool:
        return len(self.sessions) == 1 and self.sessions[0].type == SessionType.SIMPLE


@dataclass
class DurationConfig:
    """Configured phase lengths."""
    pomodoro_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    simple_hours: int = 0
    simple_minutes: int = 25
    simple_seconds: int = 0

    def __post_init__(self):
        """Clamp values into usable ranges."""
        self.pomodoro_minutes = max(1, int(self.pomodoro_minutes))
        self.short_break_minutes = max(1, int(self.short_break_minutes))
        self.long_break_minutes = max(1, int(self.long_break_minutes))
        self.simple_hours = max(0, int(self.simple_hours))
        self.simple_minutes = min(59, max(0, int(self.simple_minutes)))
        self.simple_seconds = min(59, max(0, int(self.simple_seconds)))

    @property
    def pomodoro_seconds(self) -> int:
        return self.pomodoro_minutes * 60

    @property
    def short_break_seconds(self) -> int:
        return self.short_break_minutes * 60

    @property
    def long_break_seconds(self) -> int:
        return self.long_break_minutes * 60

    @property
    def simple_total_seconds(self) -> int:
        return self.simple_hours * 3600 + self.simple_minutes * 60 + self.simple_seconds

    def seconds_for_phase(self, phase: Phase) -> int:
        """Return the configured length of a pomodoro phase."""
        if phase == Phase.LONG_BREAK:
            return self.long_break_seconds
        if phase == Phase.SHORT_BREAK:
            return self.short_break_seconds
        return self.pomodoro_seconds


@dataclass
class AppSettings:
    """Application settings stored alongside the history."""
    auto_open_window: bool = True
    notification_enabled: bool = True
    sound_enabled: bool = True


@dataclass
class EngineState:
    """
    Current engine state.
    Emitted as a snapshot to UI components on every transition and tick.
    """
    mode: TimerMode = TimerMode.POMODORO
    label: ActivityLabel = ActivityLabel.STUDY
    remaining_time: int = 0
    initial_time: int = 0
    is_running: bool = False
    is_cycle_completed: bool = False
    current_cycle_position: int = 1
    completed_pomodoros: int = 0
    current_group_id: Optional[uuid.UUID] = None
    session_start_time: Optional[datetime] = None

    @property
    def phase(self) -> Phase:
        """Phase the timer is currently on (or about to start)."""
        if self.mode == TimerMode.SIMPLE:
            return Phase.SIMPLE
        return phase_for_position(self.current_cycle_position, self.completed_pomodoros)

    @property
    def progress(self) -> float:
        """Return progress of the active phase as a fraction (0-1)."""
        if self.initial_time <= 0:
            return 0.0
        elapsed = self.initial_time - self.remaining_time
        return min(1.0, max(0.0, elapsed / self.initial_time))

    def format_remaining(self) -> str:
        """Format remaining time as MM:SS, or H:MM:SS past an hour."""
        return format_seconds(self.remaining_time)


def format_seconds(seconds: int) -> str:
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_duration(seconds: int) -> str:
    """Format a duration as e.g. '1h 05m' or '12m 30s'."""
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m {secs:02d}s"
