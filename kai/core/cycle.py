"""Pomodoro cycle rules.

A cycle has eight positions: odd positions are work blocks, even
positions are breaks, and position 8 is the long break that ends the
cycle. Position 0 means the long break has finished and the next start
opens a new cycle.
"""
from dataclasses import dataclass
from enum import Enum

CYCLE_LENGTH = 8
POMODOROS_PER_LONG_BREAK = 4


class Phase(Enum):
    """Kind of interval the timer is counting down."""
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"
    SIMPLE = "simple"

    @property
    def is_break(self) -> bool:
        return self in (Phase.SHORT_BREAK, Phase.LONG_BREAK)

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES = {
    Phase.WORK: "Pomodoro",
    Phase.SHORT_BREAK: "Short break",
    Phase.LONG_BREAK: "Long break",
    Phase.SIMPLE: "Simple timer",
}


@dataclass(frozen=True)
class CycleStep:
    """Result of finishing the phase at some cycle position."""

    position: int
    completed_pomodoros: int
    cycle_finished: bool


def is_long_break_due(completed_pomodoros: int) -> bool:
    return completed_pomodoros > 0 and completed_pomodoros % POMODOROS_PER_LONG_BREAK == 0


def phase_for_position(position: int, completed_pomodoros: int) -> Phase:
    """Return the phase that runs at ``position``.

    The long break wins over the short break whenever both apply.
    """
    if position <= 0:
        return Phase.WORK
    if position >= CYCLE_LENGTH or is_long_break_due(completed_pomodoros):
        return Phase.LONG_BREAK
    if position % 2 == 0:
        return Phase.SHORT_BREAK
    return Phase.WORK


def advance(position: int, completed_pomodoros: int) -> CycleStep:
    """Move past the phase that just finished at ``position``.

    Finishing the long break wraps the cycle to position 0 and clears the
    pomodoro count. Otherwise the position moves forward by one and the
    count goes up when the new position is a break (a work block ended).
    """
    if position >= CYCLE_LENGTH:
        return CycleStep(position=0, completed_pomodoros=0, cycle_finished=True)

    position += 1
    if position % 2 == 0:
        completed_pomodoros += 1
    return CycleStep(
        position=position,
        completed_pomodoros=completed_pomodoros,
        cycle_finished=False,
    )
