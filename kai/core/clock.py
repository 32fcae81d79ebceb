"""
One-second tick source for the timer engine.

The engine owns a Ticker handle and never talks to QTimer directly, so
tests can swap in a ticker they fire by hand.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, QTimer

TICK_INTERVAL_MS = 1000


class Ticker(ABC):
    """Abstract cancellable repeating tick."""

    @abstractmethod
    def start(self, callback: Callable[[], None]):
        """Start calling ``callback`` once per interval. No-op if active."""
        pass

    @abstractmethod
    def stop(self):
        """Stop ticking. The callback is not called again after this."""
        pass

    @abstractmethod
    def is_active(self) -> bool:
        pass


class QtTicker(Ticker):
    """
    Ticker backed by a QTimer on the GUI thread.
    Keeps ticking while windows are hidden; only the event loop matters.
    """

    def __init__(self, parent: Optional[QObject] = None, interval_ms: int = TICK_INTERVAL_MS):
        self._callback: Optional[Callable[[], None]] = None
        self._timer = QTimer(parent)
        self._timer.setInterval(interval_ms)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._on_timeout)

    def start(self, callback: Callable[[], None]):
        if self._timer.isActive():
            return
        self._callback = callback
        self._timer.start()

    def stop(self):
        if not self._timer.isActive():
            return
        self._timer.stop()
        self._callback = None

    def is_active(self) -> bool:
        return self._timer.isActive()

    def _on_timeout(self):
        # A timeout already queued when stop() ran finds no callback.
        if self._callback is not None:
            self._callback()
