"""Shared test helpers for the KAI test suite."""

from datetime import timedelta

from kai.core.clock import Ticker


class SignalCollector:
    """Record every emission of a Qt signal."""

    def __init__(self, signal):
        self.calls = []
        signal.connect(self._on_emit)

    def _on_emit(self, *args):
        self.calls.append(args)

    @property
    def count(self):
        return len(self.calls)

    @property
    def last(self):
        """Arguments of the most recent emission (single-arg signals unwrapped)."""
        args = self.calls[-1]
        return args[0] if len(args) == 1 else args

    def values(self):
        return [args[0] if len(args) == 1 else args for args in self.calls]


class ManualTicker(Ticker):
    """Ticker that only fires when a test tells it to."""

    def __init__(self):
        self.callback = None
        self.start_count = 0
        self.stop_count = 0

    def start(self, callback):
        if self.callback is not None:
            return
        self.callback = callback
        self.start_count += 1

    def stop(self):
        if self.callback is None:
            return
        self.callback = None
        self.stop_count += 1

    def is_active(self):
        return self.callback is not None

    def fire(self, times=1):
        for _ in range(times):
            if self.callback is None:
                return
            self.callback()


class MovingClock:
    """Clock for the engine's ``now`` hook; advances only when told."""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def notify(self, title, body):
        self.messages.append((title, body))


class BrokenNotifier:
    def notify(self, title, body):
        raise RuntimeError("notification daemon is gone")


def complete_phase(engine, ticker):
    """Run the current phase down to zero and through its completion.

    The phase completes on the tick that finds zero remaining, so a phase
    of N seconds takes N + 1 ticks.
    """
    if not engine.is_running:
        engine.start()
    ticks = engine.remaining_time + 1
    ticker.fire(ticks)
    assert not engine.is_running


def run_cycle(engine, ticker):
    """Complete all eight phases of one pomodoro cycle."""
    for _ in range(8):
        complete_phase(engine, ticker)
