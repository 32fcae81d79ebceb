# Core module for KAI: timer engine, session ledger and storage
from .models import (
    ActivityLabel, AppSettings, DurationConfig, EngineState, Session,
    SessionGroup, SessionStatus, SessionType, TimerMode
)
from .cycle import Phase
from .storage import Storage
from .ledger import SessionLedger
from .timer_engine import TimerEngine

__all__ = [
    'ActivityLabel', 'AppSettings', 'DurationConfig', 'EngineState', 'Session',
    'SessionGroup', 'SessionStatus', 'SessionType', 'TimerMode', 'Phase',
    'Storage', 'SessionLedger', 'TimerEngine',
]
