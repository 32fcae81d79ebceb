"""
Session ledger for the KAI timer.
Keeps the session history (most recent first), groups it into
pomodoro cycles and persists it through Storage.
"""

import json
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from .models import Session, SessionGroup, SessionType
from .storage import Storage

logger = logging.getLogger(__name__)

HISTORY_KEY = 'PomodoroSessions'


@dataclass(frozen=True)
class LedgerStats:
    """Totals over the whole history."""
    total_sessions: int
    completed_sessions: int
    total_seconds: int


class SessionLedger:
    """
    History of recorded sessions.

    The list is kept most-recent-first and written back to storage as a
    whole after every change.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._sessions: List[Session] = []
        self.load()

    @property
    def sessions(self) -> Tuple[Session, ...]:
        """All sessions, most recent first."""
        return tuple(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    # ==================== Persistence ====================

    def load(self):
        """
        Reload history from storage.
        Anything that can't be decoded is treated as an empty history.
        """
        self._sessions = []
        raw = self.storage.load(HISTORY_KEY)
        if raw is None:
            return

        try:
            records = json.loads(raw.decode('utf-8'))
            if not isinstance(records, list):
                raise ValueError("history is not a list")
            self._sessions = [Session.from_dict(record) for record in records]
        except (UnicodeDecodeError, ValueError, KeyError, TypeError,
                AttributeError, OverflowError) as e:
            logger.warning("Could not decode session history, starting empty: %s", e)
            self._sessions = []

    def save(self):
        """Write the full history to storage."""
        payload = json.dumps([s.to_dict() for s in self._sessions])
        self.storage.save(HISTORY_KEY, payload.encode('utf-8'))

    # ==================== Mutations ====================

    def add(self, session: Session):
        """Insert a session at the head of the history and persist."""
        self._sessions.insert(0, session)
        self.save()

    def delete_group(self, group_id: uuid.UUID) -> int:
        """
        Delete a group of sessions.

        Removes every session carrying ``group_id``. When no session
        carries it, the id is taken to be a standalone session's own id.

        Returns:
            Number of sessions removed.
        """
        kept = [s for s in self._sessions if s.group_id != group_id]
        if len(kept) == len(self._sessions):
            kept = [s for s in self._sessions if s.id != group_id]

        removed = len(self._sessions) - len(kept)
        if removed:
            self._sessions = kept
            self.save()
        return removed

    def clear_all(self):
        """Remove every session."""
        self._sessions = []
        self.save()

    # ==================== Queries ====================

    def grouped_sessions(self) -> Iterator[SessionGroup]:
        """
        Yield session groups, most recent group first.

        Pomodoro sessions are bucketed by group id; every other session
        stands alone as its own group. Members are in chronological order.
        Computed afresh on each call.
        """
        buckets: Dict[uuid.UUID, List[Session]] = OrderedDict()

        # History is newest first; walk it oldest first so members and
        # group boundaries come out chronological.
        for session in reversed(self._sessions):
            if session.type == SessionType.POMODORO and session.group_id is not None:
                key = session.group_id
            else:
                key = session.id
            buckets.setdefault(key, []).append(session)

        groups = [
            SessionGroup(
                id=key,
                label=members[0].label,
                start_time=members[0].start_time,
                end_time=members[-1].end_time,
                sessions=tuple(members),
            )
            for key, members in buckets.items()
        ]
        groups.sort(key=lambda g: g.start_time, reverse=True)
        yield from groups

    def statistics(self) -> LedgerStats:
        return LedgerStats(
            total_sessions=len(self._sessions),
            completed_sessions=sum(1 for s in self._sessions if s.completed),
            total_seconds=sum(s.duration for s in self._sessions),
        )
