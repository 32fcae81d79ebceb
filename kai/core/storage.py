"""
SQLite storage module for the KAI timer.
A small durable key-value store holding the session history blob,
the duration settings and the application settings.
"""

import logging
import os
import sqlite3
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from .models import AppSettings, DurationConfig

logger = logging.getLogger(__name__)


APP_DIR_NAME = 'KAI'
DB_FILENAME = 'kai.db'


def get_app_data_dir() -> Path:
    """
    Return the per-user data directory for KAI, creating it on first use.

    %APPDATA% on Windows, ~/Library/Application Support on macOS and
    $XDG_DATA_HOME (or ~/.local/share) everywhere else.
    """
    home = Path.home()
    if sys.platform == 'win32':
        base = Path(os.environ.get('APPDATA') or home)
    elif sys.platform == 'darwin':
        base = home / 'Library' / 'Application Support'
    else:
        base = Path(os.environ.get('XDG_DATA_HOME') or home / '.local' / 'share')

    path = base / APP_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


# DurationConfig field -> storage key
DURATION_KEYS = {
    'pomodoro_minutes': 'PomodoroDuration',
    'short_break_minutes': 'ShortBreakDuration',
    'long_break_minutes': 'LongBreakDuration',
    'simple_hours': 'SimpleTimerHours',
    'simple_minutes': 'SimpleTimerMinutes',
    'simple_seconds': 'SimpleTimerSeconds',
}

# AppSettings field -> storage key
SETTINGS_KEYS = {
    'auto_open_window': 'AutoOpenWindow',
    'notification_enabled': 'NotificationEnabled',
    'sound_enabled': 'SoundEnabled',
}


class Storage:
    """
    Durable key-value store.
    Values are opaque bytes; absent keys read back as None.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Args:
            db_path: SQLite file to use. Defaults to kai.db in the app data directory.
        """
        self.db_path = db_path or str(get_app_data_dir() / DB_FILENAME)
        self._init_database()

    @contextmanager
    def _get_connection(self):
        """Yield a connection that commits on success and rolls back on error."""
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self):
        """Create the key-value table if it doesn't exist."""
        with self._get_connection() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL
                )
            ''')

    # ==================== Raw key-value access ====================

    def save(self, key: str, value: bytes):
        """Store bytes under a key, replacing any previous value."""
        with self._get_connection() as conn:
            conn.execute(
                'INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)',
                (key, sqlite3.Binary(value))
            )

    def load(self, key: str) -> Optional[bytes]:
        """Return the bytes stored under a key, or None if absent."""
        with self._get_connection() as conn:
            row = conn.execute(
                'SELECT value FROM kv_store WHERE key = ?', (key,)
            ).fetchone()
        if row is None:
            return None
        return bytes(row[0])

    def delete(self, key: str):
        with self._get_connection() as conn:
            conn.execute('DELETE FROM kv_store WHERE key = ?', (key,))

    # ==================== Scalars ====================

    def _load_int(self, key: str) -> Optional[int]:
        raw = self.load(key)
        if raw is None:
            return None
        try:
            return int(raw.decode('utf-8'))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Ignoring unreadable value stored under %r", key)
            return None

    def _save_int(self, key: str, value: int):
        self.save(key, str(int(value)).encode('utf-8'))

    # ==================== Durations ====================

    def get_durations(self) -> DurationConfig:
        """Get the duration config, falling back to defaults per field."""
        values = {}
        for attr, key in DURATION_KEYS.items():
            value = self._load_int(key)
            if value is not None:
                values[attr] = value
        return DurationConfig(**values)

    def save_durations(self, durations: DurationConfig):
        """Save all six duration values."""
        for attr, key in DURATION_KEYS.items():
            self._save_int(key, getattr(durations, attr))

    # ==================== Settings ====================

    def get_settings(self) -> AppSettings:
        """Read settings; missing or unreadable flags keep their defaults."""
        settings = AppSettings()
        for attr, key in SETTINGS_KEYS.items():
            value = self._load_int(key)
            if value is not None:
                setattr(settings, attr, bool(value))
        return settings

    def save_settings(self, settings: AppSettings):
        """Write every flag as 1 or 0."""
        for attr, key in SETTINGS_KEYS.items():
            self._save_int(key, 1 if getattr(settings, attr) else 0)
