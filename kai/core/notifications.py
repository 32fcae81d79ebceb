"""
Notification module for the KAI timer.
Shows desktop notifications and an alert sound when a phase completes.
Delivery is best effort: failures are logged and dropped.
"""

import logging
import subprocess
import sys
from typing import Optional

from PySide6.QtCore import QObject
from PySide6.QtWidgets import QApplication, QSystemTrayIcon

logger = logging.getLogger(__name__)

BALLOON_TIMEOUT_MS = 5000


class NotificationManager(QObject):
    """
    Delivers desktop notifications.
    Uses the tray icon balloon when there is one, native commands otherwise.

    Attributes:
        notification_enabled: Show a message when a phase completes.
        sound_enabled: Beep when a phase completes.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)

        self.tray_icon: Optional[QSystemTrayIcon] = None
        self.notification_enabled = True
        self.sound_enabled = True

    def set_tray_icon(self, tray_icon: Optional[QSystemTrayIcon]):
        """Route notifications through the tray balloon (None to stop)."""
        self.tray_icon = tray_icon

    def notify(self, title: str, body: str):
        """Show a notification. Never raises."""
        try:
            if self.sound_enabled:
                QApplication.beep()
            if self.notification_enabled:
                self._show_notification(title, body)
        except Exception as e:
            logger.warning("Could not show notification: %s", e)

    def _show_notification(self, title: str, message: str):
        tray = self.tray_icon
        if tray is not None and tray.isVisible():
            tray.showMessage(
                title, message,
                QSystemTrayIcon.MessageIcon.Information,
                BALLOON_TIMEOUT_MS
            )
            return
        self._run_notification_command(title, message)

    def _run_notification_command(self, title: str, message: str):
        """Fall back to osascript on macOS and notify-send on Linux."""
        if sys.platform == 'darwin':
            script = 'display notification {} with title {}'.format(
                _applescript_string(message), _applescript_string(title)
            )
            command = ['osascript', '-e', script]
        elif sys.platform.startswith('linux'):
            command = ['notify-send', title, message]
        else:
            logger.debug("No notification command on %s", sys.platform)
            return

        try:
            subprocess.run(command, capture_output=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Could not show notification: %s", e)


def _applescript_string(text: str) -> str:
    escaped = text.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'
