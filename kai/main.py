#!/usr/bin/env python3
"""
KAI - a menu-bar Pomodoro and countdown timer.

Features:
- Pomodoro cycles of four work blocks with short and long breaks
- A plain countdown timer with hours, minutes and seconds
- Session history grouped by cycle, stored locally
- Desktop notifications when a phase completes

Usage:
    pip install .
    kai
"""

import logging
import signal
import sys

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure root logging for the application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def setup_exception_handling():
    """Log unhandled exceptions instead of letting Qt swallow them."""
    def exception_hook(exctype, value, traceback):
        logger.error("Unhandled exception", exc_info=(exctype, value, traceback))
        sys.__excepthook__(exctype, value, traceback)

    sys.excepthook = exception_hook


def setup_signal_handlers(app: QApplication):
    """Set up signal handlers for graceful shutdown."""
    def signal_handler(signum, frame):
        logger.info("Received signal %s, shutting down", signum)
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main():
    """Main entry point for KAI."""
    setup_logging()
    setup_exception_handling()

    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("KAI")
    app.setApplicationDisplayName("KAI")
    app.setOrganizationName("KAI")
    app.setStyle("Fusion")

    # Keep running from the menu bar after the window is closed
    app.setQuitOnLastWindowClosed(False)

    from kai.ui.theme import STYLESHEET
    app.setStyleSheet(STYLESHEET)

    setup_signal_handlers(app)

    from kai.core.notifications import NotificationManager
    from kai.core.storage import Storage
    from kai.core.timer_engine import TimerEngine
    from kai.ui.main_window import MainWindow

    storage = Storage()
    notifications = NotificationManager()
    engine = TimerEngine(storage, notifier=notifications)

    window = MainWindow(engine, notifications)
    app.aboutToQuit.connect(window.cleanup)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
