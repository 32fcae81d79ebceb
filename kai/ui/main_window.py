"""
Main window for KAI.
Hosts the tabbed pages and the tray icon that serves as the menu-bar item.
"""

from typing import Optional
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QTabWidget,
    QSystemTrayIcon, QMenu, QApplication, QMessageBox
)
from PySide6.QtCore import QRectF, Qt, Slot
from PySide6.QtGui import (
    QAction, QCloseEvent, QColor, QIcon, QPainter, QPen, QPixmap
)

from kai.core.models import EngineState
from kai.core.notifications import NotificationManager
from kai.core.timer_engine import TimerEngine, describe_next_phase

from .theme import ACCENT
from .timer_page import TimerPage
from .history_page import HistoryPage
from .settings_page import SettingsPage


ICON_SIZES = (16, 22, 32, 64)


def create_app_icon() -> QIcon:
    """Draw the KAI icon: an orange dial with a white quarter-elapsed arc."""
    icon = QIcon()

    for size in ICON_SIZES:
        pixmap = QPixmap(size, size)
        pixmap.fill(Qt.GlobalColor.transparent)

        painter = QPainter(pixmap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        inset = max(1, size // 16)
        dial = QRectF(inset, inset, size - 2 * inset, size - 2 * inset)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(ACCENT))
        painter.drawEllipse(dial)

        ring_width = max(2, size // 8)
        arc_inset = inset + ring_width
        arc = QRectF(arc_inset, arc_inset, size - 2 * arc_inset, size - 2 * arc_inset)
        pen = QPen(QColor("white"), ring_width)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        # Qt angles are in 1/16th of a degree, counter-clockwise from 3 o'clock
        painter.drawArc(arc, 90 * 16, -270 * 16)

        painter.end()
        icon.addPixmap(pixmap)

    return icon


class MainWindow(QMainWindow):
    """
    Main application window with tabbed interface.
    """

    def __init__(
        self,
        timer_engine: TimerEngine,
        notifications: NotificationManager,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)

        self.timer_engine = timer_engine
        self.notifications = notifications
        self.tray_icon: Optional[QSystemTrayIcon] = None

        self.setWindowTitle("KAI")
        self.setMinimumSize(500, 600)
        self.resize(600, 700)

        self.app_icon = create_app_icon()
        self.setWindowIcon(self.app_icon)

        self._setup_ui()
        self._setup_tray()
        self._connect_signals()

        self.history_page.refresh()
        self._on_state_changed(self.timer_engine.state)

    def _setup_ui(self):
        """Build the tab widget with one page per area."""
        self.timer_page = TimerPage(self.timer_engine)
        self.history_page = HistoryPage(self.timer_engine)
        self.settings_page = SettingsPage(self.timer_engine, self.notifications)

        self.tabs = QTabWidget()
        self.tabs.setDocumentMode(True)
        for page, title in (
            (self.timer_page, "Timer"),
            (self.history_page, "History"),
            (self.settings_page, "Settings"),
        ):
            self.tabs.addTab(page, title)

        container = QWidget()
        container_layout = QVBoxLayout(container)
        container_layout.setContentsMargins(0, 0, 0, 0)
        container_layout.addWidget(self.tabs)
        self.setCentralWidget(container)

    def _setup_tray(self):
        """Create the tray icon that acts as the menu-bar item."""
        if not QSystemTrayIcon.isSystemTrayAvailable():
            return

        menu = QMenu(self)

        # First row mirrors the label and countdown; it isn't clickable
        self.tray_status_action = menu.addAction("")
        self.tray_status_action.setEnabled(False)
        menu.addSeparator()

        self.tray_start_action = self._add_menu_action(menu, "Start", self._tray_toggle_start)
        self._add_menu_action(menu, "Reset", self.timer_engine.reset)
        menu.addSeparator()
        self._add_menu_action(menu, "Open Main Window", self._show_window)
        self._add_menu_action(menu, "Quit", self._quit_app)

        self.tray_icon = QSystemTrayIcon(self.app_icon, self)
        self.tray_icon.setToolTip("KAI")
        self.tray_icon.setContextMenu(menu)
        self.tray_icon.activated.connect(self._on_tray_activated)
        self.tray_icon.setVisible(True)

        self.notifications.set_tray_icon(self.tray_icon)

    def _add_menu_action(self, menu: QMenu, text: str, slot) -> QAction:
        action = QAction(text, self)
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def _connect_signals(self):
        """Connect signals from the engine."""
        self.timer_engine.state_changed.connect(self._on_state_changed)
        self.timer_engine.foreground_requested.connect(self._on_foreground_requested)
        # Queued so the prompt runs after the engine finishes the transition
        self.timer_engine.window_open_requested.connect(
            self._on_window_open_requested, Qt.ConnectionType.QueuedConnection
        )

    @Slot(EngineState)
    def _on_state_changed(self, state: EngineState):
        """Keep the menu-bar item in step with the engine."""
        if self.tray_icon is None:
            return

        status = f"{state.label.value} - {state.format_remaining()}"
        self.tray_status_action.setText(status)
        self.tray_start_action.setText("Pause" if state.is_running else "Start")

        if state.is_running:
            self.tray_icon.setToolTip(f"KAI - {status}")
        else:
            self.tray_icon.setToolTip("KAI")

    @Slot()
    def _on_foreground_requested(self):
        """Bring the app forward if the window is already up."""
        if self.isVisible():
            self.raise_()
            self.activateWindow()

    @Slot()
    def _on_window_open_requested(self):
        """Show the window and offer to start the next phase."""
        self._show_window()
        self.tabs.setCurrentWidget(self.timer_page)

        box = QMessageBox(self)
        box.setIcon(QMessageBox.Icon.Information)
        box.setWindowTitle("Timer Finished")
        box.setText("Timer finished!")
        box.setInformativeText(describe_next_phase(self.timer_engine.state))
        start_btn = box.addButton("Start Next", QMessageBox.ButtonRole.AcceptRole)
        box.addButton("Later", QMessageBox.ButtonRole.RejectRole)
        box.exec()

        if box.clickedButton() is start_btn:
            self.timer_engine.start()

    @Slot(QSystemTrayIcon.ActivationReason)
    def _on_tray_activated(self, reason):
        # Right click opens the context menu on its own
        if reason != QSystemTrayIcon.ActivationReason.Context:
            self._show_window()

    @Slot()
    def _show_window(self):
        """Restore the window if hidden or minimized and focus it."""
        self.showNormal()
        self.raise_()
        self.activateWindow()

    @Slot()
    def _tray_toggle_start(self):
        if self.timer_engine.is_running:
            self.timer_engine.stop()
        else:
            self.timer_engine.start()

    @Slot()
    def _quit_app(self):
        # aboutToQuit runs cleanup(), which records a running session
        QApplication.quit()

    def closeEvent(self, event: QCloseEvent):
        """Hide to the menu bar instead of quitting when possible."""
        if self.tray_icon is not None and self.tray_icon.isVisible():
            event.ignore()
            self.hide()
            return

        event.accept()
        QApplication.quit()

    @Slot()
    def cleanup(self):
        """Stop the timer (recording the session) and drop the tray icon."""
        self.timer_engine.cleanup()
        if self.tray_icon is not None:
            self.tray_icon.hide()
