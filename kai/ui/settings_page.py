"""
Settings page widget for KAI.
Edits phase durations, completion behavior and notifications.
"""

from typing import List, Optional
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QCheckBox,
    QGroupBox, QSpinBox, QFormLayout
)
from PySide6.QtCore import Qt, Slot

from kai import __version__
from kai.core.models import AppSettings, DurationConfig
from kai.core.notifications import NotificationManager
from kai.core.storage import get_app_data_dir
from kai.core.timer_engine import TimerEngine


class SettingsPage(QWidget):
    """
    Settings page for durations and application behavior.
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

        self._setup_ui()
        self._load_settings()
        self._connect_signals()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(16)
        layout.setContentsMargins(28, 24, 28, 24)

        title = QLabel("Settings")
        title_font = title.font()
        title_font.setPointSize(18)
        title_font.setBold(True)
        title.setFont(title_font)
        layout.addWidget(title)

        # Pomodoro durations
        pomodoro_box = QGroupBox("Pomodoro")
        pomodoro_form = QFormLayout(pomodoro_box)

        self.pomodoro_spin = self._minutes_spin(1, 180)
        pomodoro_form.addRow("Pomodoro:", self.pomodoro_spin)
        self.short_break_spin = self._minutes_spin(1, 60)
        pomodoro_form.addRow("Short break:", self.short_break_spin)
        self.long_break_spin = self._minutes_spin(1, 120)
        pomodoro_form.addRow("Long break:", self.long_break_spin)

        layout.addWidget(pomodoro_box)

        # Simple timer duration
        simple_box = QGroupBox("Simple Timer")
        simple_layout = QHBoxLayout(simple_box)

        self.hours_spin = QSpinBox()
        self.hours_spin.setRange(0, 23)
        self.hours_spin.setSuffix(" h")
        simple_layout.addWidget(self.hours_spin)

        self.minutes_spin = QSpinBox()
        self.minutes_spin.setRange(0, 59)
        self.minutes_spin.setSuffix(" min")
        simple_layout.addWidget(self.minutes_spin)

        self.seconds_spin = QSpinBox()
        self.seconds_spin.setRange(0, 59)
        self.seconds_spin.setSuffix(" s")
        simple_layout.addWidget(self.seconds_spin)
        simple_layout.addStretch()

        layout.addWidget(simple_box)

        # What happens when a phase runs out
        behavior_box = QGroupBox("When a Timer Finishes")
        behavior_layout = QVBoxLayout(behavior_box)
        behavior_layout.setSpacing(10)

        self.auto_open_check = QCheckBox("Open window automatically")
        self.auto_open_check.setToolTip("Bring up the main window when a timer finishes")
        behavior_layout.addWidget(self.auto_open_check)

        self.notification_check = QCheckBox("Show a desktop notification")
        behavior_layout.addWidget(self.notification_check)

        self.sound_check = QCheckBox("Play sound when a timer finishes")
        behavior_layout.addWidget(self.sound_check)

        layout.addWidget(behavior_box)

        # Data section
        data_box = QGroupBox("Data")
        data_layout = QVBoxLayout(data_box)

        path_label = QLabel(f"Location: {get_app_data_dir()}")
        path_label.setStyleSheet("color: #808080; font-size: 11px;")
        path_label.setWordWrap(True)
        path_label.setTextInteractionFlags(
            Qt.TextInteractionFlag.TextSelectableByMouse
        )
        data_layout.addWidget(path_label)

        about_text = QLabel(f"<b>KAI</b> v{__version__}")
        data_layout.addWidget(about_text)

        layout.addWidget(data_box)
        layout.addStretch()

    @staticmethod
    def _minutes_spin(minimum: int, maximum: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(minimum, maximum)
        spin.setSuffix(" minutes")
        return spin

    def _duration_spins(self) -> List[QSpinBox]:
        return [
            self.pomodoro_spin, self.short_break_spin, self.long_break_spin,
            self.hours_spin, self.minutes_spin, self.seconds_spin,
        ]

    def _checkboxes(self) -> List[QCheckBox]:
        return [self.auto_open_check, self.notification_check, self.sound_check]

    def _load_settings(self):
        """Fill the widgets from the engine's current config."""
        durations = self.timer_engine.durations
        self.pomodoro_spin.setValue(durations.pomodoro_minutes)
        self.short_break_spin.setValue(durations.short_break_minutes)
        self.long_break_spin.setValue(durations.long_break_minutes)
        self.hours_spin.setValue(durations.simple_hours)
        self.minutes_spin.setValue(durations.simple_minutes)
        self.seconds_spin.setValue(durations.simple_seconds)

        settings = self.timer_engine.settings
        self.auto_open_check.setChecked(settings.auto_open_window)
        self.notification_check.setChecked(settings.notification_enabled)
        self.sound_check.setChecked(settings.sound_enabled)

        self._apply_notification_settings(settings)

    def _connect_signals(self):
        """Every edit is applied and saved immediately."""
        for spin in self._duration_spins():
            spin.valueChanged.connect(self._on_duration_changed)
        for checkbox in self._checkboxes():
            checkbox.toggled.connect(self._on_setting_changed)

    @Slot()
    def _on_duration_changed(self):
        self.timer_engine.set_durations(DurationConfig(
            pomodoro_minutes=self.pomodoro_spin.value(),
            short_break_minutes=self.short_break_spin.value(),
            long_break_minutes=self.long_break_spin.value(),
            simple_hours=self.hours_spin.value(),
            simple_minutes=self.minutes_spin.value(),
            simple_seconds=self.seconds_spin.value(),
        ))

    @Slot()
    def _on_setting_changed(self):
        settings = AppSettings(
            auto_open_window=self.auto_open_check.isChecked(),
            notification_enabled=self.notification_check.isChecked(),
            sound_enabled=self.sound_check.isChecked(),
        )
        self.timer_engine.apply_settings(settings)
        self._apply_notification_settings(settings)

    def _apply_notification_settings(self, settings: AppSettings):
        self.notifications.notification_enabled = settings.notification_enabled
        self.notifications.sound_enabled = settings.sound_enabled
