"""
Timer page widget for KAI.
Contains the countdown display, cycle progress and controls.
"""

from typing import Optional
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QComboBox, QGroupBox, QFrame, QProgressBar
)
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QFont

from kai.core.cycle import CYCLE_LENGTH, POMODOROS_PER_LONG_BREAK, Phase
from kai.core.models import ActivityLabel, EngineState, TimerMode
from kai.core.timer_engine import TimerEngine

from .theme import (
    IDLE_COLOR, LONG_BREAK_COLOR, SHORT_BREAK_COLOR, SIMPLE_COLOR, WORK_COLOR
)

PHASE_COLORS = {
    Phase.WORK: WORK_COLOR,
    Phase.SHORT_BREAK: SHORT_BREAK_COLOR,
    Phase.LONG_BREAK: LONG_BREAK_COLOR,
    Phase.SIMPLE: SIMPLE_COLOR,
}

MODE_NAMES = {
    TimerMode.POMODORO: "Pomodoro",
    TimerMode.SIMPLE: "Simple Timer",
}


class TimerPage(QWidget):
    """
    Main timer page with countdown display and controls.
    """

    def __init__(self, timer_engine: TimerEngine, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self.timer_engine = timer_engine

        self._setup_ui()
        self._connect_signals()
        self._on_state_changed(self.timer_engine.state)

    def _setup_ui(self):
        """Lay out selectors, countdown, cycle progress and controls."""
        layout = QVBoxLayout(self)
        layout.setSpacing(18)
        layout.setContentsMargins(28, 24, 28, 24)

        # Mode and activity selection
        config_layout = QHBoxLayout()
        config_layout.setSpacing(20)

        mode_box = QGroupBox("Mode")
        mode_layout = QVBoxLayout(mode_box)
        self.mode_combo = QComboBox()
        for mode, name in MODE_NAMES.items():
            self.mode_combo.addItem(name, mode.value)
        mode_layout.addWidget(self.mode_combo)
        config_layout.addWidget(mode_box)

        label_box = QGroupBox("Activity")
        label_layout = QVBoxLayout(label_box)
        self.label_combo = QComboBox()
        for label in ActivityLabel:
            self.label_combo.addItem(label.value, label.value)
        label_layout.addWidget(self.label_combo)
        config_layout.addWidget(label_box)

        layout.addLayout(config_layout)

        # Phase name above the countdown
        self.phase_label = self._centered_label(18)
        layout.addWidget(self.phase_label)

        self.time_label = self._centered_label(72)
        self.time_label.setMinimumHeight(120)
        layout.addWidget(self.time_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 1000)
        self.progress_bar.setTextVisible(False)
        layout.addWidget(self.progress_bar)

        # Cycle progress: one dot per finished pomodoro, plus the position
        self.cycle_label = QLabel("")
        self.cycle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.cycle_label.setStyleSheet("color: #a0a0a0; font-size: 14px;")
        layout.addWidget(self.cycle_label)

        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFrameShadow(QFrame.Shadow.Sunken)
        layout.addWidget(line)

        controls = QHBoxLayout()
        controls.setSpacing(12)

        self.start_btn = QPushButton("Start")
        self.start_btn.setMinimumSize(140, 45)
        controls.addWidget(self.start_btn)

        self.reset_btn = QPushButton("Reset")
        self.reset_btn.setMinimumSize(100, 45)
        controls.addWidget(self.reset_btn)

        layout.addLayout(controls)
        layout.addStretch()

    @staticmethod
    def _centered_label(point_size: int) -> QLabel:
        label = QLabel()
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        font = QFont()
        font.setPointSize(point_size)
        font.setBold(True)
        label.setFont(font)
        return label

    def _connect_signals(self):
        """Wire the engine and the widgets together."""
        self.timer_engine.state_changed.connect(self._on_state_changed)

        self.start_btn.clicked.connect(self._on_start_clicked)
        self.reset_btn.clicked.connect(self.timer_engine.reset)

        self.mode_combo.currentIndexChanged.connect(self._on_mode_changed)
        self.label_combo.currentIndexChanged.connect(self._on_label_changed)

    @Slot()
    def _on_start_clicked(self):
        """Start, or stop when already running."""
        if self.timer_engine.is_running:
            self.timer_engine.stop()
        else:
            self.timer_engine.start()

    @Slot(int)
    def _on_mode_changed(self, index: int):
        mode = self.mode_combo.itemData(index)
        if mode is not None:
            self.timer_engine.set_mode(TimerMode(mode))

    @Slot(int)
    def _on_label_changed(self, index: int):
        label = self.label_combo.itemData(index)
        if label is not None:
            self.timer_engine.set_label(ActivityLabel(label))

    @Slot(EngineState)
    def _on_state_changed(self, state: EngineState):
        """Update the whole page from an engine snapshot."""
        color = PHASE_COLORS.get(state.phase, IDLE_COLOR)
        if not state.is_running and state.remaining_time == 0:
            color = IDLE_COLOR

        self.phase_label.setText(state.phase.title.upper())
        self.phase_label.setStyleSheet(f"color: {color}; font-size: 20px;")
        self.time_label.setText(state.format_remaining())
        self.time_label.setStyleSheet(f"color: {color}; font-size: 80px;")
        self.progress_bar.setValue(int(state.progress * 1000))

        if state.mode == TimerMode.POMODORO:
            done = state.completed_pomodoros % POMODOROS_PER_LONG_BREAK
            if state.current_cycle_position == CYCLE_LENGTH:
                done = POMODOROS_PER_LONG_BREAK
            dots = "●" * done + "○" * (POMODOROS_PER_LONG_BREAK - done)
            position = max(1, state.current_cycle_position)
            self.cycle_label.setText(f"{dots}   Cycle step {position}/{CYCLE_LENGTH}")
        else:
            self.cycle_label.setText("")

        self.start_btn.setText("Pause" if state.is_running else "Start")

        # Mode switches are only taken while idle
        self.mode_combo.setEnabled(not state.is_running)
        self.label_combo.setEnabled(not state.is_running)
        self._select_data(self.mode_combo, state.mode.value)
        self._select_data(self.label_combo, state.label.value)

    @staticmethod
    def _select_data(combo: QComboBox, value):
        index = combo.findData(value)
        if index >= 0 and index != combo.currentIndex():
            combo.blockSignals(True)
            combo.setCurrentIndex(index)
            combo.blockSignals(False)
