"""
History page widget for KAI.
Shows recorded sessions grouped by pomodoro cycle, with statistics
and deletion.
"""

import uuid
from typing import Optional
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QTreeWidget, QTreeWidgetItem, QGroupBox, QMessageBox, QHeaderView
)
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QFont, QColor

from kai.core.cycle import phase_for_position
from kai.core.models import (
    Session, SessionGroup, SessionStatus, SessionType, format_duration
)
from kai.core.timer_engine import TimerEngine

from .theme import ABORTED_COLOR, INTERRUPTED_COLOR, SHORT_BREAK_COLOR

STATUS_COLORS = {
    SessionStatus.COMPLETED: SHORT_BREAK_COLOR,
    SessionStatus.INTERRUPTED: INTERRUPTED_COLOR,
    SessionStatus.ABORTED: ABORTED_COLOR,
}

GROUP_ID_ROLE = Qt.ItemDataRole.UserRole


class HistoryPage(QWidget):
    """
    History page listing session groups, most recent first.
    """

    def __init__(self, timer_engine: TimerEngine, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self.timer_engine = timer_engine

        self._setup_ui()
        self._connect_signals()

    def _setup_ui(self):
        """Statistics on top, the grouped tree below, actions at the bottom."""
        layout = QVBoxLayout(self)
        layout.setSpacing(14)
        layout.setContentsMargins(24, 20, 24, 20)

        stats_box = QGroupBox("Statistics")
        stats_layout = QHBoxLayout(stats_box)
        stats_layout.setSpacing(40)

        value_font = QFont()
        value_font.setPointSize(20)
        value_font.setBold(True)

        self.completed_label = self._add_stat(stats_layout, "Completed", "#66BB6A", value_font)
        self.total_label = self._add_stat(stats_layout, "Total Sessions", "#42A5F5", value_font)
        self.time_label = self._add_stat(stats_layout, "Total Time", "#FF9966", value_font)

        stats_layout.addStretch()
        layout.addWidget(stats_box)

        # Groups tree
        self.tree = QTreeWidget()
        self.tree.setColumnCount(5)
        self.tree.setHeaderLabels(["Activity", "Kind", "Started", "Duration", "Status"])
        self.tree.header().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.tree.setAlternatingRowColors(True)
        self.tree.setSelectionBehavior(QTreeWidget.SelectionBehavior.SelectRows)
        layout.addWidget(self.tree)

        self.empty_label = QLabel("No sessions recorded yet.")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.setStyleSheet("color: #808080;")
        layout.addWidget(self.empty_label)

        # Buttons
        actions = QHBoxLayout()
        actions.addStretch()

        self.delete_btn = QPushButton("Delete Selected")
        self.delete_btn.setEnabled(False)
        actions.addWidget(self.delete_btn)

        self.clear_btn = QPushButton("Clear History")
        self.clear_btn.setStyleSheet("""
            QPushButton {
                background-color: #f44336;
                color: white;
            }
            QPushButton:hover {
                background-color: #da190b;
            }
        """)
        actions.addWidget(self.clear_btn)

        layout.addLayout(actions)

    @staticmethod
    def _add_stat(parent_layout: QHBoxLayout, title: str, color: str, font: QFont) -> QLabel:
        column = QVBoxLayout()
        title_label = QLabel(title)
        title_label.setStyleSheet("color: #a0a0a0; font-size: 13px;")
        column.addWidget(title_label)
        value_label = QLabel("0")
        value_label.setFont(font)
        value_label.setStyleSheet(f"color: {color}; font-size: 24px;")
        column.addWidget(value_label)
        parent_layout.addLayout(column)
        return value_label

    def _connect_signals(self):
        """Refresh on history changes; wire the tree and buttons."""
        self.timer_engine.history_changed.connect(self.refresh)
        self.tree.itemSelectionChanged.connect(self._on_selection_changed)
        self.delete_btn.clicked.connect(self._delete_selected)
        self.clear_btn.clicked.connect(self._clear_history)

    @Slot()
    def refresh(self):
        """Rebuild statistics and the groups tree."""
        stats = self.timer_engine.statistics()
        self.completed_label.setText(str(stats.completed_sessions))
        self.total_label.setText(str(stats.total_sessions))
        self.time_label.setText(f"{stats.total_seconds // 3600}h")

        self.tree.clear()
        for group in self.timer_engine.grouped_sessions():
            self.tree.addTopLevelItem(self._group_item(group))

        has_rows = self.tree.topLevelItemCount() > 0
        self.tree.setVisible(has_rows)
        self.empty_label.setVisible(not has_rows)
        self.clear_btn.setEnabled(has_rows)
        self.delete_btn.setEnabled(False)

    def _group_item(self, group: SessionGroup) -> QTreeWidgetItem:
        if group.is_simple:
            kind = "Simple Timer"
        else:
            kind = f"Pomodoro ({len(group.sessions)} sessions)"

        if group.is_fully_completed:
            status = "Completed"
            status_color = SHORT_BREAK_COLOR
        else:
            status = f"{group.completed_count}/{len(group.sessions)} completed"
            status_color = INTERRUPTED_COLOR

        item = QTreeWidgetItem([
            group.label.value,
            kind,
            group.start_time.strftime("%Y-%m-%d %H:%M"),
            format_duration(group.total_duration),
            status,
        ])
        item.setForeground(4, QColor(status_color))
        item.setData(0, GROUP_ID_ROLE, str(group.id))

        if not group.is_simple:
            for session in group.sessions:
                item.addChild(self._session_item(session))
        return item

    def _session_item(self, session: Session) -> QTreeWidgetItem:
        if session.type == SessionType.POMODORO and session.cycle_position:
            # Count isn't stored per session; position alone decides work/break here
            phase = phase_for_position(session.cycle_position, 0)
            kind = f"{phase.title} #{session.cycle_position}"
        else:
            kind = "Simple Timer"

        child = QTreeWidgetItem([
            "",
            kind,
            session.start_time.strftime("%H:%M:%S"),
            format_duration(session.duration),
            session.status.value.capitalize(),
        ])
        child.setForeground(4, QColor(STATUS_COLORS[session.status]))
        return child

    @Slot()
    def _on_selection_changed(self):
        self.delete_btn.setEnabled(self._selected_group_id() is not None)

    def _selected_group_id(self) -> Optional[uuid.UUID]:
        items = self.tree.selectedItems()
        if not items:
            return None
        item = items[0]
        while item.parent() is not None:
            item = item.parent()
        value = item.data(0, GROUP_ID_ROLE)
        return uuid.UUID(value) if value else None

    def _confirm(self, title: str, text: str) -> bool:
        answer = QMessageBox.warning(
            self, title, text,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.Cancel,
            QMessageBox.StandardButton.Cancel
        )
        return answer == QMessageBox.StandardButton.Yes

    @Slot()
    def _delete_selected(self):
        group_id = self._selected_group_id()
        if group_id is None:
            return
        if self._confirm(
            "Delete Session",
            "Delete the selected cycle or timer run? This cannot be undone."
        ):
            self.timer_engine.delete_group(group_id)

    @Slot()
    def _clear_history(self):
        if self._confirm(
            "Clear History",
            "Delete every recorded session? This cannot be undone."
        ):
            self.timer_engine.clear_all()
