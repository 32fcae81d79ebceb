"""Application-wide stylesheet (dark theme, orange accent)."""

ACCENT = "#FF9966"
WORK_COLOR = "#FF9966"
SHORT_BREAK_COLOR = "#66BB6A"
LONG_BREAK_COLOR = "#42A5F5"
SIMPLE_COLOR = "#BA68C8"
IDLE_COLOR = "#808080"
INTERRUPTED_COLOR = "#FFA726"
ABORTED_COLOR = "#EF5350"

STYLESHEET = f"""
    QMainWindow, QWidget {{
        background-color: #1e1e1e;
        color: #e0e0e0;
    }}

    QTabWidget::pane {{
        border: none;
        background-color: #252525;
    }}
    QTabBar::tab {{
        background-color: #2d2d2d;
        color: #b0b0b0;
        padding: 10px 22px;
        margin-right: 2px;
        border-top-left-radius: 6px;
        border-top-right-radius: 6px;
    }}
    QTabBar::tab:selected {{
        background-color: #252525;
        color: #ffffff;
        font-weight: bold;
    }}

    QGroupBox {{
        font-weight: bold;
        border: 1px solid #404040;
        border-radius: 8px;
        margin-top: 12px;
        padding-top: 12px;
        background-color: #2a2a2a;
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 12px;
        padding: 0 8px;
        color: {ACCENT};
    }}

    QComboBox, QSpinBox {{
        padding: 6px 10px;
        border: 1px solid #404040;
        border-radius: 5px;
        background-color: #2d2d2d;
        color: #ffffff;
    }}
    QComboBox:hover, QSpinBox:hover {{
        border-color: {ACCENT};
    }}

    QCheckBox::indicator {{
        width: 18px;
        height: 18px;
        border-radius: 4px;
        border: 2px solid #404040;
        background-color: #2d2d2d;
    }}
    QCheckBox::indicator:checked {{
        background-color: {ACCENT};
        border-color: {ACCENT};
    }}

    QTreeWidget {{
        border: 1px solid #404040;
        border-radius: 5px;
        background-color: #252525;
    }}
    QTreeWidget::item:selected {{
        background-color: {ACCENT};
        color: #ffffff;
    }}
    QHeaderView::section {{
        background-color: #2d2d2d;
        color: #ffffff;
        padding: 8px;
        border: none;
        border-bottom: 2px solid {ACCENT};
        font-weight: bold;
    }}

    QProgressBar {{
        border: 1px solid #404040;
        border-radius: 5px;
        background-color: #2d2d2d;
        height: 10px;
        text-align: center;
    }}
    QProgressBar::chunk {{
        background-color: {ACCENT};
        border-radius: 5px;
    }}

    QPushButton {{
        padding: 10px 18px;
        border-radius: 5px;
        background-color: #404040;
        color: #ffffff;
        font-weight: bold;
        border: none;
    }}
    QPushButton:hover {{
        background-color: #505050;
    }}
    QPushButton:disabled {{
        background-color: #2d2d2d;
        color: #606060;
    }}

    QMenu {{
        background-color: #2d2d2d;
        color: #e0e0e0;
        border: 1px solid #404040;
    }}
    QMenu::item:selected {{
        background-color: {ACCENT};
    }}
"""
