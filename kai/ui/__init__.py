# UI module for KAI
from .main_window import MainWindow
from .timer_page import TimerPage
from .history_page import HistoryPage
from .settings_page import SettingsPage

__all__ = ['MainWindow', 'TimerPage', 'HistoryPage', 'SettingsPage']
