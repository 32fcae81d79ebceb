# KAI - menu-bar pomodoro and simple timer
__version__ = "1.0.0"
