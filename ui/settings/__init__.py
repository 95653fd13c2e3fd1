from ui.settings.main_window_store import MainWindowSettingsStore
from ui.settings.session_store import QSettingsSessionStore

__all__ = ["MainWindowSettingsStore", "QSettingsSessionStore"]
