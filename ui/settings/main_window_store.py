from __future__ import annotations

from PySide6.QtCore import QByteArray, QSettings


class MainWindowSettingsStore:
    """Adapter around QSettings for persisted main-window UI state."""

    ORG_NAME = "StarBeverage"
    APP_NAME = "StarBeverageFlow"

    _KEY_LAST_PAGE = "ui/last_page"
    _KEY_GEOMETRY = "ui/main_window_geometry"
    _KEY_LAST_USERNAME = "ui/last_username"

    def __init__(self, settings: QSettings | None = None) -> None:
        self._settings = settings or QSettings(self.ORG_NAME, self.APP_NAME)

    @classmethod
    def _last_page_key(cls, username: str) -> str:
        # one entry per account; QSettings treats "/" as a group separator
        user = (username or "").strip().lower().replace("/", "_")
        return f"{cls._KEY_LAST_PAGE}/{user or '_anonymous'}"

    def load_last_page(self, *, username: str = "", default_page: str = "dashboard") -> str:
        raw = self._settings.value(self._last_page_key(username), default_page)
        return str(raw or "").strip().lower() or default_page

    def save_last_page(self, page_id: str, *, username: str = "") -> None:
        self._settings.setValue(self._last_page_key(username), (page_id or "").strip().lower())
        self._settings.sync()

    def load_last_username(self) -> str:
        return str(self._settings.value(self._KEY_LAST_USERNAME, "") or "").strip()

    def save_last_username(self, username: str) -> None:
        self._settings.setValue(self._KEY_LAST_USERNAME, (username or "").strip())
        self._settings.sync()

    def load_geometry(self) -> QByteArray | None:
        raw = self._settings.value(self._KEY_GEOMETRY)
        if isinstance(raw, QByteArray) and not raw.isEmpty():
            return raw
        return None

    def save_geometry(self, geometry: QByteArray | None) -> None:
        if geometry is not None and not geometry.isEmpty():
            self._settings.setValue(self._KEY_GEOMETRY, geometry)
            self._settings.sync()
