from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QTimer
from PySide6.QtWidgets import QApplication, QDialog

from infra.services import ServiceGraph
from ui.auth.login_dialog import LoginDialog
from ui.main_window import MainWindow
from ui.settings import MainWindowSettingsStore

logger = logging.getLogger(__name__)

_SIGN_OUT_NOTICES = {
    "expired": "Your session has expired. Please sign in again.",
    "unauthenticated": "Please sign in to continue.",
}


class AppController(QObject):
    """
    Switches between the login dialog and the main window.

    A persisted session is restored on start so a restart does not reset the
    expiry clock. After an expiry the location the user was on is reopened
    once they sign back in.
    """

    def __init__(
        self,
        app: QApplication,
        services: ServiceGraph,
        *,
        settings_store: MainWindowSettingsStore | None = None,
    ):
        super().__init__()
        self._app = app
        self._services = services
        self._settings_store = settings_store or MainWindowSettingsStore()
        self._window: MainWindow | None = None
        self._app.setQuitOnLastWindowClosed(False)

    @property
    def window(self) -> MainWindow | None:
        return self._window

    def start(self) -> bool:
        if self._services.auth_service.restore() is not None:
            self._open_main_window()
            return True
        return self._prompt_login()

    def _prompt_login(self, *, notice: str | None = None, return_to: str | None = None) -> bool:
        dialog = LoginDialog(
            self._services.auth_service,
            self._settings_store,
            notice=notice,
        )
        if dialog.exec() != QDialog.Accepted or dialog.session is None:
            logger.info("Sign in cancelled; exiting.")
            self._app.quit()
            return False
        self._open_main_window(return_to)
        return True

    def _open_main_window(self, return_to: str | None = None) -> None:
        window = MainWindow(
            self._services.as_dict(),
            settings_store=self._settings_store,
            initial_path=return_to,
        )
        window.signed_out.connect(self._on_signed_out)
        window.window_closed.connect(self._app.quit)
        self._window = window
        window.show()
        window.start_session_monitor()

    def _on_signed_out(self, reason: str, return_to: str) -> None:
        window = self._window
        self._window = None
        if window is not None:
            window.close()
            window.deleteLater()
        notice = _SIGN_OUT_NOTICES.get(reason)
        # leave the signal handler before running the modal login loop
        QTimer.singleShot(0, lambda: self._prompt_login(notice=notice, return_to=return_to or None))


__all__ = ["AppController"]
