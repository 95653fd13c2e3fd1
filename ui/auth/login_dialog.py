from __future__ import annotations

import logging

from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.domain.auth import UserSession
from core.exceptions import ValidationError
from core.services.auth import AuthService
from ui.settings import MainWindowSettingsStore
from ui.styles.ui_config import UIConfig as CFG

logger = logging.getLogger(__name__)


class LoginDialog(QDialog):
    """
    Credentials prompt in front of the main window.

    Rejected credentials and an unreachable server are shown inline so the
    user can retry without dismissing a popup. `notice` carries the reason
    the user was sent back here (expiry, forced sign-out).
    """

    def __init__(
        self,
        auth_service: AuthService,
        settings_store: MainWindowSettingsStore | None = None,
        *,
        notice: str | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._auth_service = auth_service
        self._settings_store = settings_store or MainWindowSettingsStore()
        self._session: UserSession | None = None

        self.setWindowTitle("StarBeverageFlow - Sign In")
        self.setMinimumWidth(CFG.LOGIN_MIN_WIDTH)

        root = QVBoxLayout(self)
        root.setContentsMargins(CFG.MARGIN_LG, CFG.MARGIN_LG, CFG.MARGIN_LG, CFG.MARGIN_LG)
        root.setSpacing(CFG.SPACING_MD)
        root.addWidget(self._heading())
        self.notice_label = self._message_label("loginNotice", CFG.INSUFFICIENT_TITLE_STYLE, notice)
        root.addWidget(self.notice_label)
        root.addLayout(self._credentials_form())
        self.error_label = self._message_label("loginError", CFG.DENIED_TITLE_STYLE, None)
        root.addWidget(self.error_label)
        root.addLayout(self._button_row())

        self._sync_sign_in_enabled()
        if self.username_input.text():
            self.password_input.setFocus()

    @property
    def session(self) -> UserSession | None:
        return self._session

    @staticmethod
    def _heading() -> QWidget:
        box = QWidget()
        layout = QVBoxLayout(box)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(CFG.SPACING_XS)
        title = QLabel("Welcome back")
        title.setStyleSheet(CFG.TITLE_LARGE_STYLE)
        hint = QLabel("Sign in with your StarBeverage account to open the management console.")
        hint.setWordWrap(True)
        hint.setStyleSheet(CFG.INFO_TEXT_STYLE)
        layout.addWidget(title)
        layout.addWidget(hint)
        return box

    @staticmethod
    def _message_label(object_name: str, style: str, text: str | None) -> QLabel:
        label = QLabel(text or "")
        label.setObjectName(object_name)
        label.setWordWrap(True)
        label.setStyleSheet(style)
        label.setVisible(bool(text))
        return label

    def _credentials_form(self) -> QFormLayout:
        form = QFormLayout()
        form.setSpacing(CFG.SPACING_SM)

        self.username_input = QLineEdit(self._settings_store.load_last_username())
        self.username_input.setPlaceholderText("Username")
        self.password_input = QLineEdit()
        self.password_input.setPlaceholderText("Password")
        self.password_input.setEchoMode(QLineEdit.Password)
        self.btn_toggle_password = QPushButton("Show")
        self.btn_toggle_password.setCheckable(True)
        self.btn_toggle_password.setFixedHeight(CFG.BUTTON_HEIGHT)
        self.btn_toggle_password.setSizePolicy(CFG.BTN_FIXED_HEIGHT)

        password_row = QHBoxLayout()
        password_row.setContentsMargins(0, 0, 0, 0)
        password_row.setSpacing(CFG.SPACING_XS)
        password_row.addWidget(self.password_input, 1)
        password_row.addWidget(self.btn_toggle_password)
        form.addRow("Username:", self.username_input)
        form.addRow("Password:", password_row)

        self.btn_toggle_password.toggled.connect(self._toggle_password_visibility)
        for field in (self.username_input, self.password_input):
            field.textChanged.connect(self._sync_sign_in_enabled)
            field.returnPressed.connect(self._try_sign_in)
        return form

    def _button_row(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.addStretch()
        self.btn_cancel = QPushButton("Quit")
        self.btn_sign_in = QPushButton("Sign In")
        self.btn_sign_in.setDefault(True)
        for button in (self.btn_cancel, self.btn_sign_in):
            button.setFixedHeight(CFG.BUTTON_HEIGHT)
            row.addWidget(button)
        self.btn_cancel.clicked.connect(self.reject)
        self.btn_sign_in.clicked.connect(self._try_sign_in)
        return row

    def _sync_sign_in_enabled(self, *_args) -> None:
        ready = bool(self.username_input.text().strip()) and bool(self.password_input.text())
        self.btn_sign_in.setEnabled(ready)

    def _toggle_password_visibility(self, visible: bool) -> None:
        self.password_input.setEchoMode(QLineEdit.Normal if visible else QLineEdit.Password)
        self.btn_toggle_password.setText("Hide" if visible else "Show")

    def _show_error(self, message: str) -> None:
        self.notice_label.hide()
        self.error_label.setText(message)
        self.error_label.show()

    def _try_sign_in(self) -> None:
        if not self.btn_sign_in.isEnabled():
            return
        self.btn_sign_in.setEnabled(False)
        try:
            session = self._auth_service.login(self.username_input.text(), self.password_input.text())
        except ValidationError as exc:
            self.password_input.clear()
            self._show_error(str(exc))
            return
        except Exception as exc:
            logger.exception("Sign in failed unexpectedly.")
            QMessageBox.critical(self, "Sign In failed", str(exc))
            return
        finally:
            self._sync_sign_in_enabled()

        self._session = session
        self._settings_store.save_last_username(session.username)
        self.accept()


__all__ = ["LoginDialog"]
