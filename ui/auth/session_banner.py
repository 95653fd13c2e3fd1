from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QPushButton, QWidget

from core.domain.enums import SessionState
from core.services.auth import SessionStatus
from ui.styles.ui_config import UIConfig as CFG


def warning_text(status: SessionStatus) -> str:
    minutes = status.minutes_left
    unit = "minute" if minutes == 1 else "minutes"
    return f"Your session will expire in {minutes} {unit}."


class SessionTimeoutBanner(QFrame):
    """Inline warning shown while the session is in its final minutes."""

    extend_requested = Signal()

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setObjectName("sessionBanner")
        self.setStyleSheet(CFG.WARNING_BANNER_STYLE)
        self._dismissed = False

        layout = QHBoxLayout(self)
        layout.setContentsMargins(CFG.MARGIN_SM, CFG.MARGIN_SM, CFG.MARGIN_SM, CFG.MARGIN_SM)
        layout.setSpacing(CFG.SPACING_SM)
        self.message_label = QLabel("")
        self.message_label.setWordWrap(True)
        self.btn_extend = QPushButton("Extend session")
        self.btn_dismiss = QPushButton("Dismiss")
        for button in (self.btn_extend, self.btn_dismiss):
            button.setFixedHeight(CFG.BUTTON_HEIGHT)
            button.setSizePolicy(CFG.BTN_FIXED_HEIGHT)
        layout.addWidget(self.message_label, 1)
        layout.addWidget(self.btn_extend)
        layout.addWidget(self.btn_dismiss)

        self.btn_extend.clicked.connect(self.extend_requested.emit)
        self.btn_dismiss.clicked.connect(self._dismiss)
        self.hide()

    def show_status(self, status: SessionStatus) -> None:
        if status.state is not SessionState.WARNING:
            self._dismissed = False
            self.hide()
            return
        self.message_label.setText(warning_text(status))
        if not self._dismissed:
            self.show()

    def _dismiss(self) -> None:
        self._dismissed = True
        self.hide()


__all__ = ["SessionTimeoutBanner", "warning_text"]
