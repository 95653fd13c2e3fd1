from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QTimer

from core.services.auth.monitor import POLL_INTERVAL_SECONDS, SessionMonitor

logger = logging.getLogger(__name__)


class SessionTimer(QObject):
    """Drives `SessionMonitor.check()` from the Qt event loop."""

    def __init__(
        self,
        monitor: SessionMonitor,
        *,
        poll_seconds: int = POLL_INTERVAL_SECONDS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._monitor = monitor
        self._timer = QTimer(self)
        self._timer.setInterval(max(1, int(poll_seconds)) * 1000)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def monitor(self) -> SessionMonitor:
        return self._monitor

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        if not self._monitor.is_running:
            return
        self._timer.start()
        # first check right away so a restored session past its timeout expires immediately
        self._monitor.check()

    def stop(self) -> None:
        self._timer.stop()
        self._monitor.stop()

    def _on_timeout(self) -> None:
        if not self._monitor.is_running:
            self._timer.stop()
            return
        self._monitor.check()
        if not self._monitor.is_running:
            logger.debug("Session monitor finished; stopping poll timer.")
            self._timer.stop()


__all__ = ["SessionTimer"]
