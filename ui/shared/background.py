from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

_T = TypeVar("_T")


class _TaskSignals(QObject):
    success = Signal(object)
    failure = Signal(str)


class _TaskRunnable(QRunnable):
    def __init__(self, work: Callable[[], object], signals: _TaskSignals) -> None:
        super().__init__()
        self._work = work
        self._signals = signals

    def run(self) -> None:
        try:
            result = self._work()
        except Exception as exc:  # noqa: BLE001
            self._signals.failure.emit(str(exc))
        else:
            self._signals.success.emit(result)


class BackgroundTask(QObject):
    """
    Runs `work` on the global thread pool and delivers the outcome on the
    owner's thread. Results arriving after `cancel()` are dropped.
    """

    def __init__(
        self,
        *,
        parent: QObject,
        work: Callable[[], _T],
        on_success: Callable[[_T], None],
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self._work = work
        self._on_success = on_success
        self._on_error = on_error
        self._cancelled = False
        self._signals = _TaskSignals()
        self._signals.success.connect(self._handle_success)
        self._signals.failure.connect(self._handle_failure)

    def start(self) -> None:
        QThreadPool.globalInstance().start(_TaskRunnable(self._work, self._signals))

    def cancel(self) -> None:
        self._cancelled = True

    def _handle_success(self, result: object) -> None:
        if not self._cancelled:
            self._on_success(result)  # type: ignore[arg-type]

    def _handle_failure(self, message: str) -> None:
        if not self._cancelled and self._on_error is not None:
            self._on_error(message)


def start_background_task(
    *,
    parent: QObject,
    work: Callable[[], _T],
    on_success: Callable[[_T], None],
    on_error: Callable[[str], None] | None = None,
) -> BackgroundTask:
    task = BackgroundTask(
        parent=parent,
        work=work,
        on_success=on_success,
        on_error=on_error,
    )
    task.start()
    return task


__all__ = ["BackgroundTask", "start_background_task"]
