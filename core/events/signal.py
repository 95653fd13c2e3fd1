from __future__ import annotations

from threading import RLock
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_DELETED_MARKERS = ("already deleted", "has been deleted")


class Signal(Generic[T]):
    """
    Framework-agnostic observer used by the session monitor.

    Listeners are often bound methods of Qt widgets; once the widget is gone
    PySide raises RuntimeError on call. Those listeners are dropped instead of
    breaking the emitter, any other error propagates.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []
        self._lock = RLock()

    def connect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback not in self._listeners:
                self._listeners.append(callback)

    def disconnect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def disconnect_all(self) -> None:
        with self._lock:
            self._listeners.clear()

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, payload: T) -> None:
        with self._lock:
            listeners = list(self._listeners)
        dead: list[Callable[[T], None]] = []
        for callback in listeners:
            try:
                callback(payload)
            except RuntimeError as exc:
                if any(marker in str(exc).lower() for marker in _DELETED_MARKERS):
                    dead.append(callback)
                    continue
                raise
            except ReferenceError:
                dead.append(callback)
        for callback in dead:
            self.disconnect(callback)


__all__ = ["Signal"]
