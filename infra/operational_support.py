from __future__ import annotations

import json
import logging
import os
import re
import sys
import threading
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Iterator, Mapping

from infra.path import user_data_dir
from infra.version import get_app_version

REDACTED = "<redacted>"
REDACTED_EMAIL = "<redacted-email>"

_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("sbf_trace_id", default=None)
_SENSITIVE_KEY_PARTS = ("password", "passwd", "pwd", "token", "secret", "authorization", "cookie")
_EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_SECRET_PAIR_PATTERN = re.compile(
    r"(?i)\b(password|passwd|pwd|token|secret|authorization)\b\s*[:=]\s*([^\s,;]+)"
)

logger = logging.getLogger(__name__)


def new_trace_id() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"trc-{stamp}-{uuid.uuid4().hex[:8]}"


def current_trace_id() -> str | None:
    value = (_TRACE_ID_CTX.get() or "").strip()
    return value or None


@contextmanager
def bind_trace_id(trace_id: str | None = None) -> Iterator[str]:
    token = _TRACE_ID_CTX.set((trace_id or "").strip() or new_trace_id())
    try:
        yield _TRACE_ID_CTX.get()  # type: ignore[misc]
    finally:
        _TRACE_ID_CTX.reset(token)


def redact_text(value: str) -> str:
    text = _EMAIL_PATTERN.sub(REDACTED_EMAIL, str(value or ""))
    return _SECRET_PAIR_PATTERN.sub(lambda m: f"{m.group(1)}={REDACTED}", text)


def redact_value(value: Any, *, _depth: int = 0) -> Any:
    if _depth >= 8:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED
            if any(part in str(key).lower() for part in _SENSITIVE_KEY_PARTS)
            else redact_value(item, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
        return [redact_value(item, _depth=_depth + 1) for item in items]
    return redact_text(str(value))


class TraceIdLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = current_trace_id() or "-"
        return True


class SupportEventLog:
    """Append-only JSONL file of support events (sign-in, sign-out, expiry, crashes)."""

    def __init__(self, events_path: str | Path | None = None) -> None:
        if events_path is None:
            events_path = user_data_dir() / "logs" / "support-events.jsonl"
        self._events_path = Path(events_path)
        self._events_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

    @property
    def events_path(self) -> Path:
        return self._events_path

    def emit_event(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        data: Mapping[str, Any] | None = None,
    ) -> str:
        trace_id = current_trace_id() or new_trace_id()
        payload: dict[str, Any] = {
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            "event_type": (event_type or "").strip() or "support.event",
            "level": (level or "INFO").strip().upper(),
            "trace_id": trace_id,
            "message": redact_text(message),
            "app_version": get_app_version(),
            "pid": os.getpid(),
        }
        if data:
            payload["data"] = redact_value(dict(data))
        line = json.dumps(payload, ensure_ascii=True, sort_keys=True)
        with self._lock:
            with self._events_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        return trace_id

    def read_events(self, *, event_type: str | None = None) -> list[dict[str, Any]]:
        if not self._events_path.exists():
            return []
        events: list[dict[str, Any]] = []
        for line in self._events_path.read_text(encoding="utf-8", errors="ignore").splitlines():
            try:
                payload = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(payload, dict):
                continue
            if event_type and payload.get("event_type") != event_type:
                continue
            events.append(payload)
        return events


_SUPPORT_LOG: SupportEventLog | None = None
_HOOKS_INSTALLED = False


def get_support_log() -> SupportEventLog:
    global _SUPPORT_LOG
    if _SUPPORT_LOG is None:
        _SUPPORT_LOG = SupportEventLog()
    return _SUPPORT_LOG


def install_global_exception_hooks(support: SupportEventLog | None = None) -> None:
    global _HOOKS_INSTALLED
    if _HOOKS_INSTALLED:
        return
    recorder = support or get_support_log()

    def _record(exc_type: type[BaseException], exc_value: BaseException, exc_tb: Any, context: str) -> None:
        try:
            recorder.emit_event(
                event_type="app.crash",
                level="ERROR",
                message=f"Unhandled exception in {context}: {exc_value}",
                data={
                    "context": context,
                    "exception_type": exc_type.__name__,
                    "stacktrace": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
                },
            )
        except OSError as exc:
            logger.error("Could not record crash event: %s", exc)

    previous_sys_hook = sys.excepthook

    def _sys_hook(exc_type: type[BaseException], exc_value: BaseException, exc_tb: Any) -> None:
        _record(exc_type, exc_value, exc_tb, "main-thread")
        previous_sys_hook(exc_type, exc_value, exc_tb)

    previous_thread_hook = threading.excepthook

    def _thread_hook(args: Any) -> None:
        name = getattr(args.thread, "name", "worker-thread")
        _record(args.exc_type, args.exc_value, args.exc_traceback, f"thread:{name}")
        previous_thread_hook(args)

    sys.excepthook = _sys_hook
    threading.excepthook = _thread_hook
    _HOOKS_INSTALLED = True


__all__ = [
    "REDACTED",
    "REDACTED_EMAIL",
    "SupportEventLog",
    "TraceIdLogFilter",
    "bind_trace_id",
    "current_trace_id",
    "get_support_log",
    "install_global_exception_hooks",
    "new_trace_id",
    "redact_text",
    "redact_value",
]
