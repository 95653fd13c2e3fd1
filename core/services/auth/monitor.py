from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import RLock
from typing import Callable

from core.domain.enums import SessionState
from core.events.signal import Signal
from core.services.auth.session import UserSessionContext

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MINUTES = 30
WARNING_THRESHOLD_MINUTES = 5
POLL_INTERVAL_SECONDS = 60

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_timeout_minutes(raw: object, default: int = DEFAULT_TIMEOUT_MINUTES) -> int:
    """Return `raw` as a positive number of minutes, or `default` when it is unusable."""
    if isinstance(raw, bool) or raw is None:
        return default
    try:
        value = int(str(raw).strip()) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric session timeout %r; using %s minutes.", raw, default)
        return default
    if isinstance(raw, float) and raw != value:
        logger.warning("Ignoring fractional session timeout %r; using %s minutes.", raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive session timeout %r; using %s minutes.", raw, default)
        return default
    return value


@dataclass(frozen=True)
class SessionStatus:
    state: SessionState
    elapsed: timedelta
    timeout_minutes: int

    @property
    def remaining(self) -> timedelta:
        left = timedelta(minutes=self.timeout_minutes) - self.elapsed
        return left if left > timedelta(0) else timedelta(0)

    @property
    def minutes_left(self) -> int:
        # rounded up so the banner never shows "0 minutes" before expiry
        seconds = int(self.remaining.total_seconds())
        return (seconds + 59) // 60


class SessionMonitor:
    """
    Three-state timeout tracker for one session instance.

    ACTIVE -> WARNING once fewer than `warning_minutes` remain, WARNING ->
    ACTIVE on `extend()`, any state -> EXPIRED once the timeout is reached.
    Expiry is level triggered: each `check()` compares elapsed time with the
    timeout, so a delayed or skipped tick still expires on the next one, and
    `expired` fires exactly once. After expiry or `stop()` the monitor is
    inert and late timer ticks do nothing.
    """

    def __init__(
        self,
        user_session: UserSessionContext,
        *,
        timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES,
        warning_minutes: int = WARNING_THRESHOLD_MINUTES,
        clock: Clock = utc_now,
        extender: Callable[[], object] | None = None,
    ):
        self._user_session = user_session
        self._timeout_minutes = resolve_timeout_minutes(timeout_minutes)
        self._warning_minutes = max(0, int(warning_minutes))
        self._clock = clock
        self._extender = extender or (lambda: user_session.extend(clock()))
        self._lock = RLock()
        self._state = SessionState.ACTIVE
        self._stopped = False

        self.state_changed: Signal[SessionStatus] = Signal()
        self.warning: Signal[SessionStatus] = Signal()
        self.expired: Signal[SessionStatus] = Signal()
        self.ticked: Signal[SessionStatus] = Signal()

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def timeout_minutes(self) -> int:
        return self._timeout_minutes

    @property
    def is_running(self) -> bool:
        with self._lock:
            return not self._stopped

    def apply_timeout(self, minutes: object) -> int:
        with self._lock:
            self._timeout_minutes = resolve_timeout_minutes(minutes, default=self._timeout_minutes)
            return self._timeout_minutes

    def evaluate(self, now: datetime | None = None) -> SessionStatus:
        session = self._user_session.session
        if session is None:
            return SessionStatus(SessionState.EXPIRED, timedelta(0), self._timeout_minutes)
        moment = now or self._clock()
        elapsed = moment - session.login_timestamp
        if elapsed < timedelta(0):
            elapsed = timedelta(0)
        timeout = timedelta(minutes=self._timeout_minutes)
        warn_at = timeout - timedelta(minutes=self._warning_minutes)
        if elapsed >= timeout:
            state = SessionState.EXPIRED
        elif elapsed >= warn_at:
            state = SessionState.WARNING
        else:
            state = SessionState.ACTIVE
        return SessionStatus(state, elapsed, self._timeout_minutes)

    def check(self) -> SessionStatus:
        with self._lock:
            if self._stopped:
                return self._frozen_status()
            status = self.evaluate()
            previous = self._state
            self._state = status.state
            if status.state is SessionState.EXPIRED:
                self._stopped = True

        if status.state is not previous:
            logger.info("Session state %s -> %s", previous.value, status.state.value)
            self.state_changed.emit(status)
            if status.state is SessionState.WARNING:
                self.warning.emit(status)
            elif status.state is SessionState.EXPIRED:
                self.expired.emit(status)
        self.ticked.emit(status)
        return status

    def extend(self) -> SessionStatus:
        status = self.check()
        if status.state is SessionState.EXPIRED:
            return status
        with self._lock:
            self._extender()
        return self.check()

    def stop(self) -> None:
        with self._lock:
            self._stopped = True

    def _frozen_status(self) -> SessionStatus:
        return SessionStatus(self._state, self.evaluate().elapsed, self._timeout_minutes)


__all__ = [
    "DEFAULT_TIMEOUT_MINUTES",
    "POLL_INTERVAL_SECONDS",
    "SessionMonitor",
    "SessionStatus",
    "WARNING_THRESHOLD_MINUTES",
    "resolve_timeout_minutes",
    "utc_now",
]
