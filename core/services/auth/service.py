from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from core.domain.auth import UserSession
from core.domain.enums import AuthState
from core.exceptions import (
    BackendError,
    BackendRejectedError,
    BackendUnavailableError,
    ValidationError,
)
from core.interfaces import AuthBackend, SessionStore
from core.services.auth.monitor import (
    DEFAULT_TIMEOUT_MINUTES,
    Clock,
    SessionMonitor,
    resolve_timeout_minutes,
    utc_now,
)
from core.services.auth.registry import RoleRegistry, normalize_role_id
from core.services.auth.session import UserSessionContext

logger = logging.getLogger(__name__)

EventRecorder = Callable[..., object]
Dispatcher = Callable[[Callable[[], None]], None]


def run_in_background(job: Callable[[], None]) -> None:
    threading.Thread(target=job, name="auth-audit", daemon=True).start()


class AuthService:
    def __init__(
        self,
        backend: AuthBackend,
        store: SessionStore,
        user_session: UserSessionContext,
        registry: RoleRegistry,
        *,
        default_timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES,
        clock: Clock = utc_now,
        dispatch: Dispatcher = run_in_background,
        event_recorder: EventRecorder | None = None,
    ):
        self._backend: AuthBackend = backend
        self._store: SessionStore = store
        self._user_session: UserSessionContext = user_session
        self._registry: RoleRegistry = registry
        self._default_timeout = resolve_timeout_minutes(default_timeout_minutes)
        self._clock: Clock = clock
        self._dispatch: Dispatcher = dispatch
        self._event_recorder: EventRecorder | None = event_recorder

    @property
    def auth_state(self) -> AuthState:
        return self._user_session.auth_state

    @property
    def user_session(self) -> UserSessionContext:
        return self._user_session

    @property
    def default_timeout_minutes(self) -> int:
        return self._default_timeout

    def login(self, username: str, raw_password: str) -> UserSession:
        normalized = (username or "").strip()
        if not normalized or not raw_password:
            raise ValidationError(
                "Username and password are required.",
                code="CREDENTIALS_REQUIRED",
            )

        self._user_session.begin_loading()
        try:
            payload = self._backend.login(normalized, raw_password)
        except BackendRejectedError as exc:
            self._record_auth_event(
                action="auth.login.failed",
                username=normalized,
                user_id=None,
                details={"reason": "invalid_credentials"},
            )
            raise ValidationError(str(exc) or "Invalid credentials.", code="AUTH_FAILED") from exc
        except BackendUnavailableError as exc:
            self._record_auth_event(
                action="auth.login.failed",
                username=normalized,
                user_id=None,
                details={"reason": "backend_unavailable"},
            )
            raise ValidationError(
                "The server could not be reached. Check your connection and try again.",
                code="BACKEND_UNAVAILABLE",
            ) from exc
        finally:
            self._user_session.end_loading()

        user = self._user_from_payload(payload)
        session = UserSession(
            user_id=user["id"],
            username=user["username"] or normalized,
            role_id=user["role"],
            display_name=user["name"],
            login_timestamp=self._clock(),
        )
        if not self._registry.has_role(session.role_id):
            logger.warning(
                "User '%s' signed in with unknown role %r; all pages will be denied.",
                session.username,
                session.role_id,
            )
        self._user_session.set_session(session)
        self._store.save_user(user)
        self._store.save_login_time(session.login_timestamp)
        self._record_auth_event(
            action="auth.login.success",
            username=session.username,
            user_id=session.user_id,
            details={"role": session.role_id},
        )
        return session

    def restore(self) -> UserSession | None:
        """Rebuild the session persisted before a restart without resetting its clock."""
        self._user_session.begin_loading()
        try:
            raw_user = self._store.load_user()
            login_time = self._store.load_login_time()
            if raw_user is None or login_time is None:
                if raw_user is not None or login_time is not None:
                    logger.info("Discarding incomplete persisted session.")
                    self._store.clear()
                return None
            try:
                user = self._user_from_payload(raw_user)
            except ValidationError as exc:
                logger.warning("Discarding unreadable persisted session: %s", exc)
                self._store.clear()
                return None
            session = UserSession(
                user_id=user["id"],
                username=user["username"],
                role_id=user["role"],
                display_name=user["name"],
                login_timestamp=login_time,
            )
            self._user_session.set_session(session)
            logger.info("Restored session for '%s' (login at %s).", session.username, login_time.isoformat())
            return session
        finally:
            self._user_session.end_loading()

    def extend_session(self) -> UserSession | None:
        session = self._user_session.extend(self._clock())
        if session is None:
            return None
        self._store.save_login_time(session.login_timestamp)
        self._record_auth_event(
            action="auth.session.extended",
            username=session.username,
            user_id=session.user_id,
            details={"login_time": session.login_timestamp.isoformat()},
        )
        return session

    def logout(self, reason: str = "user") -> UserSession | None:
        previous = self._user_session.clear()
        self._store.clear()
        if previous is None:
            return None

        action = "auth.session.expired" if reason == "expired" else "auth.logout"
        self._record_auth_event(
            action=action,
            username=previous.username,
            user_id=previous.user_id,
            details={"reason": reason},
        )
        user_id = previous.user_id
        self._dispatch(lambda: self._send_logout_audit(user_id))
        return previous

    def fetch_session_timeout(self) -> int:
        try:
            raw = self._backend.fetch_session_timeout_minutes()
        except BackendError as exc:
            logger.warning(
                "Session timeout could not be loaded (%s); using %s minutes.",
                exc,
                self._default_timeout,
            )
            return self._default_timeout
        return resolve_timeout_minutes(raw, default=self._default_timeout)

    def create_monitor(self, timeout_minutes: int | None = None) -> SessionMonitor:
        return SessionMonitor(
            self._user_session,
            timeout_minutes=timeout_minutes or self._default_timeout,
            clock=self._clock,
            extender=self.extend_session,
        )

    def _send_logout_audit(self, user_id: str) -> None:
        try:
            self._backend.record_logout(user_id)
        except BackendError as exc:
            logger.warning("Logout audit for user %s was not recorded: %s", user_id, exc)

    @staticmethod
    def _user_from_payload(payload: Mapping[str, Any]) -> dict[str, str]:
        if not isinstance(payload, Mapping):
            raise ValidationError("User payload must be an object.", code="AUTH_PAYLOAD_INVALID")
        user_id = str(payload.get("id") or "").strip()
        if not user_id:
            raise ValidationError("User payload is missing an id.", code="AUTH_PAYLOAD_INVALID")
        return {
            "id": user_id,
            "username": str(payload.get("username") or "").strip(),
            "name": str(payload.get("name") or "").strip(),
            "role": normalize_role_id(payload.get("role")),
        }

    def _record_auth_event(
        self,
        *,
        action: str,
        username: str,
        user_id: str | None,
        details: dict[str, str],
    ) -> None:
        if self._event_recorder is None:
            return
        try:
            self._event_recorder(
                event_type=action,
                message=f"{action} for {username or 'unknown'}",
                data={"user_id": user_id, "username": username, **details},
            )
        except Exception as exc:
            logger.warning("Failed to write auth event '%s': %s", action, exc)


__all__ = ["AuthService", "run_in_background"]
