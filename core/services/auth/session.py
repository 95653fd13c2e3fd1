from __future__ import annotations

from datetime import datetime
from threading import RLock
from typing import TYPE_CHECKING

from core.domain.auth import UserSession
from core.domain.enums import AuthState

if TYPE_CHECKING:
    from core.services.auth.authorization import PermissionEvaluator


class UserSessionContext:
    """
    Owner of the signed-in user's session.

    Readers get immutable snapshots. Every mutation is a single swap under the
    lock, so a permission check never sees a half-invalidated session even
    when the session timer fires on another thread.
    """

    def __init__(self, evaluator: "PermissionEvaluator | None" = None):
        self._lock = RLock()
        self._session: UserSession | None = None
        self._loading = False
        self._evaluator = evaluator

    @property
    def session(self) -> UserSession | None:
        with self._lock:
            return self._session

    @property
    def auth_state(self) -> AuthState:
        with self._lock:
            if self._loading:
                return AuthState.LOADING
            if self._session is None:
                return AuthState.ANONYMOUS
            return AuthState.AUTHENTICATED

    def begin_loading(self) -> None:
        with self._lock:
            self._loading = True

    def end_loading(self) -> None:
        with self._lock:
            self._loading = False

    def set_session(self, session: UserSession) -> None:
        with self._lock:
            self._session = session
            self._loading = False

    def extend(self, moment: datetime) -> UserSession | None:
        with self._lock:
            if self._session is None:
                return None
            self._session = self._session.extended_to(moment)
            return self._session

    def clear(self) -> UserSession | None:
        with self._lock:
            previous = self._session
            self._session = None
            self._loading = False
            return previous

    def is_authenticated(self) -> bool:
        return self.auth_state is AuthState.AUTHENTICATED

    def role_id(self) -> str | None:
        snapshot = self.session
        return snapshot.role_id if snapshot is not None else None

    def has_permission(self, permission_code: object) -> bool:
        snapshot = self.session
        if snapshot is None or self._evaluator is None:
            return False
        return self._evaluator.can_access(snapshot.role_id, permission_code)


__all__ = ["UserSessionContext"]
