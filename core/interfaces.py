from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Mapping


class AuthBackend(ABC):
    """Remote side of authentication: the PHP API, or a fake in tests."""

    @abstractmethod
    def login(self, username: str, password: str) -> Mapping[str, Any]: ...

    @abstractmethod
    def fetch_session_timeout_minutes(self) -> int | None: ...

    @abstractmethod
    def record_logout(self, user_id: str) -> None: ...


class SessionStore(ABC):
    """Client-side persistence of the signed-in user and login time."""

    @abstractmethod
    def load_login_time(self) -> datetime | None: ...

    @abstractmethod
    def save_login_time(self, moment: datetime) -> None: ...

    @abstractmethod
    def load_user(self) -> dict[str, Any] | None: ...

    @abstractmethod
    def save_user(self, user: Mapping[str, Any]) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


__all__ = ["AuthBackend", "SessionStore"]
