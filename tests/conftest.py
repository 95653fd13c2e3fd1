# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import BackendRejectedError, BackendUnavailableError
from core.interfaces import AuthBackend, SessionStore
from core.services.auth import (
    AuthService,
    PermissionEvaluator,
    RoleRegistry,
    UserSessionContext,
)
from core.services.navigation import RouteGuard


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, *, minutes: float = 0, seconds: float = 0) -> datetime:
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)
        return self.now


class InMemorySessionStore(SessionStore):
    def __init__(self):
        self.login_time = None
        self.user = None
        self.clear_calls = 0

    def load_login_time(self):
        return self.login_time

    def save_login_time(self, moment):
        self.login_time = moment

    def load_user(self):
        return dict(self.user) if self.user is not None else None

    def save_user(self, user):
        self.user = dict(user)

    def clear(self):
        self.login_time = None
        self.user = None
        self.clear_calls += 1


class FakeBackend(AuthBackend):
    def __init__(self):
        self.users = {
            "alice": ("Secret123", {"id": 1, "username": "alice", "name": "Alice Admin", "role": "admin"}),
            "sam": ("Secret123", {"id": 2, "username": "sam", "name": "Sam Sales", "role": "agents_vente"}),
            "tom": ("Secret123", {"id": 3, "username": "tom", "name": "Tom Staff", "role": "staff"}),
            "ghost": ("Secret123", {"id": 4, "username": "ghost", "name": "", "role": "intern"}),
        }
        self.timeout_minutes = 30
        self.timeout_error: Exception | None = None
        self.logout_error: Exception | None = None
        self.unavailable = False
        self.login_calls: list[str] = []
        self.logouts: list[str] = []

    def login(self, username, password):
        self.login_calls.append(username)
        if self.unavailable:
            raise BackendUnavailableError("connection refused", code="NETWORK_ERROR")
        entry = self.users.get(username)
        if entry is None or entry[0] != password:
            raise BackendRejectedError("Invalid username or password.", code="LOGIN_REJECTED")
        return dict(entry[1])

    def fetch_session_timeout_minutes(self):
        if self.timeout_error is not None:
            raise self.timeout_error
        return self.timeout_minutes

    def record_logout(self, user_id):
        self.logouts.append(user_id)
        if self.logout_error is not None:
            raise self.logout_error


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def registry():
    return RoleRegistry.default()


@pytest.fixture
def evaluator(registry):
    return PermissionEvaluator(registry)


@pytest.fixture
def user_session(evaluator):
    return UserSessionContext(evaluator)


@pytest.fixture
def auth_events():
    return []


@pytest.fixture
def auth_service(backend, store, user_session, registry, clock, auth_events):
    def _record(**kwargs):
        auth_events.append(kwargs)
        return "trace-test"

    return AuthService(
        backend=backend,
        store=store,
        user_session=user_session,
        registry=registry,
        default_timeout_minutes=30,
        clock=clock,
        dispatch=lambda job: job(),
        event_recorder=_record,
    )


@pytest.fixture
def route_guard(user_session, evaluator):
    return RouteGuard(user_session, evaluator)
