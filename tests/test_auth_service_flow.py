from __future__ import annotations

from datetime import timedelta

import pytest

from core.domain.enums import AuthState, SessionState
from core.exceptions import BackendUnavailableError, ValidationError
from core.services.auth import AuthService
from core.services.navigation import GuardOutcome, GuardTarget


def test_login_creates_session_and_persists_it(auth_service, store, clock, auth_events):
    session = auth_service.login("alice", "Secret123")

    assert session.user_id == "1"
    assert session.role_id == "admin"
    assert session.login_timestamp == clock.now
    assert auth_service.auth_state is AuthState.AUTHENTICATED
    assert store.login_time == clock.now
    assert store.user == {"id": "1", "username": "alice", "name": "Alice Admin", "role": "admin"}
    assert auth_events[-1]["event_type"] == "auth.login.success"


def test_login_keeps_backend_role_id_and_resolves_alias(auth_service, user_session):
    session = auth_service.login("sam", "Secret123")

    assert session.role_id == "agents_vente"
    assert user_session.has_permission("orders:manage") is True
    assert user_session.has_permission("reports:view") is False


def test_blank_credentials_never_reach_the_backend(auth_service, backend):
    with pytest.raises(ValidationError, match="required") as exc_info:
        auth_service.login("   ", "Secret123")

    assert exc_info.value.code == "CREDENTIALS_REQUIRED"
    assert backend.login_calls == []


def test_rejected_credentials_raise_auth_failed(auth_service, store, auth_events):
    with pytest.raises(ValidationError, match="Invalid username or password") as exc_info:
        auth_service.login("alice", "wrong")

    assert exc_info.value.code == "AUTH_FAILED"
    assert auth_service.auth_state is AuthState.ANONYMOUS
    assert store.user is None
    assert auth_events[-1]["event_type"] == "auth.login.failed"
    assert auth_events[-1]["data"]["reason"] == "invalid_credentials"


def test_unreachable_backend_is_reported_and_loading_ends(auth_service, backend):
    backend.unavailable = True

    with pytest.raises(ValidationError) as exc_info:
        auth_service.login("alice", "Secret123")

    assert exc_info.value.code == "BACKEND_UNAVAILABLE"
    assert auth_service.auth_state is AuthState.ANONYMOUS


def test_unknown_role_signs_in_but_has_no_permissions(auth_service, user_session, caplog):
    session = auth_service.login("ghost", "Secret123")

    assert session.role_id == "intern"
    assert user_session.has_permission("dashboard:view") is False
    assert "unknown role" in caplog.text


def test_restore_keeps_original_login_time(auth_service, user_session, store, clock):
    started = auth_service.login("tom", "Secret123").login_timestamp
    user_session.clear()
    clock.advance(minutes=20)

    restored = auth_service.restore()

    assert restored is not None
    assert restored.login_timestamp == started
    assert user_session.session == restored
    monitor = auth_service.create_monitor()
    clock.advance(minutes=6)
    assert monitor.check().state is SessionState.WARNING


def test_restore_discards_incomplete_or_unreadable_state(auth_service, store, clock):
    store.user = {"id": "1", "username": "alice", "role": "admin"}
    assert auth_service.restore() is None
    assert store.clear_calls == 1

    store.user = {"username": "nobody"}
    store.login_time = clock.now
    assert auth_service.restore() is None
    assert store.user is None
    assert auth_service.auth_state is AuthState.ANONYMOUS


def test_extend_session_persists_new_login_time(auth_service, store, clock, auth_events):
    auth_service.login("tom", "Secret123")
    clock.advance(minutes=27)

    session = auth_service.extend_session()

    assert session.login_timestamp == clock.now
    assert store.login_time == clock.now
    assert auth_events[-1]["event_type"] == "auth.session.extended"


def test_monitor_extend_goes_through_the_service(auth_service, store, clock):
    auth_service.login("tom", "Secret123")
    monitor = auth_service.create_monitor()
    clock.advance(minutes=27)
    assert monitor.check().state is SessionState.WARNING

    assert monitor.extend().state is SessionState.ACTIVE
    assert store.login_time == clock.now


def test_logout_clears_session_before_audit_call(auth_service, backend, user_session, store):
    seen_during_audit = []
    original = backend.record_logout

    def _record(user_id):
        seen_during_audit.append((user_session.session, store.user))
        original(user_id)

    backend.record_logout = _record
    auth_service.login("alice", "Secret123")

    previous = auth_service.logout()

    assert previous is not None and previous.username == "alice"
    assert seen_during_audit == [(None, None)]
    assert backend.logouts == ["1"]
    assert auth_service.auth_state is AuthState.ANONYMOUS


def test_logout_audit_failure_is_swallowed(auth_service, backend, caplog):
    backend.logout_error = BackendUnavailableError("server down", code="NETWORK_ERROR")
    auth_service.login("alice", "Secret123")

    auth_service.logout()

    assert auth_service.auth_state is AuthState.ANONYMOUS
    assert "was not recorded" in caplog.text


def test_logout_without_session_skips_audit(auth_service, backend, store):
    assert auth_service.logout() is None
    assert backend.logouts == []
    assert store.clear_calls == 1


def test_expiry_signs_out_and_guard_redirects(auth_service, route_guard, store, clock, auth_events):
    auth_service.login("tom", "Secret123")
    monitor = auth_service.create_monitor()
    monitor.expired.connect(lambda _status: auth_service.logout("expired"))

    clock.advance(minutes=31)
    status = monitor.check()

    assert status.state is SessionState.EXPIRED
    assert store.user is None
    assert auth_events[-1]["event_type"] == "auth.session.expired"
    decision = route_guard.decide(GuardTarget(path="/orders", required_page="orders"))
    assert decision.outcome is GuardOutcome.REDIRECT_LOGIN
    assert decision.return_to == "/orders"


def test_timeout_fetch_failure_falls_back_to_default(auth_service, backend, caplog):
    backend.timeout_error = BackendUnavailableError("timed out", code="NETWORK_ERROR")

    assert auth_service.fetch_session_timeout() == 30
    assert "using 30 minutes" in caplog.text


def test_timeout_from_backend_is_validated(auth_service, backend):
    backend.timeout_minutes = 45
    assert auth_service.fetch_session_timeout() == 45
    backend.timeout_minutes = 0
    assert auth_service.fetch_session_timeout() == 30
    backend.timeout_minutes = None
    assert auth_service.fetch_session_timeout() == 30


def test_event_recorder_failure_does_not_break_login(backend, store, user_session, registry, clock):
    def _broken(**_kwargs):
        raise OSError("disk full")

    service = AuthService(
        backend=backend,
        store=store,
        user_session=user_session,
        registry=registry,
        clock=clock,
        dispatch=lambda job: job(),
        event_recorder=_broken,
    )

    assert service.login("alice", "Secret123").username == "alice"


def test_monitor_timeout_comes_from_service_default(auth_service, clock):
    auth_service.login("tom", "Secret123")
    monitor = auth_service.create_monitor()

    assert monitor.timeout_minutes == 30
    assert monitor.evaluate(clock.now + timedelta(minutes=29)).state is SessionState.WARNING
