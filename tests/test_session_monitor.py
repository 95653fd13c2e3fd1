from __future__ import annotations

from datetime import timedelta

import pytest

from core.domain.auth import UserSession
from core.domain.enums import SessionState
from core.services.auth import SessionMonitor, resolve_timeout_minutes


@pytest.fixture
def signed_in(user_session, clock):
    user_session.set_session(
        UserSession(user_id="3", username="tom", role_id="staff", login_timestamp=clock())
    )
    return user_session


@pytest.fixture
def monitor(signed_in, clock):
    return SessionMonitor(signed_in, timeout_minutes=30, clock=clock)


def _record(monitor: SessionMonitor) -> dict[str, list]:
    seen: dict[str, list] = {"state_changed": [], "warning": [], "expired": []}
    monitor.state_changed.connect(seen["state_changed"].append)
    monitor.warning.connect(seen["warning"].append)
    monitor.expired.connect(seen["expired"].append)
    return seen


def test_states_follow_elapsed_time(monitor, clock):
    clock.advance(minutes=24)
    assert monitor.check().state is SessionState.ACTIVE
    clock.advance(minutes=2)
    assert monitor.check().state is SessionState.WARNING
    clock.advance(minutes=5)
    assert monitor.check().state is SessionState.EXPIRED


def test_warning_and_expiry_are_emitted_once(monitor, clock):
    seen = _record(monitor)

    clock.advance(minutes=26)
    monitor.check()
    monitor.check()
    clock.advance(minutes=5)
    monitor.check()
    monitor.check()

    assert len(seen["warning"]) == 1
    assert len(seen["expired"]) == 1
    assert [s.state for s in seen["state_changed"]] == [SessionState.WARNING, SessionState.EXPIRED]


def test_repeated_checks_without_time_passing_do_not_change_state(monitor, clock):
    seen = _record(monitor)
    clock.advance(minutes=10)

    statuses = [monitor.check() for _ in range(5)]

    assert {s.state for s in statuses} == {SessionState.ACTIVE}
    assert seen["state_changed"] == []


def test_missed_ticks_still_expire_on_the_next_check(monitor, clock):
    seen = _record(monitor)
    clock.advance(minutes=95)

    status = monitor.check()

    assert status.state is SessionState.EXPIRED
    assert seen["warning"] == []
    assert len(seen["expired"]) == 1
    assert monitor.is_running is False


def test_boundaries_are_inclusive_of_warning_and_expiry(monitor, clock):
    assert monitor.evaluate(clock.now + timedelta(minutes=25)).state is SessionState.WARNING
    assert monitor.evaluate(clock.now + timedelta(minutes=30)).state is SessionState.EXPIRED
    assert monitor.evaluate(clock.now + timedelta(minutes=24, seconds=59)).state is SessionState.ACTIVE


def test_extend_during_warning_returns_to_active(monitor, signed_in, clock):
    clock.advance(minutes=27)
    assert monitor.check().state is SessionState.WARNING

    status = monitor.extend()

    assert status.state is SessionState.ACTIVE
    assert signed_in.session.login_timestamp == clock.now
    clock.advance(minutes=24)
    assert monitor.check().state is SessionState.ACTIVE


def test_extend_never_moves_login_time_backwards(signed_in, clock):
    started = signed_in.session.login_timestamp

    signed_in.extend(started - timedelta(minutes=10))

    assert signed_in.session.login_timestamp == started


def test_extend_after_expiry_does_not_revive_the_session(monitor, signed_in, clock):
    started = signed_in.session.login_timestamp
    clock.advance(minutes=31)

    status = monitor.extend()

    assert status.state is SessionState.EXPIRED
    assert signed_in.session.login_timestamp == started


def test_stop_turns_later_checks_into_no_ops(monitor, clock):
    seen = _record(monitor)
    monitor.stop()
    clock.advance(minutes=45)

    status = monitor.check()

    assert status.state is SessionState.ACTIVE
    assert seen["expired"] == []
    assert monitor.is_running is False


def test_missing_session_reports_expired(user_session, clock):
    monitor = SessionMonitor(user_session, clock=clock)
    assert monitor.evaluate().state is SessionState.EXPIRED


def test_apply_timeout_keeps_current_value_when_invalid(monitor, clock):
    assert monitor.apply_timeout(45) == 45
    assert monitor.apply_timeout(0) == 45
    assert monitor.apply_timeout("soon") == 45

    clock.advance(minutes=31)
    assert monitor.check().state is SessionState.ACTIVE


def test_minutes_left_rounds_up(monitor, clock):
    clock.advance(minutes=26, seconds=30)
    status = monitor.check()
    assert status.minutes_left == 4


@pytest.mark.parametrize(
    "raw, expected",
    [
        (45, 45),
        ("15", 15),
        (20.0, 20),
        (0, 30),
        (-5, 30),
        ("abc", 30),
        (None, 30),
        (True, 30),
        (12.5, 30),
    ],
)
def test_resolve_timeout_minutes(raw, expected):
    assert resolve_timeout_minutes(raw) == expected
