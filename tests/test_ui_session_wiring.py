from __future__ import annotations

from pathlib import Path

from core.services.auth import UserSessionContext
from ui.shared.guards import has_permission


ROOT = Path(__file__).resolve().parents[1]


class _FakeSession:
    def __init__(self, permissions: set[str]):
        self._permissions = permissions

    def has_permission(self, permission_code: str) -> bool:
        return permission_code in self._permissions


def _read(*parts: str) -> str:
    return ROOT.joinpath(*parts).read_text(encoding="utf-8", errors="ignore")


def test_ui_permission_helper_fails_closed_without_session():
    assert has_permission(None, "orders:manage") is False
    assert has_permission(UserSessionContext(), "orders:manage") is False
    assert has_permission(_FakeSession({"orders:manage"}), "orders:manage") is True
    assert has_permission(_FakeSession(set()), "orders:manage") is False


def test_main_window_drives_monitor_from_session_timer():
    text = _read("ui", "main_window.py")
    assert "self._auth_service.create_monitor(" in text
    assert "SessionTimer(" in text
    assert "self._monitor.expired.connect(self._on_session_expired)" in text
    assert "self._session_timer.stop()" in text
    assert 'self._end_session("expired")' in text


def test_main_window_routes_every_page_through_the_guard():
    text = _read("ui", "main_window.py")
    assert "GuardedPageHost(self._guard" in text
    assert "self.page_host.show_target(target)" in text
    assert "self._evaluator.accessible_pages(" in text
    assert "self.page_host.login_required.connect(" in text


def test_session_timeout_is_fetched_off_the_ui_thread():
    text = _read("ui", "main_window.py")
    assert "start_background_task(" in text
    assert "work=self._auth_service.fetch_session_timeout" in text
    assert "self._monitor.apply_timeout(minutes)" in text


def test_banner_extend_button_calls_monitor_extend():
    window_text = _read("ui", "main_window.py")
    banner_text = _read("ui", "auth", "session_banner.py")
    assert "self.session_banner.extend_requested.connect(" in window_text
    assert "callback=self._monitor.extend" in window_text
    assert "self.btn_extend.clicked.connect(self.extend_requested.emit)" in banner_text


def test_guarded_page_host_renders_denial_views():
    text = _read("ui", "auth", "guarded_page.py")
    assert '"Access Denied"' in text
    assert '"Insufficient Permission"' in text
    assert "decision.role_description" in text
    assert "decision.required_permission" in text
    assert "self.login_required.emit(" in text


def test_app_controller_restores_session_and_reopens_target_after_login():
    text = _read("ui", "app_controller.py")
    assert "self._services.auth_service.restore()" in text
    assert "window.signed_out.connect(self._on_signed_out)" in text
    assert "return_to=return_to or None" in text
    assert "window.start_session_monitor()" in text


def test_login_dialog_uses_auth_service_login():
    text = _read("ui", "auth", "login_dialog.py")
    assert "self._auth_service.login(" in text
    assert "save_last_username" in text


def test_main_window_rebuilds_return_location_from_its_path():
    text = _read("ui", "main_window.py")
    assert "return GuardTarget.from_path(request)" in text
    assert 'GuardTarget.from_path(f"/{page.value}/manage")' in text


def test_restored_last_page_is_per_user_and_falls_back_home_when_denied():
    text = _read("ui", "main_window.py")
    assert "username=self._username()" in text
    assert "if self.navigate(last_page) is not GuardOutcome.ALLOW:" in text
    assert "self.go_home()" in text


def test_allowed_target_without_page_renders_placeholder_instead_of_raising():
    text = _read("ui", "auth", "guarded_page.py")
    body = text.split("def _show_page", 1)[1].split("def _show_notice", 1)[0]
    assert "raise" not in body
    assert "self._show_notice(unavailable_view(target))" in body


def test_guarded_actions_run_under_one_trace_id():
    text = _read("ui", "shared", "guards.py")
    assert "with bind_trace_id():" in text
