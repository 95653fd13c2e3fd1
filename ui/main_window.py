# ui/main_window.py
from __future__ import annotations

import logging
from typing import Union

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.domain.enums import Page, Permission
from core.services.auth import AuthService, PermissionEvaluator, SessionStatus, UserSessionContext
from core.services.navigation import GuardOutcome, GuardTarget, RouteGuard
from infra.config import AppConfig
from ui.auth.guarded_page import GuardedPageHost
from ui.auth.session_banner import SessionTimeoutBanner
from ui.settings import MainWindowSettingsStore
from ui.shared.background import start_background_task
from ui.shared.guards import apply_permission_hint, has_permission, make_guarded_slot
from ui.shared.session_timer import SessionTimer
from ui.styles.ui_config import UIConfig as CFG

logger = logging.getLogger(__name__)

NavigationRequest = Union[Page, str, GuardTarget]


def target_for(request: NavigationRequest) -> GuardTarget:
    if isinstance(request, GuardTarget):
        return request
    if isinstance(request, Page):
        return GuardTarget.for_page(request)
    return GuardTarget.from_path(request)


class MainWindow(QMainWindow):
    signed_out = Signal(str, str)
    window_closed = Signal()

    def __init__(
        self,
        services: dict[str, object],
        *,
        settings_store: MainWindowSettingsStore | None = None,
        initial_path: str | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.services: dict[str, object] = services
        self._config: AppConfig = services["config"]  # type: ignore[assignment]
        self._auth_service: AuthService = services["auth_service"]  # type: ignore[assignment]
        self._user_session: UserSessionContext = services["user_session"]  # type: ignore[assignment]
        self._evaluator: PermissionEvaluator = services["permission_evaluator"]  # type: ignore[assignment]
        self._guard: RouteGuard = services["route_guard"]  # type: ignore[assignment]
        self._settings_store = settings_store or MainWindowSettingsStore()
        self._history: list[GuardTarget] = []
        self._signing_out = False
        self._timeout_task = None

        self.setWindowTitle("StarBeverageFlow")
        self.resize(CFG.DEFAULT_WINDOW_SIZE)
        self.setMinimumSize(CFG.MIN_WINDOW_SIZE)

        self._monitor = self._auth_service.create_monitor(self._config.session_timeout_minutes)
        self._session_timer = SessionTimer(
            self._monitor,
            poll_seconds=self._config.session_poll_seconds,
            parent=self,
        )

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(CFG.MARGIN_MD, CFG.MARGIN_MD, CFG.MARGIN_MD, CFG.MARGIN_MD)
        layout.setSpacing(CFG.SPACING_SM)
        layout.addWidget(self._build_header())

        self.session_banner = SessionTimeoutBanner()
        layout.addWidget(self.session_banner)

        body = QHBoxLayout()
        body.setSpacing(CFG.SPACING_MD)
        self.nav_list = QListWidget()
        self.nav_list.setFixedWidth(CFG.SIDEBAR_WIDTH)
        self.page_host = GuardedPageHost(self._guard, page_factory=self._build_page)
        body.addWidget(self.nav_list)
        body.addWidget(self.page_host, 1)
        layout.addLayout(body, 1)
        self.setCentralWidget(central)

        self._build_navigation()
        self._wire_signals()
        self._restore_persisted_state(initial_path)

    @property
    def monitor(self):
        return self._monitor

    def _build_header(self) -> QWidget:
        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(0, 0, 0, 0)
        header_layout.setSpacing(CFG.SPACING_SM)
        header_layout.addStretch()

        session = self._user_session.session
        role = self._evaluator.registry.get_role(session.role_id) if session else None
        label = session.label if session else "Signed out"
        if role is not None:
            label = f"{label} ({role.display_name})"
        self.user_label = QLabel(f"User: {label}")
        header_layout.addWidget(self.user_label)

        self.btn_logout = QPushButton("Log out")
        self.btn_logout.setFixedHeight(CFG.BUTTON_HEIGHT)
        header_layout.addWidget(self.btn_logout)
        return header

    def _build_navigation(self) -> None:
        self.nav_list.clear()
        session = self._user_session.session
        role_id = session.role_id if session else None
        for page in self._evaluator.accessible_pages(role_id):
            item = QListWidgetItem(page.value.capitalize())
            item.setData(Qt.UserRole, page.value)
            self.nav_list.addItem(item)

    def _build_page(self, page: Page) -> QWidget:
        widget = QWidget()
        layout = QVBoxLayout(widget)
        layout.setContentsMargins(CFG.MARGIN_MD, CFG.MARGIN_MD, CFG.MARGIN_MD, CFG.MARGIN_MD)
        layout.setSpacing(CFG.SPACING_SM)
        title = QLabel(page.value.capitalize())
        title.setStyleSheet(CFG.TITLE_LARGE_STYLE)
        layout.addWidget(title)

        manage = Permission.parse(f"{page.value}:manage")
        if manage is not None:
            button = QPushButton(f"Manage {page.value}")
            button.setFixedHeight(CFG.BUTTON_HEIGHT)
            button.setMinimumWidth(CFG.BUTTON_MIN_WIDTH_SM)
            apply_permission_hint(
                button,
                allowed=has_permission(self._user_session, manage),
                missing_permission=manage.value,
            )
            target = GuardTarget.from_path(f"/{page.value}/manage")
            button.clicked.connect(lambda _checked=False, t=target: self.navigate(t))
            row = QHBoxLayout()
            row.addWidget(button)
            row.addStretch()
            layout.addLayout(row)
        layout.addStretch()
        return widget

    def _wire_signals(self) -> None:
        self.btn_logout.clicked.connect(make_guarded_slot(self, title="Log out", callback=self.logout))
        self.nav_list.currentItemChanged.connect(self._on_nav_item_changed)
        self.page_host.login_required.connect(self._on_login_required)
        self.page_host.back_requested.connect(self.go_back)
        self.page_host.home_requested.connect(self.go_home)
        self.session_banner.extend_requested.connect(
            make_guarded_slot(self, title="Extend session", callback=self._monitor.extend)
        )
        self._monitor.ticked.connect(self._on_session_tick)
        self._monitor.expired.connect(self._on_session_expired)

    def start_session_monitor(self) -> None:
        """Start polling and load the server timeout without blocking the window."""
        self._session_timer.start()
        if not self._monitor.is_running:
            return
        self._timeout_task = start_background_task(
            parent=self,
            work=self._auth_service.fetch_session_timeout,
            on_success=self._on_timeout_loaded,
            on_error=lambda message: logger.warning("Session timeout fetch failed: %s", message),
        )

    def navigate(self, request: NavigationRequest) -> GuardOutcome:
        target = target_for(request)
        current = self.page_host.current_target
        if current is not None and current != target:
            self._history.append(current)
        decision = self.page_host.show_target(target)
        page = target.page
        if decision.outcome is GuardOutcome.ALLOW and page is not None:
            self._settings_store.save_last_page(page.value, username=self._username())
        self._select_nav_item(target)
        return decision.outcome

    def go_back(self) -> None:
        while self._history:
            previous = self._history.pop()
            if self._guard.decide(previous).allowed:
                self.page_host.show_target(previous)
                self._select_nav_item(previous)
                return
        self.go_home()

    def go_home(self) -> None:
        session = self._user_session.session
        pages = self._evaluator.accessible_pages(session.role_id if session else None)
        self._history.clear()
        self.navigate(pages[0] if pages else Page.DASHBOARD)

    def logout(self) -> None:
        self._end_session("user")

    def _end_session(self, reason: str) -> None:
        if self._signing_out:
            return
        self._signing_out = True
        self._session_timer.stop()
        if self._timeout_task is not None:
            self._timeout_task.cancel()
        current = self.page_host.current_target
        return_to = current.path if current is not None and reason != "user" else ""
        self._auth_service.logout(reason)
        self.session_banner.hide()
        self.signed_out.emit(reason, return_to)

    def _on_nav_item_changed(self, item: QListWidgetItem | None, _previous=None) -> None:
        if item is None:
            return
        page = Page.parse(item.data(Qt.UserRole))
        current = self.page_host.current_target
        if page is None or (current is not None and current.required_page == page):
            return
        self.navigate(page)

    def _select_nav_item(self, target: GuardTarget) -> None:
        page = target.page
        self.nav_list.blockSignals(True)
        try:
            self.nav_list.setCurrentRow(-1)
            for row in range(self.nav_list.count()):
                if page is not None and self.nav_list.item(row).data(Qt.UserRole) == page.value:
                    self.nav_list.setCurrentRow(row)
                    break
        finally:
            self.nav_list.blockSignals(False)

    def _on_login_required(self, _return_to: str) -> None:
        self._end_session("unauthenticated")

    def _on_session_tick(self, status: SessionStatus) -> None:
        self.session_banner.show_status(status)

    def _on_session_expired(self, _status: SessionStatus) -> None:
        logger.info("Session expired; signing out.")
        self._end_session("expired")

    def _on_timeout_loaded(self, minutes: int) -> None:
        if not self._monitor.is_running:
            return
        applied = self._monitor.apply_timeout(minutes)
        logger.info("Session timeout set to %s minutes.", applied)
        self._monitor.check()

    def _restore_persisted_state(self, initial_path: str | None) -> None:
        geometry = self._settings_store.load_geometry()
        if geometry is not None:
            self.restoreGeometry(geometry)
        if initial_path:
            self.navigate(initial_path)
            return
        last_page = self._settings_store.load_last_page(
            username=self._username(),
            default_page=Page.DASHBOARD.value,
        )
        if self.navigate(last_page) is not GuardOutcome.ALLOW:
            # the remembered page may predate a role change
            self.go_home()

    def _username(self) -> str:
        session = self._user_session.session
        return session.username if session is not None else ""

    def closeEvent(self, event: QCloseEvent) -> None:
        self._session_timer.stop()
        if self._timeout_task is not None:
            self._timeout_task.cancel()
        self._settings_store.save_geometry(self.saveGeometry())
        super().closeEvent(event)
        if not self._signing_out:
            self.window_closed.emit()


__all__ = ["MainWindow", "target_for"]
