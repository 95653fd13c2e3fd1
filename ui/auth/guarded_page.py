from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from core.domain.enums import Page
from core.services.navigation import GuardDecision, GuardOutcome, GuardTarget, RouteGuard
from ui.styles.ui_config import UIConfig as CFG

PageFactory = Callable[[Page], QWidget]


def _centered(child: QWidget) -> QWidget:
    wrapper = QWidget()
    layout = QVBoxLayout(wrapper)
    layout.setContentsMargins(CFG.MARGIN_LG, CFG.MARGIN_LG, CFG.MARGIN_LG, CFG.MARGIN_LG)
    layout.addStretch()
    row = QHBoxLayout()
    row.addStretch()
    row.addWidget(child)
    row.addStretch()
    layout.addLayout(row)
    layout.addStretch()
    return wrapper


def _notice(title: str, title_style: str, lines: list[str]) -> tuple[QFrame, QVBoxLayout]:
    box = QFrame()
    box.setObjectName("guardNotice")
    box.setStyleSheet(CFG.NOTICE_BOX_STYLE)
    box.setMaximumWidth(CFG.NOTICE_MAX_WIDTH)
    layout = QVBoxLayout(box)
    layout.setContentsMargins(CFG.MARGIN_LG, CFG.MARGIN_LG, CFG.MARGIN_LG, CFG.MARGIN_LG)
    layout.setSpacing(CFG.SPACING_SM)

    heading = QLabel(title)
    heading.setObjectName("guardTitle")
    heading.setStyleSheet(title_style)
    heading.setAlignment(CFG.ALIGN_CENTER)
    layout.addWidget(heading)
    for text in lines:
        label = QLabel(text)
        label.setWordWrap(True)
        label.setAlignment(CFG.ALIGN_CENTER)
        label.setStyleSheet(CFG.INFO_TEXT_STYLE)
        layout.addWidget(label)
    return box, layout


def unavailable_view(target: GuardTarget) -> QWidget:
    label = QLabel(f"Nothing to show at {target.path}.")
    label.setObjectName("guardUnavailable")
    label.setStyleSheet(CFG.INFO_TEXT_STYLE)
    return _centered(label)


def placeholder_page(page: Page) -> QWidget:
    widget = QWidget()
    layout = QVBoxLayout(widget)
    layout.setContentsMargins(CFG.MARGIN_MD, CFG.MARGIN_MD, CFG.MARGIN_MD, CFG.MARGIN_MD)
    title = QLabel(page.value.capitalize())
    title.setStyleSheet(CFG.TITLE_LARGE_STYLE)
    layout.addWidget(title)
    layout.addStretch()
    return widget


class GuardedPageHost(QStackedWidget):
    """
    Shows whatever the route guard decided for the current target.

    Allowed pages are built once by `page_factory` and cached; every other
    outcome gets a fresh notice view. A redirect is not rendered here, it is
    reported through `login_required` with the location to come back to.
    """

    login_required = Signal(str)
    back_requested = Signal()
    home_requested = Signal()

    def __init__(
        self,
        guard: RouteGuard,
        *,
        page_factory: PageFactory = placeholder_page,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self._guard = guard
        self._page_factory = page_factory
        self._pages: dict[Page, QWidget] = {}
        self._notice: QWidget | None = None
        self._target: GuardTarget | None = None
        self._decision: GuardDecision | None = None

    @property
    def current_target(self) -> GuardTarget | None:
        return self._target

    @property
    def current_decision(self) -> GuardDecision | None:
        return self._decision

    def show_target(self, target: GuardTarget) -> GuardDecision:
        self._target = target
        decision = self._guard.decide(target)
        self._decision = decision
        if decision.outcome is GuardOutcome.REDIRECT_LOGIN:
            self.login_required.emit(decision.return_to or target.path)
            return decision
        if decision.outcome is GuardOutcome.ALLOW:
            self._show_page(target)
        else:
            self._show_notice(self.build_decision_view(decision))
        return decision

    def build_decision_view(self, decision: GuardDecision) -> QWidget:
        if decision.outcome is GuardOutcome.LOADING:
            label = QLabel("Loading...")
            label.setObjectName("guardLoading")
            label.setStyleSheet(CFG.INFO_TEXT_STYLE)
            return _centered(label)

        role_name = decision.role_display_name or "Unknown role"
        if decision.outcome is GuardOutcome.ACCESS_DENIED:
            lines = ["You do not have permission to access this page."]
            lines.append(f"Your role: {role_name}")
            if decision.role_description:
                lines.append(decision.role_description)
            box, layout = _notice("Access Denied", CFG.DENIED_TITLE_STYLE, lines)
            buttons = QHBoxLayout()
            buttons.setSpacing(CFG.SPACING_SM)
            btn_back = QPushButton("Go Back")
            btn_home = QPushButton("Home")
            for button in (btn_back, btn_home):
                button.setFixedHeight(CFG.BUTTON_HEIGHT)
                button.setMinimumWidth(CFG.BUTTON_MIN_WIDTH_SM)
            btn_back.clicked.connect(self.back_requested.emit)
            btn_home.clicked.connect(self.home_requested.emit)
            buttons.addStretch()
            buttons.addWidget(btn_back)
            buttons.addWidget(btn_home)
            buttons.addStretch()
            layout.addLayout(buttons)
            return _centered(box)

        if decision.outcome is GuardOutcome.INSUFFICIENT_PERMISSION:
            box, _ = _notice(
                "Insufficient Permission",
                CFG.INSUFFICIENT_TITLE_STYLE,
                [
                    f"This action requires the '{decision.required_permission}' permission.",
                    f"Your role: {role_name}",
                ],
            )
            return _centered(box)

        return unavailable_view(decision.target)

    def _show_page(self, target: GuardTarget) -> None:
        page = target.page
        if page is None:
            self._show_notice(unavailable_view(target))
            return
        widget = self._pages.get(page)
        if widget is None:
            widget = self._page_factory(page)
            self._pages[page] = widget
            self.addWidget(widget)
        self._clear_notice()
        self.setCurrentWidget(widget)

    def _show_notice(self, widget: QWidget) -> None:
        self._clear_notice()
        self._notice = widget
        self.addWidget(widget)
        self.setCurrentWidget(widget)

    def _clear_notice(self) -> None:
        if self._notice is None:
            return
        self.removeWidget(self._notice)
        self._notice.deleteLater()
        self._notice = None


__all__ = ["GuardedPageHost", "PageFactory", "placeholder_page", "unavailable_view"]
