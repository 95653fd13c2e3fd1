from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.domain.auth import Role
from core.domain.enums import AuthState, Page, Permission
from core.services.auth.authorization import PermissionEvaluator
from core.services.auth.session import UserSessionContext

LOGIN_PATH = "/login"


class GuardOutcome(str, Enum):
    LOADING = "LOADING"
    REDIRECT_LOGIN = "REDIRECT_LOGIN"
    ACCESS_DENIED = "ACCESS_DENIED"
    INSUFFICIENT_PERMISSION = "INSUFFICIENT_PERMISSION"
    ALLOW = "ALLOW"


@dataclass(frozen=True)
class GuardTarget:
    path: str
    required_page: Page | str | None = None
    required_permission: Permission | str | None = None

    @classmethod
    def for_page(cls, page: Page, *, required_permission: Permission | str | None = None) -> "GuardTarget":
        return cls(path=f"/{page.value}", required_page=page, required_permission=required_permission)

    @classmethod
    def from_path(cls, path: object) -> "GuardTarget":
        """
        Rebuild a target from its location, e.g. "/orders/manage" requires the
        orders page and the "orders:manage" action. An empty path is the dashboard.
        """
        segments = [part for part in str(path or "").strip().lower().split("/") if part]
        if not segments:
            return cls.for_page(Page.DASHBOARD)
        normalized = "/" + "/".join(segments)
        page = Page.parse(segments[0])
        if page is None:
            return cls(path=normalized, required_page=segments[0])
        if len(segments) == 1:
            return cls.for_page(page)
        code = f"{page.value}:{segments[1]}"
        return cls(path=normalized, required_page=page, required_permission=Permission.parse(code) or code)

    @property
    def page(self) -> Page | None:
        if self.required_page is not None:
            return Page.parse(self.required_page)
        return Page.parse(self.path)


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    target: GuardTarget
    redirect_to: str | None = None
    return_to: str | None = None
    role_display_name: str | None = None
    role_description: str | None = None
    required_permission: str | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GuardOutcome.ALLOW


class RouteGuard:
    """
    Decides what a protected navigation target renders.

    Authentication is checked before authorization and page access before
    action permissions, so the coarsest failing check is the one reported.
    """

    def __init__(
        self,
        user_session: UserSessionContext,
        evaluator: PermissionEvaluator,
        *,
        login_path: str = LOGIN_PATH,
    ):
        self._user_session = user_session
        self._evaluator = evaluator
        self._login_path = login_path

    def decide(self, target: GuardTarget) -> GuardDecision:
        state = self._user_session.auth_state
        if state is AuthState.LOADING:
            return GuardDecision(GuardOutcome.LOADING, target)

        session = self._user_session.session
        if state is not AuthState.AUTHENTICATED or session is None:
            return GuardDecision(
                GuardOutcome.REDIRECT_LOGIN,
                target,
                redirect_to=self._login_path,
                return_to=target.path,
            )

        role = self._evaluator.registry.get_role(session.role_id)
        if target.required_page is not None and not self._evaluator.can_access_page(
            session.role_id, target.required_page
        ):
            return self._denied(GuardOutcome.ACCESS_DENIED, target, role)

        if target.required_permission is not None and not self._evaluator.can_access(
            session.role_id, target.required_permission
        ):
            code = getattr(target.required_permission, "value", target.required_permission)
            return self._denied(
                GuardOutcome.INSUFFICIENT_PERMISSION,
                target,
                role,
                required_permission=str(code),
            )

        return GuardDecision(GuardOutcome.ALLOW, target)

    @staticmethod
    def _denied(
        outcome: GuardOutcome,
        target: GuardTarget,
        role: Role | None,
        *,
        required_permission: str | None = None,
    ) -> GuardDecision:
        return GuardDecision(
            outcome,
            target,
            role_display_name=role.display_name if role is not None else None,
            role_description=role.description if role is not None else None,
            required_permission=required_permission,
        )


__all__ = ["GuardDecision", "GuardOutcome", "GuardTarget", "LOGIN_PATH", "RouteGuard"]
