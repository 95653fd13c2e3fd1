from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.interfaces import AuthBackend, SessionStore
from core.services.auth import AuthService, PermissionEvaluator, RoleRegistry, UserSessionContext
from core.services.auth.monitor import Clock, utc_now
from core.services.auth.service import Dispatcher, run_in_background
from core.services.navigation import RouteGuard
from infra.api import HttpAuthBackend
from infra.config import AppConfig, load_app_config
from infra.operational_support import get_support_log


@dataclass(frozen=True)
class ServiceGraph:
    config: AppConfig
    role_registry: RoleRegistry
    permission_evaluator: PermissionEvaluator
    user_session: UserSessionContext
    auth_service: AuthService
    route_guard: RouteGuard

    def as_dict(self) -> dict[str, Any]:
        return {
            "config": self.config,
            "role_registry": self.role_registry,
            "permission_evaluator": self.permission_evaluator,
            "user_session": self.user_session,
            "auth_service": self.auth_service,
            "route_guard": self.route_guard,
        }


def build_service_graph(
    store: SessionStore,
    *,
    config: AppConfig | None = None,
    backend: AuthBackend | None = None,
    registry: RoleRegistry | None = None,
    clock: Clock = utc_now,
    dispatch: Dispatcher = run_in_background,
    record_events: bool = True,
) -> ServiceGraph:
    config = config or load_app_config()
    registry = registry or RoleRegistry.default()
    backend = backend or HttpAuthBackend(config.api_url, timeout=config.http_timeout_seconds)

    evaluator = PermissionEvaluator(registry)
    user_session = UserSessionContext(evaluator)
    auth_service = AuthService(
        backend=backend,
        store=store,
        user_session=user_session,
        registry=registry,
        default_timeout_minutes=config.session_timeout_minutes,
        clock=clock,
        dispatch=dispatch,
        event_recorder=get_support_log().emit_event if record_events else None,
    )
    route_guard = RouteGuard(user_session, evaluator)
    return ServiceGraph(
        config=config,
        role_registry=registry,
        permission_evaluator=evaluator,
        user_session=user_session,
        auth_service=auth_service,
        route_guard=route_guard,
    )


__all__ = ["ServiceGraph", "build_service_graph"]
