from core.services.auth.authorization import (
    AccessDecision,
    DenyReason,
    PermissionEvaluator,
    require_permission,
)
from core.services.auth.monitor import SessionMonitor, SessionStatus, resolve_timeout_minutes
from core.services.auth.registry import RoleRegistry
from core.services.auth.service import AuthService
from core.services.auth.session import UserSessionContext

__all__ = [
    "AccessDecision",
    "AuthService",
    "DenyReason",
    "PermissionEvaluator",
    "RoleRegistry",
    "SessionMonitor",
    "SessionStatus",
    "UserSessionContext",
    "require_permission",
    "resolve_timeout_minutes",
]
