from .auth import AuthService, PermissionEvaluator, RoleRegistry, SessionMonitor, UserSessionContext
from .navigation import RouteGuard

__all__ = [
    "AuthService",
    "PermissionEvaluator",
    "RoleRegistry",
    "RouteGuard",
    "SessionMonitor",
    "UserSessionContext",
]
