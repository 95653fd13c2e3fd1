from core.domain.auth import Role, UserSession
from core.domain.enums import AuthState, Page, Permission, SessionState

__all__ = [
    "AuthState",
    "Page",
    "Permission",
    "Role",
    "SessionState",
    "UserSession",
]
