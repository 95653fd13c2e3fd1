from core.services.navigation.guard import (
    LOGIN_PATH,
    GuardDecision,
    GuardOutcome,
    GuardTarget,
    RouteGuard,
)

__all__ = ["GuardDecision", "GuardOutcome", "GuardTarget", "LOGIN_PATH", "RouteGuard"]
