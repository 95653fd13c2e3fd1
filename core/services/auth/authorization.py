from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from core.domain.auth import Role
from core.domain.enums import Page, Permission
from core.exceptions import BusinessRuleError
from core.services.auth.policy import PAGE_ORDER, PAGE_PERMISSIONS
from core.services.auth.registry import RoleRegistry
from core.services.auth.session import UserSessionContext

logger = logging.getLogger(__name__)


class DenyReason(str, Enum):
    GRANTED = "granted"
    UNKNOWN_ROLE = "unknown_role"
    EMPTY_ROLE = "empty_role"
    UNKNOWN_RESOURCE = "unknown_resource"
    NOT_GRANTED = "not_granted"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: DenyReason
    role: Role | None = None
    permission: Permission | None = None


class PermissionEvaluator:
    """
    Pure allow/deny decisions over (role, resource).

    A resource is either a page id ("orders") or an action permission code
    ("orders:manage"). Unknown roles and empty roles both deny; the reason is
    only visible through `explain` and the debug log.
    """

    def __init__(self, registry: RoleRegistry):
        self._registry = registry

    @property
    def registry(self) -> RoleRegistry:
        return self._registry

    def explain(self, role_id: object, resource: object) -> AccessDecision:
        role = self._registry.get_role(role_id)
        if role is None:
            return self._deny(DenyReason.UNKNOWN_ROLE, role_id, resource)
        permission = resolve_resource(resource)
        if permission is None:
            return self._deny(DenyReason.UNKNOWN_RESOURCE, role_id, resource, role=role)
        if role.is_empty:
            return self._deny(DenyReason.EMPTY_ROLE, role_id, resource, role=role, permission=permission)
        if not role.grants(permission):
            return self._deny(DenyReason.NOT_GRANTED, role_id, resource, role=role, permission=permission)
        return AccessDecision(allowed=True, reason=DenyReason.GRANTED, role=role, permission=permission)

    def can_access(self, role_id: object, resource: object) -> bool:
        return self.explain(role_id, resource).allowed

    def can_access_page(self, role_id: object, page_id: object) -> bool:
        page = Page.parse(page_id)
        if page is None:
            logger.debug("Access check for unknown page %r (role=%r) denied.", page_id, role_id)
            return False
        return self.can_access(role_id, PAGE_PERMISSIONS[page])

    def accessible_pages(self, role_id: object) -> list[Page]:
        return [page for page in PAGE_ORDER if self.can_access_page(role_id, page)]

    @staticmethod
    def _deny(
        reason: DenyReason,
        role_id: object,
        resource: object,
        *,
        role: Role | None = None,
        permission: Permission | None = None,
    ) -> AccessDecision:
        logger.debug("Access denied: role=%r resource=%r reason=%s", role_id, resource, reason.value)
        return AccessDecision(allowed=False, reason=reason, role=role, permission=permission)


def resolve_resource(resource: object) -> Permission | None:
    permission = Permission.parse(resource)
    if permission is not None:
        return permission
    page = Page.parse(resource)
    if page is not None:
        return PAGE_PERMISSIONS[page]
    return None


def require_permission(
    user_session: UserSessionContext | None,
    permission_code: object,
    *,
    operation_label: str,
) -> None:
    if user_session is not None and user_session.has_permission(permission_code):
        return
    code = getattr(permission_code, "value", permission_code)
    raise BusinessRuleError(
        f"Permission denied for {operation_label}. Missing '{code}'.",
        code="PERMISSION_DENIED",
    )


__all__ = [
    "AccessDecision",
    "DenyReason",
    "PermissionEvaluator",
    "require_permission",
    "resolve_resource",
]
