from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from core.domain.auth import Role
from core.domain.enums import Permission
from core.exceptions import ValidationError
from core.services.auth.policy import DEFAULT_ROLE_DEFINITIONS, ROLE_ALIASES

logger = logging.getLogger(__name__)


def normalize_role_id(role_id: object) -> str:
    return str(role_id or "").strip().lower()


class RoleRegistry:
    """
    Read-only catalogue of the roles known to the client.

    Roles are defined once at start-up. Administration of roles happens on
    the backend; the registry never mutates after construction.
    """

    def __init__(self, roles: Iterable[Role], aliases: Mapping[str, str] | None = None):
        self._roles: dict[str, Role] = {}
        for role in roles:
            role_id = normalize_role_id(role.id)
            if not role_id:
                raise ValidationError("Role id is required.", code="ROLE_ID_REQUIRED")
            if role_id in self._roles:
                raise ValidationError(
                    f"Role '{role_id}' is defined more than once.",
                    code="ROLE_DUPLICATE",
                )
            self._roles[role_id] = role

        self._aliases: dict[str, str] = {}
        for alias, target in (aliases or {}).items():
            target_id = normalize_role_id(target)
            if target_id not in self._roles:
                raise ValidationError(
                    f"Role alias '{alias}' points to unknown role '{target}'.",
                    code="ROLE_ALIAS_INVALID",
                )
            self._aliases[normalize_role_id(alias)] = target_id

    @classmethod
    def from_definitions(
        cls,
        definitions: Mapping[str, Mapping[str, object]],
        aliases: Mapping[str, str] | None = None,
    ) -> "RoleRegistry":
        roles: list[Role] = []
        for role_id, definition in definitions.items():
            if not isinstance(definition, Mapping):
                raise ValidationError(
                    f"Role '{role_id}' definition must be a mapping.",
                    code="ROLE_DEFINITION_INVALID",
                )
            roles.append(
                Role(
                    id=normalize_role_id(role_id),
                    display_name=str(definition.get("display_name") or role_id),
                    description=str(definition.get("description") or ""),
                    permissions=_parse_permissions(role_id, definition.get("permissions") or ()),
                )
            )
        return cls(roles, aliases=aliases)

    @classmethod
    def default(cls) -> "RoleRegistry":
        return cls.from_definitions(DEFAULT_ROLE_DEFINITIONS, aliases=ROLE_ALIASES)

    def resolve_id(self, role_id: object) -> str | None:
        key = normalize_role_id(role_id)
        if not key:
            return None
        key = self._aliases.get(key, key)
        return key if key in self._roles else None

    def get_role(self, role_id: object) -> Role | None:
        resolved = self.resolve_id(role_id)
        if resolved is None:
            return None
        return self._roles[resolved]

    def has_role(self, role_id: object) -> bool:
        return self.resolve_id(role_id) is not None

    def list_roles(self) -> list[Role]:
        return list(self._roles.values())


def _parse_permissions(role_id: str, raw: object) -> frozenset[Permission]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        raise ValidationError(
            f"Role '{role_id}' permissions must be a list of codes.",
            code="ROLE_DEFINITION_INVALID",
        )
    parsed: set[Permission] = set()
    for code in raw:
        permission = Permission.parse(code)
        if permission is None:
            raise ValidationError(
                f"Role '{role_id}' references unknown permission '{code}'.",
                code="PERMISSION_UNKNOWN",
            )
        parsed.add(permission)
    if not parsed:
        logger.info("Role '%s' is defined without permissions.", role_id)
    return frozenset(parsed)


__all__ = ["RoleRegistry", "normalize_role_id"]
