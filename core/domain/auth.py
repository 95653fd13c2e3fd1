from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import FrozenSet, Optional

from core.domain.enums import Permission


@dataclass(frozen=True)
class Role:
    id: str
    display_name: str
    description: str = ""
    permissions: FrozenSet[Permission] = field(default_factory=frozenset)

    def grants(self, permission: Permission) -> bool:
        return permission in self.permissions

    @property
    def is_empty(self) -> bool:
        return not self.permissions


@dataclass(frozen=True)
class UserSession:
    user_id: str
    username: str
    role_id: str
    login_timestamp: datetime
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.username

    def extended_to(self, moment: datetime) -> "UserSession":
        # the login clock only moves forward
        if moment <= self.login_timestamp:
            return self
        return replace(self, login_timestamp=moment)


__all__ = ["Role", "UserSession"]
