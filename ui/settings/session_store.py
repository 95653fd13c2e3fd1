from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from PySide6.QtCore import QSettings

from core.interfaces import SessionStore

logger = logging.getLogger(__name__)


class QSettingsSessionStore(SessionStore):
    """Adapter around QSettings keeping the signed-in user across restarts."""

    ORG_NAME = "StarBeverage"
    APP_NAME = "StarBeverageFlow"

    _KEY_LOGIN_TIME = "session/login_time"
    _KEY_USER = "session/user"

    def __init__(self, settings: QSettings | None = None) -> None:
        self._settings = settings or QSettings(self.ORG_NAME, self.APP_NAME)

    def load_login_time(self) -> datetime | None:
        raw = str(self._settings.value(self._KEY_LOGIN_TIME, "") or "").strip()
        if not raw:
            return None
        try:
            moment = datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("Ignoring unreadable persisted login time %r.", raw)
            return None
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment

    def save_login_time(self, moment: datetime) -> None:
        self._settings.setValue(self._KEY_LOGIN_TIME, moment.isoformat())
        self._settings.sync()

    def load_user(self) -> dict[str, Any] | None:
        raw = str(self._settings.value(self._KEY_USER, "") or "").strip()
        if not raw:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable persisted user entry.")
            return None
        return payload if isinstance(payload, dict) else None

    def save_user(self, user: Mapping[str, Any]) -> None:
        self._settings.setValue(self._KEY_USER, json.dumps(dict(user), sort_keys=True))
        self._settings.sync()

    def clear(self) -> None:
        self._settings.remove(self._KEY_LOGIN_TIME)
        self._settings.remove(self._KEY_USER)
        self._settings.sync()


__all__ = ["QSettingsSessionStore"]
