from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from core.services.auth.monitor import (
    DEFAULT_TIMEOUT_MINUTES,
    POLL_INTERVAL_SECONDS,
    resolve_timeout_minutes,
)

logger = logging.getLogger(__name__)

_DEFAULT_API_URL = "http://localhost/star-beverage-flow/public/api"
_DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class AppConfig:
    api_url: str
    http_timeout_seconds: float
    session_timeout_minutes: int
    session_poll_seconds: int


def default_api_url() -> str:
    env_override = (os.getenv("SBF_API_URL") or "").strip()
    return (env_override or _DEFAULT_API_URL).rstrip("/")


def _env_positive_number(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number); using %s.", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r (must be positive); using %s.", name, raw, default)
        return default
    return value


def load_app_config() -> AppConfig:
    return AppConfig(
        api_url=default_api_url(),
        http_timeout_seconds=_env_positive_number(
            "SBF_HTTP_TIMEOUT_SECONDS", _DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
        session_timeout_minutes=resolve_timeout_minutes(
            os.getenv("SBF_SESSION_TIMEOUT_MINUTES"),
            default=DEFAULT_TIMEOUT_MINUTES,
        ),
        session_poll_seconds=max(
            1, int(_env_positive_number("SBF_SESSION_POLL_SECONDS", POLL_INTERVAL_SECONDS))
        ),
    )


__all__ = ["AppConfig", "default_api_url", "load_app_config"]
