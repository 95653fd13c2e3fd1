from __future__ import annotations

import json
import logging
import socket
from collections.abc import Callable, Mapping
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from core.exceptions import BackendRejectedError, BackendUnavailableError
from core.interfaces import AuthBackend

logger = logging.getLogger(__name__)

_REJECTED_STATUSES = {400, 401, 403}


class HttpAuthBackend(AuthBackend):
    """JSON client for the PHP endpoints used by sign-in, session timeout and logout audit."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        opener: Callable[..., Any] = urlopen,
    ):
        self._base_url = (base_url or "").strip().rstrip("/")
        if not self._base_url:
            raise ValueError("API base URL is not configured.")
        self._timeout = timeout
        self._opener = opener

    @property
    def base_url(self) -> str:
        return self._base_url

    def login(self, username: str, password: str) -> Mapping[str, Any]:
        payload = self._request(
            "users.php",
            body={"action": "login", "username": username, "password": password},
        )
        user = payload.get("user")
        if not payload.get("success") or not isinstance(user, Mapping):
            message = str(payload.get("message") or payload.get("error") or "Invalid credentials.")
            raise BackendRejectedError(message, code="LOGIN_REJECTED")
        return dict(user)

    def fetch_session_timeout_minutes(self) -> int | None:
        payload = self._request("check_session_timeout.php")
        if not payload.get("success"):
            logger.info("Session timeout endpoint answered without success: %s", payload.get("message"))
            return None
        data = payload.get("data")
        if not isinstance(data, Mapping):
            return None
        raw = data.get("timeoutMinutes")
        try:
            return int(raw) if raw is not None else None
        except (TypeError, ValueError):
            logger.warning("Session timeout endpoint returned %r; ignoring.", raw)
            return None

    def record_logout(self, user_id: str) -> None:
        payload = self._request("logout.php", body={"user_id": user_id})
        if payload.get("error"):
            raise BackendRejectedError(str(payload["error"]), code="LOGOUT_REJECTED")

    def _request(self, endpoint: str, *, body: Mapping[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}/{endpoint}"
        headers = {"Accept": "application/json"}
        data: bytes | None = None
        if body is not None:
            data = json.dumps(dict(body)).encode("utf-8")
            headers["Content-Type"] = "application/json"
        request = Request(url, data=data, headers=headers, method="POST" if body is not None else "GET")

        try:
            with self._opener(request, timeout=self._timeout) as response:  # noqa: S310
                raw = response.read().decode("utf-8", errors="replace")
        except HTTPError as exc:
            if exc.code in _REJECTED_STATUSES:
                raise BackendRejectedError(
                    _error_message(exc) or f"Request to {endpoint} was rejected ({exc.code}).",
                    code=f"HTTP_{exc.code}",
                ) from exc
            raise BackendUnavailableError(
                f"Request to {endpoint} failed with HTTP {exc.code}.",
                code=f"HTTP_{exc.code}",
            ) from exc
        except (URLError, socket.timeout, OSError) as exc:
            raise BackendUnavailableError(
                f"Request to {endpoint} failed: {exc}",
                code="NETWORK_ERROR",
            ) from exc

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise BackendUnavailableError(
                f"Response from {endpoint} is not valid JSON.",
                code="INVALID_RESPONSE",
            ) from exc
        if not isinstance(payload, dict):
            raise BackendUnavailableError(
                f"Response from {endpoint} must be a JSON object.",
                code="INVALID_RESPONSE",
            )
        return payload


def _error_message(exc: HTTPError) -> str | None:
    try:
        payload = json.loads(exc.read().decode("utf-8"))
    except (OSError, ValueError, AttributeError):
        return None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        return str(message) if message else None
    return None


__all__ = ["HttpAuthBackend"]
