from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from PySide6.QtWidgets import QMessageBox, QWidget

from core.exceptions import BusinessRuleError, ValidationError
from core.services.auth import UserSessionContext
from infra.operational_support import bind_trace_id, get_support_log

logger = logging.getLogger(__name__)

_T = TypeVar("_T")
_UI_KNOWN_ERRORS = (
    ValidationError,
    BusinessRuleError,
    ValueError,
)


def has_permission(user_session: UserSessionContext | None, permission_code: object) -> bool:
    if user_session is None:
        return False
    return user_session.has_permission(permission_code)


def apply_permission_hint(widget: QWidget, *, allowed: bool, missing_permission: str) -> None:
    if allowed:
        return
    widget.setEnabled(False)
    if widget.toolTip().strip():
        return
    widget.setToolTip(f"Requires '{missing_permission}' permission.")


def _record_ui_error(title: str, exc: BaseException, *, known: bool) -> str | None:
    try:
        return get_support_log().emit_event(
            event_type="ui.action.error",
            level="WARNING" if known else "ERROR",
            message=f"{title} action failed.",
            data={"error_type": type(exc).__name__, "error": str(exc), "known_error": known},
        )
    except OSError as log_exc:
        logger.error("Could not record UI error event: %s", log_exc)
        return None


def _with_trace(message: str, trace_id: str | None) -> str:
    base = (message or "Operation failed.").strip()
    if not trace_id:
        return base
    return f"{base}\n\nReference: {trace_id}"


def run_guarded_action(
    parent: QWidget,
    *,
    title: str,
    action: Callable[[], _T],
) -> _T | None:
    # log lines and the support event of one action share a trace id
    with bind_trace_id():
        try:
            return action()
        except _UI_KNOWN_ERRORS as exc:
            trace_id = _record_ui_error(title, exc, known=True)
            QMessageBox.warning(parent, title, _with_trace(str(exc), trace_id))
            return None
        except Exception as exc:
            logger.exception("%s action failed with unexpected error.", title)
            trace_id = _record_ui_error(title, exc, known=False)
            QMessageBox.critical(parent, title, _with_trace(str(exc), trace_id))
            return None


def make_guarded_slot(
    parent: QWidget,
    *,
    title: str,
    callback: Callable[..., object],
) -> Callable[..., None]:
    def _wrapped(*_args, **_kwargs) -> None:
        run_guarded_action(parent, title=title, action=lambda: callback())

    return _wrapped


__all__ = [
    "apply_permission_hint",
    "has_permission",
    "make_guarded_slot",
    "run_guarded_action",
]
