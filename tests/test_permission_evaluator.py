from __future__ import annotations

import logging

import pytest

from core.domain.auth import UserSession
from core.domain.enums import Page, Permission
from core.exceptions import BusinessRuleError
from core.services.auth import (
    DenyReason,
    PermissionEvaluator,
    RoleRegistry,
    UserSessionContext,
    require_permission,
)


def test_staff_can_open_orders_but_not_admin(evaluator):
    assert evaluator.can_access_page("staff", "orders") is True
    assert evaluator.can_access_page("staff", "admin") is False


def test_page_id_and_action_code_are_both_accepted_as_resource(evaluator):
    assert evaluator.can_access("manager", "orders") is True
    assert evaluator.can_access("manager", "orders:manage") is True
    assert evaluator.can_access("manager", Permission.ADMIN_USERS) is False
    assert evaluator.can_access("staff", "orders:manage") is False


def test_unknown_role_denies_everything(evaluator):
    for page in Page:
        assert evaluator.can_access_page("intern", page) is False
    assert evaluator.can_access(None, "dashboard:view") is False
    assert evaluator.explain("intern", "dashboard").reason is DenyReason.UNKNOWN_ROLE


def test_empty_role_denies_with_its_own_reason():
    evaluator = PermissionEvaluator(RoleRegistry.from_definitions({"guest": {"permissions": []}}))

    decision = evaluator.explain("guest", "dashboard")

    assert decision.allowed is False
    assert decision.reason is DenyReason.EMPTY_ROLE
    assert decision.role is not None and decision.role.id == "guest"
    assert evaluator.accessible_pages("guest") == []


def test_unknown_resource_denies_and_is_logged_at_debug(evaluator, caplog):
    caplog.set_level(logging.DEBUG, logger="core.services.auth.authorization")

    assert evaluator.can_access("admin", "warehouse:teleport") is False
    assert evaluator.can_access_page("admin", "billing") is False
    assert evaluator.explain("admin", "warehouse:teleport").reason is DenyReason.UNKNOWN_RESOURCE
    assert "warehouse:teleport" in caplog.text
    assert "billing" in caplog.text


def test_repeated_checks_return_the_same_answer(evaluator):
    first = [evaluator.can_access("sales_agent", page) for page in Page]
    for _ in range(3):
        assert [evaluator.can_access("sales_agent", page) for page in Page] == first


def test_accessible_pages_follow_navigation_order(evaluator):
    assert evaluator.accessible_pages("sales_agent") == [Page.DASHBOARD, Page.ORDERS, Page.CUSTOMERS]
    assert evaluator.accessible_pages("agents_stock") == [Page.DASHBOARD, Page.INVENTORY, Page.PRODUCTS]
    assert evaluator.accessible_pages("admin") == list(Page)


def test_require_permission_raises_business_rule_error(evaluator, user_session, clock):
    user_session.set_session(UserSession(user_id="3", username="tom", role_id="staff", login_timestamp=clock()))

    require_permission(user_session, "orders:view", operation_label="list orders")
    with pytest.raises(BusinessRuleError, match="Missing 'orders:manage'") as exc_info:
        require_permission(user_session, Permission.ORDERS_MANAGE, operation_label="cancel order")
    assert exc_info.value.code == "PERMISSION_DENIED"


def test_session_without_evaluator_fails_closed(clock):
    context = UserSessionContext()
    context.set_session(UserSession(user_id="1", username="alice", role_id="admin", login_timestamp=clock()))

    assert context.has_permission("dashboard:view") is False
    with pytest.raises(BusinessRuleError):
        require_permission(None, "dashboard:view", operation_label="open dashboard")
