from __future__ import annotations

from enum import Enum


class Permission(str, Enum):
    DASHBOARD_VIEW = "dashboard:view"

    INVENTORY_VIEW = "inventory:view"
    INVENTORY_MANAGE = "inventory:manage"

    PRODUCTS_VIEW = "products:view"
    PRODUCTS_MANAGE = "products:manage"

    ORDERS_VIEW = "orders:view"
    ORDERS_MANAGE = "orders:manage"

    CUSTOMERS_VIEW = "customers:view"
    CUSTOMERS_MANAGE = "customers:manage"

    REPORTS_VIEW = "reports:view"
    REPORTS_EXPORT = "reports:export"

    SETTINGS_VIEW = "settings:view"
    SETTINGS_MANAGE = "settings:manage"

    ADMIN_VIEW = "admin:view"
    ADMIN_MANAGE = "admin:manage"
    ADMIN_USERS = "admin:users"
    ADMIN_ROLES = "admin:roles"
    ADMIN_LOGS = "admin:logs"

    @classmethod
    def parse(cls, value: object) -> "Permission | None":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        try:
            return cls(raw)
        except ValueError:
            return None


class Page(str, Enum):
    DASHBOARD = "dashboard"
    INVENTORY = "inventory"
    PRODUCTS = "products"
    ORDERS = "orders"
    CUSTOMERS = "customers"
    REPORTS = "reports"
    SETTINGS = "settings"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> "Page | None":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower().strip("/")
        try:
            return cls(raw)
        except ValueError:
            return None


class SessionState(str, Enum):
    ACTIVE = "ACTIVE"
    WARNING = "WARNING"
    EXPIRED = "EXPIRED"


class AuthState(str, Enum):
    LOADING = "LOADING"
    AUTHENTICATED = "AUTHENTICATED"
    ANONYMOUS = "ANONYMOUS"


__all__ = ["Permission", "Page", "SessionState", "AuthState"]
