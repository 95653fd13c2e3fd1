from __future__ import annotations

from core.domain.enums import Page, Permission


PAGE_PERMISSIONS: dict[Page, Permission] = {
    Page.DASHBOARD: Permission.DASHBOARD_VIEW,
    Page.INVENTORY: Permission.INVENTORY_VIEW,
    Page.PRODUCTS: Permission.PRODUCTS_VIEW,
    Page.ORDERS: Permission.ORDERS_VIEW,
    Page.CUSTOMERS: Permission.CUSTOMERS_VIEW,
    Page.REPORTS: Permission.REPORTS_VIEW,
    Page.SETTINGS: Permission.SETTINGS_VIEW,
    Page.ADMIN: Permission.ADMIN_VIEW,
}

# Navigation order of the main window.
PAGE_ORDER: tuple[Page, ...] = tuple(PAGE_PERMISSIONS.keys())


DEFAULT_ROLE_DEFINITIONS: dict[str, dict[str, object]] = {
    "admin": {
        "display_name": "Administrator",
        "description": "Full access to the system",
        "permissions": [p.value for p in Permission],
    },
    "manager": {
        "display_name": "Manager",
        "description": "Management access without administration",
        "permissions": [
            "dashboard:view",
            "inventory:view",
            "inventory:manage",
            "products:view",
            "products:manage",
            "orders:view",
            "orders:manage",
            "customers:view",
            "customers:manage",
            "reports:view",
            "reports:export",
        ],
    },
    "staff": {
        "display_name": "Staff",
        "description": "Basic access without reports and administration",
        "permissions": [
            "dashboard:view",
            "inventory:view",
            "products:view",
            "orders:view",
            "customers:view",
        ],
    },
    "sales_agent": {
        "display_name": "Sales Agent",
        "description": "Access to customers and orders only",
        "permissions": [
            "dashboard:view",
            "customers:view",
            "customers:manage",
            "orders:view",
            "orders:manage",
        ],
    },
    "stock_agent": {
        "display_name": "Stock Agent",
        "description": "Access to products and stock only",
        "permissions": [
            "dashboard:view",
            "inventory:view",
            "inventory:manage",
            "products:view",
            "products:manage",
        ],
    },
}

# Role ids still sent by the backend's users table.
ROLE_ALIASES: dict[str, str] = {
    "agents_vente": "sales_agent",
    "agents_stock": "stock_agent",
}


__all__ = ["DEFAULT_ROLE_DEFINITIONS", "PAGE_ORDER", "PAGE_PERMISSIONS", "ROLE_ALIASES"]
