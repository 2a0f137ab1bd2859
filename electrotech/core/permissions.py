"""Access levels and the modules each level may open."""

from __future__ import annotations

from enum import Enum, IntEnum


class UserLevel(IntEnum):
    ADMIN = 1
    PARAMETRIC = 2
    SPORADIC = 3


class Module(str, Enum):
    PRODUCTS = "products"
    CATEGORIES = "categories"
    SUPPLIERS = "suppliers"
    CLIENTS = "clients"
    EMPLOYEES = "employees"
    SALES = "sales"
    PURCHASES = "purchases"
    RETURNS = "returns"
    INVENTORY = "inventory"
    SALES_REPORT = "sales_report"
    INVENTORY_REPORT = "inventory_report"
    PRODUCTS_REPORT = "products_report"
    CLIENTS_REPORT = "clients_report"
    USERS = "users"
    AUDIT_LOG = "audit_log"
    SETTINGS = "settings"


REPORT_MODULES = frozenset(
    {
        Module.SALES_REPORT,
        Module.INVENTORY_REPORT,
        Module.PRODUCTS_REPORT,
        Module.CLIENTS_REPORT,
    }
)
ADMIN_ONLY_MODULES = frozenset({Module.USERS, Module.AUDIT_LOG, Module.SETTINGS, Module.EMPLOYEES})


def _is_active(user) -> bool:
    return user is not None and bool(getattr(user, "active", False))


def has_permission(user, module: Module) -> bool:
    if not _is_active(user):
        return False
    level = user.level
    if level == UserLevel.ADMIN:
        return True
    if level == UserLevel.PARAMETRIC:
        return module not in ADMIN_ONLY_MODULES
    if level == UserLevel.SPORADIC:
        return module in REPORT_MODULES
    return False


def can_write(user) -> bool:
    return _is_active(user) and user.level in (UserLevel.ADMIN, UserLevel.PARAMETRIC)


def is_admin(user) -> bool:
    return _is_active(user) and user.level == UserLevel.ADMIN
