# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# They describe what the staff member does on the floor.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CASHIER = "cashier"
ROLE_WAITER = "waiter"
ROLE_KITCHEN = "kitchen"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_CASHIER,
    ROLE_WAITER,
    ROLE_KITCHEN,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_REGISTER_OPERATE = "register.operate"  # open/close till, deposits, withdrawals
CAP_ORDERS_TAKE = "orders.take"  # open tabs, add/remove items, kitchen print
CAP_ORDERS_SETTLE = "orders.settle"  # collect payments against an order
CAP_REPORTS_VIEW_REGISTER = "reports.view_register"  # ledger, summary, history
CAP_RESTAURANT_CONFIGURE = "restaurant.configure"  # tables, printers

ALL_CAPABILITIES = {
    CAP_REGISTER_OPERATE,
    CAP_ORDERS_TAKE,
    CAP_ORDERS_SETTLE,
    CAP_REPORTS_VIEW_REGISTER,
    CAP_RESTAURANT_CONFIGURE,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        *ALL_CAPABILITIES,
    },
    ROLE_CASHIER: {
        CAP_REGISTER_OPERATE,
        CAP_ORDERS_TAKE,
        CAP_ORDERS_SETTLE,
        CAP_REPORTS_VIEW_REGISTER,
    },
    ROLE_WAITER: {
        CAP_ORDERS_TAKE,
    },
    ROLE_KITCHEN: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(request, user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)

    role = get_user_role(user)
    return set(ROLE_CAPABILITIES.get(role, set()))


# =========================================================
# Base Role Permission (Internal Use)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_REGISTER_OPERATE

    Views with per-action needs may define get_required_capability().
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        resolver = getattr(view, "get_required_capability", None)
        required = resolver() if callable(resolver) else getattr(view, "required_capability", None)
        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return required in effective_capabilities_for(request, user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        view.required_any_capabilities = {CAP_ORDERS_TAKE, CAP_ORDERS_SETTLE}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(request, user)
        return any(cap in caps for cap in set(required))


# =========================================================
# Role Permissions
# =========================================================
class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsManagerOrAdmin(BaseRolePermission):
    allowed_roles = {ROLE_MANAGER, ROLE_ADMIN}


class IsCashier(BaseRolePermission):
    allowed_roles = {ROLE_CASHIER}


class IsWaiter(BaseRolePermission):
    allowed_roles = {ROLE_WAITER}


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES
