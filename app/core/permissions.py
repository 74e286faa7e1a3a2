"""
Static role -> permission table.

Loaded once at import time and exposed read-only. Authorization dependencies
consult it through has_permission(); nothing mutates it at runtime.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Role(str, Enum):
    """Closed set of user roles."""

    MASTER_ADMIN = "master_admin"
    SUB_ADMIN = "sub_admin"
    USER = "user"


class Permission(str, Enum):
    """One allowed action on one resource kind."""

    LIST_USERS = "list:users"
    READ_USER = "read:user"
    UPDATE_USER = "update:user"
    DELETE_USER = "delete:user"

    LIST_ROLES = "list:roles"
    ASSIGN_ROLE = "assign:role"

    LIST_PRODUCTS = "list:products"
    READ_PRODUCT = "read:product"
    CREATE_PRODUCT = "create:product"
    UPDATE_PRODUCT = "update:product"
    DELETE_PRODUCT = "delete:product"


ROLE_PERMISSIONS: Mapping[Role, frozenset[Permission]] = MappingProxyType(
    {
        Role.MASTER_ADMIN: frozenset(Permission),
        Role.SUB_ADMIN: frozenset(
            {
                Permission.LIST_USERS,
                Permission.READ_USER,
                Permission.UPDATE_USER,
                Permission.LIST_ROLES,
                Permission.LIST_PRODUCTS,
                Permission.READ_PRODUCT,
                Permission.CREATE_PRODUCT,
                Permission.UPDATE_PRODUCT,
            }
        ),
        Role.USER: frozenset(
            {
                Permission.READ_USER,
                Permission.UPDATE_USER,
                Permission.LIST_PRODUCTS,
                Permission.READ_PRODUCT,
            }
        ),
    }
)

# Roles allowed to act on other users' records
PRIVILEGED_ROLES: frozenset[Role] = frozenset({Role.MASTER_ADMIN, Role.SUB_ADMIN})


def permissions_for(role: Role | str) -> frozenset[Permission]:
    """Return the permission set of a role, empty for unknown roles."""
    try:
        return ROLE_PERMISSIONS.get(Role(role), frozenset())
    except ValueError:
        return frozenset()


def has_permission(role: Role | str, permission: Permission) -> bool:
    """Check whether a role holds a permission."""
    return permission in permissions_for(role)


def describe_roles() -> dict[str, list[str]]:
    """Role table as plain data, permissions sorted for stable output."""
    return {
        role.value: sorted(p.value for p in perms)
        for role, perms in ROLE_PERMISSIONS.items()
    }
