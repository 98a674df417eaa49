"""Role permission resolution with a hardcoded fallback table."""

from .fallback import FALLBACK_PERMISSIONS, fallback_permissions, is_known_role
from .models import (
    PERMISSION_ACTIONS,
    CalendarPermissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from .resolver import PermissionResolver, PermissionSource, ResolvedPermissions, parse_permission_rows

__all__ = [
    "FALLBACK_PERMISSIONS",
    "PERMISSION_ACTIONS",
    "CalendarPermissions",
    "PermissionResolver",
    "PermissionSource",
    "ResolvedPermissions",
    "fallback_permissions",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "is_known_role",
    "parse_permission_rows",
]
