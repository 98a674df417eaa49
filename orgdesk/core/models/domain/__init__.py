"""Domain-level enums shared across packages."""

from .enums import (
    ROLE_FLAG_COLUMNS,
    ROLE_NAMES,
    DocumentAction,
    DocumentType,
    EventPriority,
    EventStatus,
    RoleId,
    SharePermission,
    normalize_role,
)

__all__ = [
    "ROLE_FLAG_COLUMNS",
    "ROLE_NAMES",
    "DocumentAction",
    "DocumentType",
    "EventPriority",
    "EventStatus",
    "RoleId",
    "SharePermission",
    "normalize_role",
]
