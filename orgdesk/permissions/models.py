"""Permission flag models.

``CalendarPermissions`` is the flag set every permission check works on. The
field names are part of the API contract and stay camelCase.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from pydantic import BaseModel, Field

# Flag name -> action key granted by a permission row
PERMISSION_ACTIONS: Dict[str, str] = {
    "canCreateEvents": "create_events",
    "canEditEvents": "edit_events",
    "canDeleteEvents": "delete_events",
    "canLogHours": "log_hours",
    "canViewAllEvents": "view_all_events",
    "canManageUsers": "manage_users",
    "canExportData": "export_data",
    "canCreateSLS": "sls_create",
    "canManageCalendar": "calendar_manage",
}

ADMIN_LEVEL = "admin"


class CalendarPermissions(BaseModel):
    """Boolean permission flags held by a user."""

    canCreateEvents: bool = Field(default=False, description="May create calendar events")
    canEditEvents: bool = Field(default=False, description="May edit calendar events")
    canDeleteEvents: bool = Field(default=False, description="May delete calendar events")
    canLogHours: bool = Field(default=False, description="May log coaching hours")
    canViewAllEvents: bool = Field(default=False, description="May see every event regardless of assignment")
    canManageUsers: bool = Field(default=False, description="May manage users and roles")
    canExportData: bool = Field(default=False, description="May export calendar data")
    canCreateSLS: bool = Field(default=False, description="May create SLS events")
    canManageCalendar: bool = Field(default=False, description="May manage calendar configuration")

    @classmethod
    def all_granted(cls) -> "CalendarPermissions":
        return cls(**{flag: True for flag in PERMISSION_ACTIONS})

    def granted(self) -> List[str]:
        """Names of the flags that are set."""
        return [flag for flag in PERMISSION_ACTIONS if getattr(self, flag)]


def has_permission(permissions: CalendarPermissions, flag: str) -> bool:
    """Whether a single flag is set.

    Raises:
        KeyError: If ``flag`` is not a known permission flag
    """
    if flag not in PERMISSION_ACTIONS:
        raise KeyError(f"Unknown permission flag: '{flag}'")
    return bool(getattr(permissions, flag))


def has_all_permissions(permissions: CalendarPermissions, flags: Iterable[str]) -> bool:
    return all(has_permission(permissions, flag) for flag in flags)


def has_any_permission(permissions: CalendarPermissions, flags: Iterable[str]) -> bool:
    return any(has_permission(permissions, flag) for flag in flags)
