"""Hardcoded permission table used when the database cannot answer.

This is the only place role defaults are spelled out; the database grants
are authoritative whenever they can be read.
"""

from __future__ import annotations

from typing import Dict, Optional

from orgdesk.core.models.domain.enums import RoleId

from .models import CalendarPermissions

FALLBACK_PERMISSIONS: Dict[RoleId, CalendarPermissions] = {
    RoleId.ADMIN: CalendarPermissions.all_granted(),
    RoleId.COACH: CalendarPermissions(canLogHours=True, canExportData=True),
    RoleId.CLIENT: CalendarPermissions(canExportData=True),
    RoleId.USER: CalendarPermissions(),
}


def is_known_role(role_id: Optional[str]) -> bool:
    return role_id in {r.value for r in RoleId}


def fallback_permissions(role_id: Optional[str]) -> CalendarPermissions:
    """Static permission set for a role.

    Returned sets are deep-copied to prevent accidental mutation of the table.
    Unknown role strings get every flag false.
    """
    if not is_known_role(role_id):
        return CalendarPermissions()
    return FALLBACK_PERMISSIONS[RoleId(role_id)].model_copy(deep=True)
