"""Who may see which calendar events."""

from __future__ import annotations

from typing import Optional

from orgdesk.core.database.entities.calendar import CalendarEvent, EventType
from orgdesk.core.models.domain.enums import RoleId

SLS_ROLES = frozenset({RoleId.ADMIN.value, RoleId.CLIENT.value})


def is_event_visible(
    event: CalendarEvent,
    event_type: Optional[EventType],
    role_id: str,
    user_id: str,
) -> bool:
    """Apply the per-role visibility flags of an event's type.

    Events without a type are admin-only. Coaches and clients always see
    events they are assigned to, and otherwise only types flagged visible
    to their role. Any other role sees nothing.
    """
    if event_type is None:
        return role_id == RoleId.ADMIN.value

    if role_id == RoleId.ADMIN.value:
        return event_type.visible_to_admins is not False
    if role_id == RoleId.COACH.value:
        return event.coach_id == user_id or bool(event_type.visible_to_coaches)
    if role_id == RoleId.CLIENT.value:
        return event.client_id == user_id or bool(event_type.visible_to_clients)
    return False


def can_view_sls(role_id: str) -> bool:
    """SLS events are restricted to admins and clients."""
    return role_id in SLS_ROLES


def can_see_hour_logs(role_id: str) -> bool:
    return role_id in (RoleId.ADMIN.value, RoleId.COACH.value)
