"""Resolve the effective permission flags of a user.

Lookup order:

1) user and role grants from ``role_permissions`` (the database answer)
2) role-based grants only, when the first query fails
3) the hardcoded fallback table, when both queries fail

Roles outside the known set resolve as a plain user.

Resolution never raises; every step down the chain is logged as a warning.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Protocol

from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import normalize_role

from .fallback import fallback_permissions, is_known_role
from .models import ADMIN_LEVEL, PERMISSION_ACTIONS, CalendarPermissions

if TYPE_CHECKING:
    from orgdesk.core.database.repositories.profiles import RolePermissionRepository

logger = get_logger(__name__)


class PermissionRow(Protocol):
    permission_level: str
    specific_actions: list


class PermissionSource(str, Enum):
    DATABASE = "database"
    ROLE_BASED = "role_based"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolvedPermissions:
    permissions: CalendarPermissions
    source: PermissionSource


def parse_permission_rows(rows: Iterable[PermissionRow]) -> CalendarPermissions:
    """Fold permission rows into one flag set.

    A row at the ``admin`` level grants everything. Otherwise a flag is
    granted when a row names its action in ``specific_actions`` or carries
    it as ``permission_level``. Grants from different rows add up.
    """
    granted = dict.fromkeys(PERMISSION_ACTIONS, False)
    for row in rows:
        level = row.permission_level
        if level == ADMIN_LEVEL:
            return CalendarPermissions.all_granted()
        actions = set(row.specific_actions or [])
        for flag, action in PERMISSION_ACTIONS.items():
            if action in actions or level == action:
                granted[flag] = True
    return CalendarPermissions(**granted)


@dataclass(frozen=True)
class PermissionResolver:
    """Permission resolution backed by a ``RolePermissionRepository``."""

    repository: "RolePermissionRepository"

    async def resolve(self, user_id: str, role_id: str) -> ResolvedPermissions:
        """Resolve flags for a user holding ``role_id``.

        Args:
            user_id: Profile ID of the user
            role_id: Role identifier of the user

        Returns:
            The flags together with the source that produced them
        """
        if not is_known_role(role_id):
            logger.debug(f"Unknown role '{role_id}' for user '{user_id}', resolving as a plain user")
            role_id = normalize_role(role_id).value

        try:
            rows = await self.repository.get_user_permissions(user_id, role_id)
            logger.debug(f"Loaded {len(rows)} permission rows for user '{user_id}'")
            return ResolvedPermissions(parse_permission_rows(rows), PermissionSource.DATABASE)
        except Exception as e:
            logger.warning(
                f"Failed to load user permissions for '{user_id}': {e}. Falling back to role-based permissions."
            )
            await self._reset_session()

        try:
            rows = await self.repository.list_role_based(role_id)
            return ResolvedPermissions(parse_permission_rows(rows), PermissionSource.ROLE_BASED)
        except Exception as e:
            logger.warning(
                f"Failed to load role-based permissions for role '{role_id}': {e}. Using fallback permissions."
            )
            await self._reset_session()

        return ResolvedPermissions(fallback_permissions(role_id), PermissionSource.FALLBACK)

    async def _reset_session(self) -> None:
        session = getattr(self.repository, "session", None)
        if session is not None:
            await session.rollback()
