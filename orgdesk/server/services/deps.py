"""
Endpoint Dependencies.

Provides the database session, the calling user, the storage backend and
the app-wide cache and hour-log ledger as annotated FastAPI dependencies,
plus role and permission-flag guards.
"""

from typing import Annotated, Optional

from fastapi import Cookie, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.calendar import OptimisticHourLedger
from orgdesk.core.cache import TTLStorage
from orgdesk.core.database import get_session
from orgdesk.core.database.entities import Profile
from orgdesk.core.database.repositories import RolePermissionRepository
from orgdesk.core.errors import ForbiddenError, UnauthorizedError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import RoleId, normalize_role
from orgdesk.permissions import CalendarPermissions, PermissionResolver, PermissionSource, has_all_permissions
from orgdesk.server.core.config import settings
from orgdesk.storage import LocalStorageBackend, StorageBackend

logger = get_logger(__name__)

SESSION_COOKIE = "orgdesk-session"

_cache: Optional[TTLStorage] = None
_ledger: Optional[OptimisticHourLedger] = None
_storage: Optional[StorageBackend] = None


def get_cache() -> TTLStorage:
    global _cache
    if _cache is None:
        _cache = TTLStorage()
    return _cache


def get_ledger() -> OptimisticHourLedger:
    global _ledger
    if _ledger is None:
        _ledger = OptimisticHourLedger()
    return _ledger


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        _storage = LocalStorageBackend(settings.storage.root)
        logger.info(f"Using local storage buckets under {settings.storage.root}")
    return _storage


SessionDep = Annotated[AsyncSession, Depends(get_session)]
CacheDep = Annotated[TTLStorage, Depends(get_cache)]
LedgerDep = Annotated[OptimisticHourLedger, Depends(get_ledger)]
StorageDep = Annotated[StorageBackend, Depends(get_storage)]


async def get_current_user(
    session: SessionDep,
    x_user_id: Annotated[Optional[str], Header()] = None,
    orgdesk_session: Annotated[Optional[str], Cookie(alias=SESSION_COOKIE)] = None,
) -> Profile:
    """
    Resolve the authenticated caller.

    The identity is taken from the ``X-User-Id`` header, or else from the
    session cookie, and must name an existing profile.

    Raises:
        UnauthorizedError: When no identity is supplied or the profile is unknown
    """
    user_id = x_user_id or orgdesk_session
    if not user_id:
        raise UnauthorizedError()
    profile = await session.get(Profile, user_id)
    if profile is None:
        logger.debug(f"Rejected request for unknown user '{user_id}'")
        raise UnauthorizedError()
    return profile


CurrentUserDep = Annotated[Profile, Depends(get_current_user)]


def role_of(profile: Profile) -> RoleId:
    return normalize_role(profile.role)


def require_role(profile: Profile, *roles: RoleId, message: str = "Forbidden") -> RoleId:
    """Return the caller's role, raising ForbiddenError unless it is one of ``roles``."""
    role = role_of(profile)
    if role not in roles:
        raise ForbiddenError(message)
    return role


def require_permissions(*flags: str, message: str = "Forbidden"):
    """
    Build a dependency that requires every permission flag in ``flags``.

    The caller's flags are resolved the same way as ``GET /permissions/me``.

    Args:
        flags: Permission flag names such as ``canCreateEvents``
        message: Error message of the ForbiddenError raised when a flag is missing

    Returns:
        A dependency resolving to the caller's CalendarPermissions
    """

    async def dependency(user: CurrentUserDep, session: SessionDep) -> CalendarPermissions:
        user_id, role_id = user.id, user.role
        resolved = await PermissionResolver(RolePermissionRepository(session)).resolve(user_id, role_id)
        if resolved.source is not PermissionSource.DATABASE:
            # The failed lookup rolled back the session and expired the caller
            await session.refresh(user)
        if not has_all_permissions(resolved.permissions, flags):
            logger.debug(f"User '{user_id}' lacks {', '.join(flags)} ({resolved.source.value})")
            raise ForbiddenError(message)
        return resolved.permissions

    return dependency
