"""
Permissions API Endpoints.

Exposes the effective permission flags of the calling user and the static
fallback table used when role grants cannot be read from the database.
"""

from fastapi import APIRouter

from orgdesk.core.database.repositories import RolePermissionRepository
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import ROLE_NAMES
from orgdesk.core.models.io.permissions import PermissionsRead
from orgdesk.permissions import CalendarPermissions, PermissionResolver, fallback_permissions
from orgdesk.server.services.deps import CurrentUserDep, SessionDep, role_of

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/me",
    response_model=PermissionsRead,
    summary="Get My Permissions",
    description="Resolve the permission flags of the calling user from role grants, falling back to the built-in table.",
    response_description="The nine permission flags with the caller's role and the source that produced them.",
    responses={
        200: {"description": "Permissions resolved"},
        401: {"description": "Caller is not authenticated"},
    },
)
async def get_my_permissions(user: CurrentUserDep, session: SessionDep) -> PermissionsRead:
    """
    Get the effective permissions of the caller.

    Resolution order:
    1. Grants for the user and their role from `role_permissions`
    2. Role-based grants only, when the first lookup fails
    3. The built-in fallback table, when both lookups fail

    Unknown roles are resolved as a plain user.

    The `source` field reports which step answered.
    """
    # A failed lookup rolls the session back, which expires loaded rows
    user_id, role_id = user.id, user.role
    role = role_of(user)
    resolver = PermissionResolver(RolePermissionRepository(session))
    resolved = await resolver.resolve(user_id, role_id)
    return PermissionsRead(
        **resolved.permissions.model_dump(),
        role=role_id,
        roleName=ROLE_NAMES[role],
        source=resolved.source.value,
    )


@router.get(
    "/fallback/{role_id}",
    response_model=CalendarPermissions,
    summary="Get Fallback Permissions",
    description="Return the built-in permission set of a role. Unknown roles get every flag false.",
    response_description="The nine permission flags.",
)
async def get_fallback_permissions(role_id: str) -> CalendarPermissions:
    """
    Get the built-in permissions of a role.

    - **role_id**: Role identifier such as `admin1`, `coachx7`, `client7x` or `user0x`.
    """
    return fallback_permissions(role_id)
