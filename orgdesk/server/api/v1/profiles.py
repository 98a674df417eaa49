"""
Profile API Endpoints.

Role assignment for users and the human-readable label of a role.
"""

from typing import Optional

from fastapi import APIRouter

from orgdesk.core.database.repositories import ProfileRepository, RoleRepository, SpecializationRepository
from orgdesk.core.errors import BadRequestError, NotFoundError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import RoleId
from orgdesk.core.models.io.permissions import RoleLabelRead, SetRoleRequest, SpecializationRead
from orgdesk.server.services.deps import CurrentUserDep, SessionDep, require_role

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/set-role",
    summary="Set User Role",
    description="Assign a role to a user. Only administrators may change roles.",
    response_description="The profile ID and the role identifier now stored on it.",
    responses={
        200: {"description": "Role updated"},
        400: {"description": "Missing fields or unknown role"},
        403: {"description": "Caller is not an administrator"},
        404: {"description": "User not found"},
    },
)
async def set_role(body: SetRoleRequest, user: CurrentUserDep, session: SessionDep):
    """
    Change the role of a user.

    - **uuid**: Profile ID of the user to update.
    - **role**: Role slug or role identifier.
    """
    require_role(user, RoleId.ADMIN, message="Only administrators can change roles")
    if not body.uuid or not body.role:
        raise BadRequestError("uuid and role are required")

    roles = RoleRepository(session)
    role = await roles.get_by_slug(body.role) or await roles.get_by_id(body.role)
    if role is None:
        raise BadRequestError(f"Unknown role: {body.role}")

    profiles = ProfileRepository(session)
    profile = await profiles.get_by_id(body.uuid)
    if profile is None:
        raise NotFoundError("User", body.uuid)

    await profiles.set_role(profile, role.id)
    logger.info(f"User '{user.id}' set role of '{body.uuid}' to '{role.id}'")
    return {"success": True, "uuid": body.uuid, "role": role.id}


@router.get(
    "/role-label",
    response_model=RoleLabelRead,
    summary="Get Role Label",
    description="Resolve a role identifier to its name together with the specializations offered for it.",
    response_description="The role name and its specializations.",
    responses={
        400: {"description": "role_id is missing"},
        404: {"description": "Role not found"},
    },
)
async def get_role_label(session: SessionDep, role_id: Optional[str] = None) -> RoleLabelRead:
    """
    Get the label of a role.

    - **role_id**: Role identifier, slug or name.
    """
    if not role_id:
        raise BadRequestError("role_id is required")
    role = await RoleRepository(session).resolve(role_id)
    if role is None:
        raise NotFoundError("Role", role_id)
    specializations = await SpecializationRepository(session).list_for_role(role.role)
    return RoleLabelRead(
        role=role.role,
        specializations=[SpecializationRead.model_validate(s) for s in specializations],
    )
