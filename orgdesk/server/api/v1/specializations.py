"""
Specialization API Endpoints.

Specializations are sub-roles offered within a role (for example a job
coach's areas of expertise). Administrators maintain the catalogue and its
members; users may assign specializations to themselves.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from orgdesk.core.database.entities import Profile, Specialization
from orgdesk.core.database.repositories import ProfileRepository, RoleRepository, SpecializationRepository
from orgdesk.core.errors import BadRequestError, ConflictError, NotFoundError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import RoleId
from orgdesk.core.models.io.permissions import (
    SpecializationAssignment,
    SpecializationDetail,
    SpecializationIdBody,
    SpecializationMember,
    SpecializationMemberRemove,
    SpecializationMembersAdd,
    SpecializationSummary,
    SpecializationWrite,
)
from orgdesk.server.services.deps import CurrentUserDep, SessionDep, require_role

logger = get_logger(__name__)

router = APIRouter()

ADMIN_ONLY = "Only administrators can manage specializations"


async def _role_name(session: SessionDep, role_type: str) -> str:
    role = await RoleRepository(session).get_by_name(role_type)
    if role is None:
        raise BadRequestError("Invalid role type")
    return role.role


def _summary(specialization: Specialization) -> SpecializationSummary:
    return SpecializationSummary(
        id=specialization.id,
        name=specialization.name,
        description=specialization.description,
        color=specialization.color,
        role=specialization.role or "Unassigned",
    )


def _detail(specialization: Specialization) -> SpecializationDetail:
    return SpecializationDetail(
        id=specialization.id,
        name=specialization.name,
        description=specialization.description,
        color=specialization.color,
        role_type=specialization.role,
    )


async def _get_specialization(specializations: SpecializationRepository, specialization_id: str) -> Specialization:
    specialization = await specializations.get_by_id(specialization_id)
    if specialization is None:
        raise NotFoundError("Role")
    return specialization


def _check_self_or_admin(user: Profile, user_id: str) -> None:
    if user_id != user.id:
        require_role(user, RoleId.ADMIN, message="You can only change your own specializations")


@router.get("", response_model=List[SpecializationSummary], summary="List Specializations")
async def list_specializations(user: CurrentUserDep, session: SessionDep) -> List[SpecializationSummary]:
    return [_summary(s) for s in await SpecializationRepository(session).list_all()]


@router.post(
    "/create",
    response_model=SpecializationDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Create Specialization",
    responses={
        400: {"description": "Name or role type missing, or unknown role type"},
        403: {"description": "Caller is not an administrator"},
    },
)
async def create_specialization(
    body: SpecializationWrite, user: CurrentUserDep, session: SessionDep
) -> SpecializationDetail:
    """
    Create a specialization within a role.

    - **name**, **role_type**: Required; **role_type** is a role name such as `jobcoach`.
    - **description**, **color**: Optional.
    """
    require_role(user, RoleId.ADMIN, message=ADMIN_ONLY)
    if not body.name or not body.role_type:
        raise BadRequestError("Name and role type are required")
    role = await _role_name(session, body.role_type)
    specialization = await SpecializationRepository(session).create(
        Specialization(name=body.name, description=body.description, color=body.color, role=role)
    )
    logger.info(f"User '{user.id}' created specialization {specialization.id} '{specialization.name}' for {role}")
    return _detail(specialization)


@router.post(
    "/update",
    response_model=SpecializationDetail,
    summary="Update Specialization",
    responses={
        400: {"description": "Id, name or role type missing, or unknown role type"},
        403: {"description": "Caller is not an administrator"},
        404: {"description": "Specialization not found"},
    },
)
async def update_specialization(
    body: SpecializationWrite, user: CurrentUserDep, session: SessionDep
) -> SpecializationDetail:
    require_role(user, RoleId.ADMIN, message=ADMIN_ONLY)
    if not body.id or not body.name or not body.role_type:
        raise BadRequestError("ID, name, and role type are required")
    role = await _role_name(session, body.role_type)
    specializations = SpecializationRepository(session)
    specialization = await specializations.get_by_id(body.id)
    if specialization is None:
        raise NotFoundError("Specialization", body.id)

    specialization.name = body.name
    specialization.role = role
    specialization.description = body.description
    specialization.color = body.color
    return _detail(await specializations.update(specialization))


@router.delete(
    "/delete",
    summary="Delete Specialization",
    responses={
        400: {"description": "Id missing"},
        403: {"description": "Caller is not an administrator"},
        404: {"description": "Specialization not found"},
        409: {"description": "The specialization is still assigned to users"},
    },
)
async def delete_specialization(body: SpecializationIdBody, user: CurrentUserDep, session: SessionDep):
    require_role(user, RoleId.ADMIN, message=ADMIN_ONLY)
    if not body.id:
        raise BadRequestError("Specialization ID is required")
    specializations = SpecializationRepository(session)
    if await specializations.get_by_id(body.id) is None:
        raise NotFoundError("Specialization", body.id)
    if await specializations.count_assignments(body.id) > 0:
        raise ConflictError(
            "Cannot delete specialization that is assigned to users. Remove all user assignments first."
        )
    await specializations.delete_specialization(body.id)
    logger.info(f"User '{user.id}' deleted specialization {body.id}")
    return {"message": "Specialization deleted successfully"}


@router.post(
    "/assign",
    summary="Assign Specialization",
    responses={
        400: {"description": "Ids missing or already assigned"},
        403: {"description": "Caller is neither the user nor an administrator"},
        404: {"description": "User or specialization not found"},
    },
)
async def assign_specialization(body: SpecializationAssignment, user: CurrentUserDep, session: SessionDep):
    """Give **userId** the specialization **specializationId**; the caller is recorded as the assigner."""
    if not body.userId or not body.specializationId:
        raise BadRequestError("User ID and Specialization ID are required")
    _check_self_or_admin(user, body.userId)
    if await ProfileRepository(session).get_by_id(body.userId) is None:
        raise NotFoundError("User", body.userId)
    specializations = SpecializationRepository(session)
    if await specializations.get_by_id(body.specializationId) is None:
        raise NotFoundError("Specialization", body.specializationId)
    if await specializations.is_assigned(body.userId, body.specializationId):
        raise BadRequestError("Specialization already assigned")

    await specializations.assign(body.specializationId, [body.userId], assigned_by=user.id)
    return {"message": "Specialization assigned successfully"}


@router.post(
    "/remove",
    summary="Remove Specialization",
    responses={
        400: {"description": "Ids missing"},
        403: {"description": "Caller is neither the user nor an administrator"},
    },
)
async def remove_specialization(body: SpecializationAssignment, user: CurrentUserDep, session: SessionDep):
    if not body.userId or not body.specializationId:
        raise BadRequestError("User ID and Specialization ID are required")
    _check_self_or_admin(user, body.userId)
    await SpecializationRepository(session).unassign(body.specializationId, body.userId)
    return {"message": "Specialization removed successfully"}


@router.post(
    "/add-members",
    summary="Add Specialization Members",
    responses={
        400: {"description": "Specialization id or user ids missing"},
        403: {"description": "Caller is not an administrator"},
        404: {"description": "Specialization or user not found"},
    },
)
async def add_members(body: SpecializationMembersAdd, user: CurrentUserDep, session: SessionDep):
    """
    Assign a specialization to several users at once.

    Users who already hold it are skipped.
    """
    require_role(user, RoleId.ADMIN, message=ADMIN_ONLY)
    if not body.roleId or not body.userIds:
        raise BadRequestError("Role ID and at least one user ID are required")
    specializations = SpecializationRepository(session)
    await _get_specialization(specializations, body.roleId)
    known = await ProfileRepository(session).get_many(body.userIds)
    missing = [user_id for user_id in body.userIds if user_id not in known]
    if missing:
        raise NotFoundError("User", missing[0])

    added = await specializations.assign(body.roleId, body.userIds, assigned_by=user.id)
    return {"success": True, "message": f"Added {added} user(s) to the role"}


@router.post(
    "/remove-members",
    summary="Remove Specialization Member",
    responses={
        400: {"description": "Specialization id or user id missing"},
        403: {"description": "Caller is not an administrator"},
    },
)
async def remove_member(body: SpecializationMemberRemove, user: CurrentUserDep, session: SessionDep):
    require_role(user, RoleId.ADMIN, message=ADMIN_ONLY)
    if not body.roleId or not body.userId:
        raise BadRequestError("Role ID and user ID are required")
    await SpecializationRepository(session).unassign(body.roleId, body.userId)
    return {"success": True, "message": "User removed from role successfully"}


@router.get(
    "/get-members",
    response_model=List[SpecializationMember],
    summary="List Specialization Members",
    responses={
        400: {"description": "id missing"},
        404: {"description": "Specialization not found"},
    },
)
async def get_members(
    user: CurrentUserDep,
    session: SessionDep,
    specialization_id: Optional[str] = Query(default=None, alias="id"),
) -> List[SpecializationMember]:
    if not specialization_id:
        raise BadRequestError("Role ID is required")
    specializations = SpecializationRepository(session)
    await _get_specialization(specializations, specialization_id)
    return [
        SpecializationMember(
            id=profile.id,
            name=profile.display_name or "Unknown User",
            email=profile.email or "",
            avatar_url=profile.avatar_url,
        )
        for profile in await specializations.members(specialization_id)
    ]


@router.get(
    "/get-user-specializations",
    response_model=List[SpecializationSummary],
    summary="List A User's Specializations",
    responses={
        400: {"description": "userId missing"},
    },
)
async def get_user_specializations(
    user: CurrentUserDep, session: SessionDep, userId: Optional[str] = None
) -> List[SpecializationSummary]:
    if not userId:
        raise BadRequestError("User ID is required")
    return [_summary(s) for s in await SpecializationRepository(session).list_for_user(userId)]
