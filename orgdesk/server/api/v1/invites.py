"""
Invites API Endpoints.

Administrators create sign-up invites that carry a role and optional
specializations. Applying an invite gives the caller that role and those
specializations, and consumes the invite.
"""

from typing import List
from urllib.parse import urlencode

from fastapi import APIRouter, status

from orgdesk.core.database.base import as_utc
from orgdesk.core.database.entities import Invite
from orgdesk.core.database.repositories import InviteRepository, RoleRepository, SpecializationRepository
from orgdesk.core.errors import BadRequestError, NotFoundError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import RoleId
from orgdesk.core.models.io.invites import (
    ApplyInviteRequest,
    ApplyInviteResponse,
    InviteCreate,
    InviteLink,
    InviteRead,
)
from orgdesk.server.core.config import settings
from orgdesk.server.services.deps import CurrentUserDep, SessionDep, require_role

logger = get_logger(__name__)

router = APIRouter()


def invite_link(code: str, role: str) -> str:
    return f"{settings.site_url.rstrip('/')}/sign-up?{urlencode({'invite': code, 'role': role})}"


@router.post(
    "",
    response_model=InviteLink,
    status_code=status.HTTP_201_CREATED,
    summary="Create Invite",
    description="Create a sign-up invite for a role. Administrators only.",
    response_description="The invite code and the sign-up link to share.",
    responses={
        400: {"description": "Missing or unknown role, or unknown specialization"},
        403: {"description": "Caller is not an administrator"},
    },
)
async def create_invite(body: InviteCreate, user: CurrentUserDep, session: SessionDep) -> InviteLink:
    """
    Create an invite.

    - **role**: Role name, slug or identifier the new user receives.
    - **specializations**: Specialization IDs assigned on sign-up.
    - **expires_at**: Optional expiry; expired invites cannot be applied.
    """
    require_role(user, RoleId.ADMIN, message="Only administrators can create invites")
    if not body.role:
        raise BadRequestError("role is required")
    role = await RoleRepository(session).resolve(body.role)
    if role is None:
        raise BadRequestError(f"Unknown role: {body.role}")

    specializations = SpecializationRepository(session)
    for spec_id in body.specializations:
        if await specializations.get_by_id(spec_id) is None:
            raise BadRequestError(f"Unknown specialization: {spec_id}")

    invite = await InviteRepository(session).create_with_specializations(
        Invite(role_id=role.id, inviter_id=user.id, max_uses=body.max_uses, expires_at=as_utc(body.expires_at)),
        body.specializations,
    )
    logger.info(f"User '{user.id}' created invite '{invite.code}' for role '{role.id}'")
    return InviteLink(code=invite.code, inviteLink=invite_link(invite.code, body.role))


@router.get(
    "",
    response_model=List[InviteRead],
    summary="List Invites",
    description="List outstanding invites with their role name. Administrators only.",
    responses={
        403: {"description": "Caller is not an administrator"},
    },
)
async def list_invites(user: CurrentUserDep, session: SessionDep) -> List[InviteRead]:
    require_role(user, RoleId.ADMIN, message="Only administrators can list invites")
    rows = await InviteRepository(session).list_with_roles()
    return [
        InviteRead(
            code=invite.code,
            role=role.role if role else invite.role_id,
            inviter_id=invite.inviter_id,
            max_uses=invite.max_uses,
            expires_at=invite.expires_at,
            created_at=invite.created_at,
        )
        for invite, role in rows
    ]


@router.post(
    "/apply",
    response_model=ApplyInviteResponse,
    summary="Apply Invite",
    description="Consume an invite: the caller receives its role and specializations.",
    responses={
        400: {"description": "Missing, unknown or expired invite code"},
        401: {"description": "Caller is not authenticated"},
    },
)
async def apply_invite(body: ApplyInviteRequest, user: CurrentUserDep, session: SessionDep) -> ApplyInviteResponse:
    """
    Apply an invite.

    - **invite**: The invite code from the sign-up link.
    """
    if not body.invite:
        raise BadRequestError("invite is required")
    invites = InviteRepository(session)
    invite = await invites.get_by_id(body.invite)
    if invite is None or InviteRepository.is_expired(invite):
        raise BadRequestError("Invalid or expired invite code")

    role_id = invite.role_id
    assigned = await invites.apply(invite, user)
    logger.info(f"User '{user.id}' applied invite '{body.invite}' and now holds role '{role_id}'")
    return ApplyInviteResponse(role=role_id, specializations=assigned)


@router.delete(
    "/{code}",
    summary="Delete Invite",
    description="Revoke an invite. Administrators only.",
    responses={
        403: {"description": "Caller is not an administrator"},
        404: {"description": "Invite not found"},
    },
)
async def delete_invite(code: str, user: CurrentUserDep, session: SessionDep):
    require_role(user, RoleId.ADMIN, message="Only administrators can delete invites")
    if not await InviteRepository(session).delete_invite(code):
        raise NotFoundError("Invite", code)
    return {"success": True}
