"""
Roles API Endpoints.

This module provides read-only access to the role catalogue.
"""

from typing import List

from fastapi import APIRouter

from orgdesk.core.database.repositories import RoleRepository
from orgdesk.core.models.io.permissions import RoleRead
from orgdesk.server.services.deps import SessionDep

router = APIRouter()


@router.get(
    "",
    response_model=List[RoleRead],
    summary="List Roles",
    description="Retrieve every role a profile can hold.",
    response_description="A list of roles ordered by identifier.",
    responses={
        200: {"description": "List of roles retrieved successfully"},
    },
)
async def list_roles(session: SessionDep) -> List[RoleRead]:
    """
    List available roles.

    Each role has an opaque identifier stored on profiles (e.g. `admin1`),
    a human-readable name (e.g. `admin`) and a slug used by invite links.
    """
    roles = await RoleRepository(session).list_all()
    return [RoleRead.model_validate(r) for r in roles]
