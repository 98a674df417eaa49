"""
Permission and role I/O models for API requests and responses.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from orgdesk.permissions.models import CalendarPermissions


class PermissionsRead(CalendarPermissions):
    """Resolved permission flags for the calling user."""

    role: str = Field(description="Role identifier of the caller")
    roleName: str = Field(description="Human-readable role name")
    source: str = Field(description="Where the flags came from: database, role_based or fallback")


class RoleRead(BaseModel):
    """Schema for reading a role."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    role: str
    slug: str
    description: Optional[str] = None


class SetRoleRequest(BaseModel):
    """Request to change a user's role."""

    uuid: Optional[str] = Field(default=None, description="Profile ID of the user")
    role: Optional[str] = Field(default=None, description="Role slug or identifier")


class SpecializationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None


class RoleLabelRead(BaseModel):
    """Human-readable role name with the specializations offered for it."""

    role: str
    specializations: List[SpecializationRead] = Field(default_factory=list)


class SpecializationSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    role: str = Field(description="Role name the specialization belongs to, or 'Unassigned'")


class SpecializationWrite(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    role_type: Optional[str] = Field(default=None, description="Role name, for example 'jobcoach'")


class SpecializationDetail(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    role_type: str


class SpecializationIdBody(BaseModel):
    id: Optional[str] = None


class SpecializationAssignment(BaseModel):
    userId: Optional[str] = None
    specializationId: Optional[str] = None


class SpecializationMembersAdd(BaseModel):
    roleId: Optional[str] = Field(default=None, description="Specialization ID")
    userIds: Optional[List[str]] = None


class SpecializationMemberRemove(BaseModel):
    roleId: Optional[str] = Field(default=None, description="Specialization ID")
    userId: Optional[str] = None


class SpecializationMember(BaseModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str] = None
