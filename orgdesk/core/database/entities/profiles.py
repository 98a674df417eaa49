"""
Profile and role entity models.

This module contains the database entities for user profiles, the role
catalogue, role-based permission grants, specializations and invites.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class Role(Base, table=True):
    """A role a profile can hold.

    ``id`` is the short role identifier stored on profiles (``admin1``,
    ``coachx7``, ``client7x``, ``user0x``). ``role`` is the human-readable
    name and ``slug`` the form used by administrative requests.

    Table: roles
    """

    __tablename__ = "roles"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(primary_key=True, max_length=32)
    role: str = Field(index=True, description="Human-readable role name")
    slug: str = Field(index=True, unique=True, description="Role slug used by admin requests")
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"Role(id={self.id}, role={self.role})"


class Profile(Base, table=True):
    """Application profile of an authenticated user.

    Table: profiles
    """

    __tablename__ = "profiles"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    email: Optional[str] = Field(default=None, index=True)
    display_name: Optional[str] = Field(default=None)
    full_name: Optional[str] = Field(default=None)
    avatar_url: Optional[str] = Field(default=None)
    role: str = Field(default="user0x", index=True, description="Role identifier, see roles.id")

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Profile(id={self.id}, email={self.email}, role={self.role})"


class RolePermission(Base, table=True):
    """Permission grant attached to a role or to a single user.

    Rows with ``permission_type == "role_based"`` and no ``user_id`` apply to
    every holder of ``role_id``. Rows with a ``user_id`` apply to that user only.

    Table: role_permissions
    """

    __tablename__ = "role_permissions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    role_id: Optional[str] = Field(default=None, index=True)
    user_id: Optional[str] = Field(default=None, foreign_key="profiles.id", index=True)
    permission_type: str = Field(default="role_based", description="role_based or user")
    permission_level: str = Field(default="view", description="Coarse level, 'admin' grants everything")
    specific_actions: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Specialization(Base, table=True):
    """Table: specializations"""

    __tablename__ = "specializations"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: Optional[str] = Field(default=None)
    role: Optional[str] = Field(default=None, index=True, description="Role name the specialization belongs to")
    color: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class UserSpecialization(Base, table=True):
    """Table: user_specializations"""

    __tablename__ = "user_specializations"
    __table_args__ = (
        UniqueConstraint("user_id", "specialization_id", name="uq_user_specialization"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)
    specialization_id: str = Field(foreign_key="specializations.id", index=True)
    assigned_by: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Invite(Base, table=True):
    """Single-use sign-up invitation carrying a role.

    Table: invites
    """

    __tablename__ = "invites"
    __table_args__ = ({"extend_existing": True},)

    code: str = Field(default_factory=new_id, primary_key=True)
    role_id: str = Field(foreign_key="roles.id", index=True)
    inviter_id: Optional[str] = Field(default=None, foreign_key="profiles.id")
    max_uses: Optional[int] = Field(default=1)
    expires_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)


class InviteSpecialization(Base, table=True):
    """Table: invite_specializations"""

    __tablename__ = "invite_specializations"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    invite_code: str = Field(foreign_key="invites.code", index=True)
    specialization_id: str = Field(foreign_key="specializations.id")
    created_by: Optional[str] = Field(default=None)
