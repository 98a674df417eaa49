"""
Profile, role and invite repositories.

This module provides data access for user profiles, the role catalogue,
role permission grants, specializations and sign-up invites.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.profiles import (
    Invite,
    InviteSpecialization,
    Profile,
    Role,
    RolePermission,
    Specialization,
    UserSpecialization,
)
from .base import SQLModelRepository


class ProfileRepository(SQLModelRepository[Profile]):
    """Repository for user profiles."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Profile)

    async def get_many(self, profile_ids: Iterable[Optional[str]]) -> Dict[str, Profile]:
        """Load several profiles at once.

        Args:
            profile_ids: Profile IDs; ``None`` entries and duplicates are ignored

        Returns:
            Mapping of profile ID to Profile for every ID that exists
        """
        ids = {pid for pid in profile_ids if pid}
        if not ids:
            return {}
        result = await self.session.execute(select(Profile).where(Profile.id.in_(ids)))
        return {p.id: p for p in result.scalars().all()}

    async def set_role(self, profile: Profile, role_id: str) -> Profile:
        profile.role = role_id
        profile.updated_at = utc_now()
        return await self.update(profile)


class RoleRepository(SQLModelRepository[Role]):
    """Repository for the role catalogue."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Role)

    async def get_by_slug(self, slug: str) -> Optional[Role]:
        result = await self.session.execute(select(Role).where(Role.slug == slug))
        return result.scalars().first()

    async def get_by_name(self, name: str) -> Optional[Role]:
        result = await self.session.execute(select(Role).where(Role.role == name))
        return result.scalars().first()

    async def resolve(self, value: str) -> Optional[Role]:
        """Find a role by slug, then by ID, then by human-readable name."""
        return await self.get_by_slug(value) or await self.get_by_id(value) or await self.get_by_name(value)

    async def list_all(self) -> List[Role]:
        result = await self.session.execute(select(Role).order_by(Role.id))
        return list(result.scalars().all())


class RolePermissionRepository(SQLModelRepository[RolePermission]):
    """Repository for role and user permission grants."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, RolePermission)

    async def get_user_permissions(self, user_id: str, role_id: str) -> List[RolePermission]:
        """Active grants that apply to a user, directly or through their role.

        Args:
            user_id: Profile ID of the user
            role_id: Role identifier currently held by the user

        Returns:
            Matching active RolePermission rows
        """
        stmt = select(RolePermission).where(
            RolePermission.is_active == True,  # noqa: E712
            or_(
                RolePermission.user_id == user_id,
                (RolePermission.role_id == role_id) & (RolePermission.user_id == None),  # noqa: E711
            ),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_role_based(self, role_id: str) -> List[RolePermission]:
        """Active ``role_based`` grants for a role, ignoring user-specific rows."""
        stmt = select(RolePermission).where(
            RolePermission.role_id == role_id,
            RolePermission.permission_type == "role_based",
            RolePermission.is_active == True,  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SpecializationRepository(SQLModelRepository[Specialization]):
    """Repository for specializations and their assignment to users."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Specialization)

    async def list_for_role(self, role_name: str) -> List[Specialization]:
        result = await self.session.execute(
            select(Specialization).where(Specialization.role == role_name).order_by(Specialization.name)
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: str) -> List[Specialization]:
        stmt = (
            select(Specialization)
            .join(UserSpecialization, UserSpecialization.specialization_id == Specialization.id)
            .where(UserSpecialization.user_id == user_id)
            .order_by(Specialization.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self) -> List[Specialization]:
        return await self.list(order_by=Specialization.name)

    async def count_assignments(self, specialization_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(UserSpecialization)
            .where(UserSpecialization.specialization_id == specialization_id)
        )
        return result.scalar_one()

    async def assigned_user_ids(self, specialization_id: str) -> List[str]:
        result = await self.session.execute(
            select(UserSpecialization.user_id).where(UserSpecialization.specialization_id == specialization_id)
        )
        return list(result.scalars().all())

    async def is_assigned(self, user_id: str, specialization_id: str) -> bool:
        result = await self.session.execute(
            select(UserSpecialization.id).where(
                UserSpecialization.user_id == user_id,
                UserSpecialization.specialization_id == specialization_id,
            )
        )
        return result.first() is not None

    async def assign(self, specialization_id: str, user_ids: Iterable[str], assigned_by: str) -> int:
        """Assign a specialization to users, skipping existing assignments; returns how many were added."""
        existing = set(await self.assigned_user_ids(specialization_id))
        added = 0
        for user_id in dict.fromkeys(user_ids):
            if user_id in existing:
                continue
            self.session.add(
                UserSpecialization(user_id=user_id, specialization_id=specialization_id, assigned_by=assigned_by)
            )
            added += 1
        await self.session.commit()
        return added

    async def unassign(self, specialization_id: str, user_id: str) -> int:
        result = await self.session.execute(
            delete(UserSpecialization).where(
                UserSpecialization.specialization_id == specialization_id,
                UserSpecialization.user_id == user_id,
            )
        )
        await self.session.commit()
        return result.rowcount

    async def members(self, specialization_id: str) -> List[Profile]:
        stmt = (
            select(Profile)
            .join(UserSpecialization, UserSpecialization.user_id == Profile.id)
            .where(UserSpecialization.specialization_id == specialization_id)
            .order_by(Profile.display_name, Profile.email)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_specialization(self, specialization_id: str) -> bool:
        """Delete a specialization and drop it from pending invites."""
        specialization = await self.get_by_id(specialization_id)
        if specialization is None:
            return False
        await self.session.execute(
            delete(InviteSpecialization).where(InviteSpecialization.specialization_id == specialization_id)
        )
        await self.session.delete(specialization)
        await self.session.commit()
        return True


class InviteRepository(SQLModelRepository[Invite]):
    """Repository for sign-up invites."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Invite)

    async def create_with_specializations(
        self, invite: Invite, specialization_ids: Sequence[str] = ()
    ) -> Invite:
        self.session.add(invite)
        for spec_id in specialization_ids:
            self.session.add(
                InviteSpecialization(
                    invite_code=invite.code,
                    specialization_id=spec_id,
                    created_by=invite.inviter_id,
                )
            )
        await self.session.commit()
        await self.session.refresh(invite)
        return invite

    async def list_with_roles(self) -> List[tuple[Invite, Optional[Role]]]:
        stmt = (
            select(Invite, Role)
            .join(Role, Role.id == Invite.role_id, isouter=True)
            .order_by(Invite.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [(invite, role) for invite, role in result.all()]

    async def delete_invite(self, code: str) -> bool:
        invite = await self.get_by_id(code)
        if invite is None:
            return False
        await self.session.execute(delete(InviteSpecialization).where(InviteSpecialization.invite_code == code))
        await self.session.delete(invite)
        await self.session.commit()
        return True

    async def apply(self, invite: Invite, profile: Profile) -> List[str]:
        """Consume an invite for a profile.

        Sets the profile's role, copies the invite's specializations onto the
        user and deletes the invite, all in one commit.

        Returns:
            IDs of the specializations assigned to the user
        """
        result = await self.session.execute(
            select(InviteSpecialization).where(InviteSpecialization.invite_code == invite.code)
        )
        invite_specs = list(result.scalars().all())

        existing = await self.session.execute(
            select(UserSpecialization.specialization_id).where(UserSpecialization.user_id == profile.id)
        )
        already_assigned = set(existing.scalars().all())

        assigned: List[str] = []
        for spec in invite_specs:
            if spec.specialization_id in already_assigned:
                continue
            self.session.add(
                UserSpecialization(
                    user_id=profile.id,
                    specialization_id=spec.specialization_id,
                    assigned_by=spec.created_by,
                )
            )
            assigned.append(spec.specialization_id)

        profile.role = invite.role_id
        profile.updated_at = utc_now()
        self.session.add(profile)

        await self.session.execute(
            delete(InviteSpecialization).where(InviteSpecialization.invite_code == invite.code)
        )
        await self.session.delete(invite)
        await self.session.commit()
        return assigned

    @staticmethod
    def is_expired(invite: Invite, now: Optional[datetime] = None) -> bool:
        return invite.expires_at is not None and invite.expires_at <= (now or utc_now())
