"""Unit tests for profile, role and invite repositories.

Repositories run against an in-memory SQLite database seeded with the four
built-in roles and one profile per role.
"""

from __future__ import annotations

from datetime import timedelta

from orgdesk.core.database.base import utc_now
from orgdesk.core.database.entities import Invite, RolePermission, Specialization, UserSpecialization
from orgdesk.core.database.repositories import (
    InviteRepository,
    ProfileRepository,
    RolePermissionRepository,
    RoleRepository,
    SpecializationRepository,
)
from orgdesk.core.models.domain.enums import RoleId


class TestProfileRepository:
    async def test_get_many_skips_missing_and_none(self, in_memory_session, sample_profiles):
        repo = ProfileRepository(in_memory_session)

        profiles = await repo.get_many(["admin-1", None, "missing", "admin-1", "coach-1"])

        assert set(profiles) == {"admin-1", "coach-1"}

    async def test_get_many_empty(self, in_memory_session, sample_profiles):
        assert await ProfileRepository(in_memory_session).get_many([]) == {}

    async def test_set_role(self, in_memory_session, sample_profiles):
        repo = ProfileRepository(in_memory_session)
        profile = sample_profiles["user"]

        await repo.set_role(profile, RoleId.CLIENT.value)

        stored = await repo.get_by_id("user-1")
        assert stored.role == RoleId.CLIENT.value


class TestRoleRepository:
    async def test_resolve_by_slug_id_and_name(self, in_memory_session, sample_profiles):
        repo = RoleRepository(in_memory_session)

        assert (await repo.resolve("jobcoach")).id == RoleId.COACH.value
        assert (await repo.resolve("client7x")).role == "client"
        assert await repo.resolve("nobody") is None

    async def test_list_all_ordered_by_id(self, in_memory_session, sample_profiles):
        roles = await RoleRepository(in_memory_session).list_all()

        assert [r.id for r in roles] == sorted(r.value for r in RoleId)


class TestRolePermissionRepository:
    async def test_user_permissions_combine_role_and_user_rows(self, in_memory_session, sample_profiles):
        in_memory_session.add_all(
            [
                RolePermission(role_id=RoleId.COACH.value, specific_actions=["log_hours"]),
                RolePermission(
                    role_id=RoleId.COACH.value,
                    user_id="coach-1",
                    permission_type="user",
                    specific_actions=["create_events"],
                ),
                RolePermission(role_id=RoleId.COACH.value, specific_actions=["export_data"], is_active=False),
                RolePermission(role_id=RoleId.CLIENT.value, specific_actions=["export_data"]),
            ]
        )
        await in_memory_session.commit()

        rows = await RolePermissionRepository(in_memory_session).get_user_permissions("coach-1", RoleId.COACH.value)

        actions = sorted(a for row in rows for a in row.specific_actions)
        assert actions == ["create_events", "log_hours"]

    async def test_list_role_based_ignores_user_rows(self, in_memory_session, sample_profiles):
        in_memory_session.add_all(
            [
                RolePermission(role_id=RoleId.COACH.value, specific_actions=["log_hours"]),
                RolePermission(role_id=RoleId.COACH.value, user_id="coach-1", permission_type="user"),
            ]
        )
        await in_memory_session.commit()

        rows = await RolePermissionRepository(in_memory_session).list_role_based(RoleId.COACH.value)

        assert len(rows) == 1
        assert rows[0].specific_actions == ["log_hours"]


class TestSpecializationRepository:
    async def test_list_for_role_and_user(self, in_memory_session, sample_profiles):
        in_memory_session.add_all(
            [
                Specialization(id="spec-b", name="Budgeting", role="client"),
                Specialization(id="spec-a", name="Autism support", role="client"),
                Specialization(id="spec-c", name="Job hunting", role="jobcoach"),
                UserSpecialization(user_id="client-1", specialization_id="spec-b"),
            ]
        )
        await in_memory_session.commit()
        repo = SpecializationRepository(in_memory_session)

        for_role = await repo.list_for_role("client")
        for_user = await repo.list_for_user("client-1")

        assert [s.name for s in for_role] == ["Autism support", "Budgeting"]
        assert [s.id for s in for_user] == ["spec-b"]


class TestInviteRepository:
    async def test_apply_sets_role_assigns_specializations_and_consumes_invite(
        self, in_memory_session, sample_profiles
    ):
        in_memory_session.add_all(
            [
                Specialization(id="spec-1", name="Budgeting", role="client"),
                Specialization(id="spec-2", name="Housing", role="client"),
                UserSpecialization(user_id="user-1", specialization_id="spec-2"),
            ]
        )
        await in_memory_session.commit()
        repo = InviteRepository(in_memory_session)
        invite = await repo.create_with_specializations(
            Invite(role_id=RoleId.CLIENT.value, inviter_id="admin-1"), ["spec-1", "spec-2"]
        )
        code = invite.code

        assigned = await repo.apply(invite, sample_profiles["user"])

        assert assigned == ["spec-1"]
        assert sample_profiles["user"].role == RoleId.CLIENT.value
        assert await repo.get_by_id(code) is None
        user_specs = await SpecializationRepository(in_memory_session).list_for_user("user-1")
        assert {s.id for s in user_specs} == {"spec-1", "spec-2"}

    async def test_list_with_roles(self, in_memory_session, sample_profiles):
        repo = InviteRepository(in_memory_session)
        await repo.create_with_specializations(Invite(role_id=RoleId.COACH.value))

        rows = await repo.list_with_roles()

        assert len(rows) == 1
        invite, role = rows[0]
        assert role.role == "jobcoach"

    async def test_delete_invite(self, in_memory_session, sample_profiles):
        repo = InviteRepository(in_memory_session)
        invite = await repo.create_with_specializations(Invite(role_id=RoleId.COACH.value))

        assert await repo.delete_invite(invite.code) is True
        assert await repo.delete_invite(invite.code) is False

    def test_is_expired(self):
        now = utc_now()

        assert InviteRepository.is_expired(Invite(role_id="client7x", expires_at=now - timedelta(minutes=1)))
        assert not InviteRepository.is_expired(Invite(role_id="client7x", expires_at=now + timedelta(days=1)))
        assert not InviteRepository.is_expired(Invite(role_id="client7x"))
