"""Unit tests for server services dependencies.

Tests verify the annotated dependencies, the app-wide singletons and the
caller resolution used by every authenticated endpoint.
"""

import pytest

from orgdesk.calendar import OptimisticHourLedger
from orgdesk.core.cache import TTLStorage
from orgdesk.core.database import get_session
from orgdesk.core.errors import ForbiddenError, UnauthorizedError
from orgdesk.core.models.domain.enums import RoleId
from orgdesk.server.services import deps
from orgdesk.server.services.deps import (
    CacheDep,
    SessionDep,
    get_cache,
    get_current_user,
    get_ledger,
    require_role,
    role_of,
)


class TestAnnotatedDependencies:
    def test_session_dep_uses_get_session(self):
        assert SessionDep.__metadata__[0].dependency is get_session

    def test_cache_dep_uses_get_cache(self):
        assert CacheDep.__metadata__[0].dependency is get_cache


class TestSingletons:
    def test_cache_is_shared(self, monkeypatch):
        monkeypatch.setattr(deps, "_cache", None)

        assert isinstance(get_cache(), TTLStorage)
        assert get_cache() is get_cache()

    def test_ledger_is_shared(self, monkeypatch):
        monkeypatch.setattr(deps, "_ledger", None)

        assert isinstance(get_ledger(), OptimisticHourLedger)
        assert get_ledger() is get_ledger()


class TestGetCurrentUser:
    async def test_header_identifies_user(self, session, users):
        profile = await get_current_user(session, x_user_id="coach-1", orgdesk_session=None)

        assert profile.id == "coach-1"

    async def test_cookie_used_without_header(self, session, users):
        profile = await get_current_user(session, x_user_id=None, orgdesk_session="client-1")

        assert profile.id == "client-1"

    async def test_header_wins_over_cookie(self, session, users):
        profile = await get_current_user(session, x_user_id="admin-1", orgdesk_session="client-1")

        assert profile.id == "admin-1"

    async def test_missing_identity(self, session):
        with pytest.raises(UnauthorizedError):
            await get_current_user(session, x_user_id=None, orgdesk_session=None)

    async def test_unknown_profile(self, session, users):
        with pytest.raises(UnauthorizedError):
            await get_current_user(session, x_user_id="ghost", orgdesk_session=None)


class TestRoles:
    def test_role_of_normalizes_unknown_roles(self, users):
        users["user"].role = "something-else"

        assert role_of(users["user"]) is RoleId.USER
        assert role_of(users["coach"]) is RoleId.COACH

    def test_require_role(self, users):
        assert require_role(users["admin"], RoleId.ADMIN) is RoleId.ADMIN

        with pytest.raises(ForbiddenError, match="Admins only"):
            require_role(users["client"], RoleId.ADMIN, RoleId.COACH, message="Admins only")
