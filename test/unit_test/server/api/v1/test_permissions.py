from httpx import AsyncClient

from orgdesk.core.database.entities import RolePermission
from orgdesk.core.models.domain.enums import RoleId


async def test_requires_authentication(client: AsyncClient):
    response = await client.get("/api/v1/permissions/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


async def test_unknown_user_is_unauthorized(client: AsyncClient, users):
    response = await client.get("/api/v1/permissions/me", headers={"X-User-Id": "ghost"})
    assert response.status_code == 401


async def test_permissions_from_role_grants(client: AsyncClient, session, as_user):
    session.add(
        RolePermission(
            role_id=RoleId.COACH.value,
            permission_level="view",
            specific_actions=["log_hours", "export_data", "sls_create"],
        )
    )
    await session.commit()

    response = await client.get("/api/v1/permissions/me", headers=as_user("coach"))

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "database"
    assert data["role"] == "coachx7"
    assert data["roleName"] == "jobcoach"
    assert data["canLogHours"] is True
    assert data["canCreateSLS"] is True
    assert data["canManageUsers"] is False


async def test_admin_level_grants_everything(client: AsyncClient, session, as_user):
    session.add(RolePermission(role_id=RoleId.ADMIN.value, permission_level="admin"))
    await session.commit()

    data = (await client.get("/api/v1/permissions/me", headers=as_user("admin"))).json()

    assert data["roleName"] == "admin"
    assert all(data[flag] for flag in ("canCreateEvents", "canManageUsers", "canManageCalendar"))


async def test_session_cookie_identifies_caller(client: AsyncClient, users):
    client.cookies.set("orgdesk-session", "client-1")
    try:
        response = await client.get("/api/v1/permissions/me")
    finally:
        client.cookies.clear()

    assert response.status_code == 200
    assert response.json()["role"] == "client7x"


async def test_fallback_table(client: AsyncClient):
    coach = (await client.get("/api/v1/permissions/fallback/coachx7")).json()
    unknown = (await client.get("/api/v1/permissions/fallback/nobody")).json()

    assert coach["canLogHours"] is True
    assert coach["canExportData"] is True
    assert coach["canCreateEvents"] is False
    assert not any(unknown.values())
