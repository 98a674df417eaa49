from httpx import AsyncClient

from orgdesk.core.database.entities import Profile, Specialization


async def test_admin_sets_role_by_slug(client: AsyncClient, session, as_user):
    response = await client.post(
        "/api/v1/profiles/set-role", json={"uuid": "user-1", "role": "jobcoach"}, headers=as_user("admin")
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "uuid": "user-1", "role": "coachx7"}
    assert (await session.get(Profile, "user-1")).role == "coachx7"


async def test_set_role_accepts_role_id(client: AsyncClient, as_user):
    response = await client.post(
        "/api/v1/profiles/set-role", json={"uuid": "user-1", "role": "client7x"}, headers=as_user("admin")
    )

    assert response.json()["role"] == "client7x"


async def test_set_role_requires_admin(client: AsyncClient, as_user):
    response = await client.post(
        "/api/v1/profiles/set-role", json={"uuid": "user-1", "role": "admin"}, headers=as_user("coach")
    )

    assert response.status_code == 403
    assert response.json() == {"error": "Only administrators can change roles"}


async def test_set_role_validation(client: AsyncClient, as_user):
    missing = await client.post("/api/v1/profiles/set-role", json={"uuid": "user-1"}, headers=as_user("admin"))
    unknown_role = await client.post(
        "/api/v1/profiles/set-role", json={"uuid": "user-1", "role": "wizard"}, headers=as_user("admin")
    )
    unknown_user = await client.post(
        "/api/v1/profiles/set-role", json={"uuid": "ghost", "role": "admin"}, headers=as_user("admin")
    )

    assert missing.status_code == 400
    assert unknown_role.status_code == 400
    assert unknown_role.json() == {"error": "Unknown role: wizard"}
    assert unknown_user.status_code == 404


async def test_role_label_with_specializations(client: AsyncClient, session, users):
    session.add_all(
        [
            Specialization(id="s-2", name="Retail", role="jobcoach"),
            Specialization(id="s-1", name="IT", role="jobcoach"),
            Specialization(id="s-3", name="Warehouse", role="client"),
        ]
    )
    await session.commit()

    response = await client.get("/api/v1/profiles/role-label", params={"role_id": "coachx7"})

    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "jobcoach"
    assert [s["name"] for s in data["specializations"]] == ["IT", "Retail"]


async def test_role_label_errors(client: AsyncClient, users):
    assert (await client.get("/api/v1/profiles/role-label")).status_code == 400
    assert (await client.get("/api/v1/profiles/role-label", params={"role_id": "nope"})).status_code == 404
