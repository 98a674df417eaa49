from httpx import AsyncClient

from orgdesk.server.core.config import settings

BASE = "/api/v1/notifications"


async def _notify(client: AsyncClient, headers, **body):
    payload = {"title": "Heads up", "subtitle": "Office closed Friday"}
    payload.update(body)
    return await client.post(BASE, json=payload, headers=headers)


class TestCreateNotification:
    async def test_direct_notification(self, client: AsyncClient, as_user):
        response = await _notify(client, as_user("admin"), receiverId="client-1", action_url="/calendar")

        assert response.status_code == 201
        body = response.json()
        assert body["receiver_id"] == "client-1"
        assert body["sender_id"] == "admin-1"
        assert body["read"] is False

    async def test_only_admins_create(self, client: AsyncClient, as_user):
        response = await _notify(client, as_user("coach"), receiverId="client-1")

        assert response.status_code == 403
        assert response.json() == {"error": "Only administrators can create notifications"}

    async def test_requires_title_and_target(self, client: AsyncClient, as_user):
        no_subtitle = await client.post(BASE, json={"title": "x", "receiverId": "client-1"}, headers=as_user("admin"))
        no_target = await _notify(client, as_user("admin"))
        unknown = await _notify(client, as_user("admin"), receiverId="ghost")

        assert no_subtitle.json() == {"error": "title and subtitle are required"}
        assert no_target.json() == {"error": "A receiverId or at least one role flag is required"}
        assert unknown.status_code == 404


class TestFeed:
    async def test_feed_combines_direct_and_role_broadcasts(self, client: AsyncClient, as_user):
        await _notify(client, as_user("admin"), title="For coaches", role_jobcoach=True)
        await _notify(client, as_user("admin"), title="For clients", role_client=True)
        await _notify(client, as_user("admin"), title="Just Carl", receiverId="coach-1")

        coach = await client.get(BASE, headers=as_user("coach"))
        client_feed = await client.get(BASE, headers=as_user("client"))

        assert coach.status_code == 200
        assert [n["title"] for n in coach.json()] == ["Just Carl", "For coaches"]
        assert [n["title"] for n in client_feed.json()] == ["For clients"]

    async def test_anonymous_users_get_anonymous_broadcasts(self, client: AsyncClient, as_user):
        await _notify(client, as_user("admin"), title="Welcome", role_anonymous=True)

        response = await client.get(BASE, headers=as_user("user"))

        assert [n["title"] for n in response.json()] == ["Welcome"]

    async def test_feed_requires_authentication(self, client: AsyncClient, users):
        response = await client.get(BASE)

        assert response.status_code == 401

    async def test_disabled_api_returns_503(self, client: AsyncClient, as_user, monkeypatch):
        monkeypatch.setattr(settings, "notifications_api_enabled", False)

        response = await client.get(BASE, headers=as_user("admin"))

        assert response.status_code == 503
        assert response.json() == {"error": "Notifications API is disabled"}


class TestMarkRead:
    async def test_marks_only_own_notifications(self, client: AsyncClient, as_user):
        mine = (await _notify(client, as_user("admin"), receiverId="client-1")).json()
        theirs = (await _notify(client, as_user("admin"), receiverId="client-2")).json()

        response = await client.post(
            f"{BASE}/mark-read",
            json={"notificationIds": [mine["id"], theirs["id"]]},
            headers=as_user("client"),
        )

        assert response.json() == {"success": True, "updated": 1}
        other = await client.get(BASE, headers=as_user("client2"))
        assert other.json()[0]["read"] is False

    async def test_ids_must_be_a_list(self, client: AsyncClient, as_user):
        response = await client.post(f"{BASE}/mark-read", json={"notificationIds": "abc"}, headers=as_user("client"))

        assert response.status_code == 400
        assert response.json() == {"error": "notificationIds must be a list"}


class TestUserNotifications:
    async def test_own_and_admin_access(self, client: AsyncClient, as_user):
        await _notify(client, as_user("admin"), receiverId="client-1")

        own = await client.get(f"{BASE}/user/client-1", headers=as_user("client"))
        admin = await client.get(f"{BASE}/user/client-1", headers=as_user("admin"))
        other = await client.get(f"{BASE}/user/client-1", headers=as_user("coach"))

        assert len(own.json()) == 1
        assert len(admin.json()) == 1
        assert other.status_code == 403
        assert other.json() == {"error": "You can only read your own notifications"}

    async def test_unknown_user(self, client: AsyncClient, as_user):
        response = await client.get(f"{BASE}/user/ghost", headers=as_user("admin"))

        assert response.status_code == 404
