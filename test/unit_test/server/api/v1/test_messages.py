from datetime import timedelta
from unittest.mock import AsyncMock, patch

from httpx import AsyncClient
from sqlalchemy import func
from sqlmodel import select

from orgdesk.core.database.base import utc_now
from orgdesk.core.database.entities import Message, Notification
from orgdesk.core.errors import ServiceUnavailableError

BASE = "/api/v1/messages"


async def _start_dm(client: AsyncClient, headers, other_id: str) -> str:
    response = await client.post(f"{BASE}/start-dm", json={"userIds": [other_id]}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["channelId"]


class TestStartConversations:
    async def test_start_dm_creates_then_reuses(self, client: AsyncClient, as_user):
        first = await client.post(f"{BASE}/start-dm", json={"userIds": ["client-1"]}, headers=as_user("admin"))
        second = await client.post(f"{BASE}/start-dm", json={"userIds": ["admin-1"]}, headers=as_user("client"))

        assert first.json()["isExisting"] is False
        assert first.json()["message"] == "Conversation created"
        assert second.json() == {
            "channelId": first.json()["channelId"],
            "isExisting": True,
            "message": "Existing conversation found",
        }

    async def test_start_dm_validation(self, client: AsyncClient, as_user):
        not_list = await client.post(f"{BASE}/start-dm", json={"userIds": "client-1"}, headers=as_user("admin"))
        only_self = await client.post(f"{BASE}/start-dm", json={"userIds": ["admin-1"]}, headers=as_user("admin"))
        too_many = await client.post(
            f"{BASE}/start-dm", json={"userIds": ["client-1", "coach-1"]}, headers=as_user("admin")
        )
        unknown = await client.post(f"{BASE}/start-dm", json={"userIds": ["ghost"]}, headers=as_user("admin"))

        assert not_list.json() == {"error": "userIds must be a list"}
        assert only_self.json() == {"error": "Direct messages need exactly one other user"}
        assert too_many.status_code == 400
        assert unknown.status_code == 404
        assert unknown.json() == {"error": "User ghost not found"}

    async def test_start_group_reuses_same_members(self, client: AsyncClient, as_user):
        body = {"name": "Team", "participantIds": ["coach-1", "client-1", "coach-1"]}
        first = await client.post(f"{BASE}/start-group", json=body, headers=as_user("admin"))
        second = await client.post(f"{BASE}/start-group", json=body, headers=as_user("admin"))
        other = await client.post(
            f"{BASE}/start-group", json={"name": "Team", "participantIds": ["coach-1"]}, headers=as_user("admin")
        )

        assert first.json()["isExisting"] is False
        assert second.json() == {"channelId": first.json()["channelId"], "isExisting": True}
        assert other.json()["channelId"] != first.json()["channelId"]

    async def test_start_group_validation(self, client: AsyncClient, as_user):
        no_name = await client.post(f"{BASE}/start-group", json={"participantIds": []}, headers=as_user("admin"))
        bad_ids = await client.post(
            f"{BASE}/start-group", json={"name": "Team", "participantIds": "coach-1"}, headers=as_user("admin")
        )

        assert no_name.json() == {"error": "Group name is required"}
        assert bad_ids.json() == {"error": "participantIds must be a list"}


class TestSendMessages:
    async def test_send_creates_notification(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("admin"), "client-1")

        response = await client.post(
            f"{BASE}/send", json={"channel_id": channel_id, "content": "Hello there"}, headers=as_user("admin")
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        feed = await client.get("/api/v1/notifications", headers=as_user("client"))
        assert [(n["title"], n["subtitle"], n["action_url"]) for n in feed.json()] == [
            ("Ada sent you a message", "Hello there", f"/messages/{channel_id}")
        ]
        own = await client.get("/api/v1/notifications", headers=as_user("admin"))
        assert own.json() == []

    async def test_repeated_messages_stack(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("admin"), "client-1")
        for text in ("one", "two", "three"):
            await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": text}, headers=as_user("admin"))

        feed = await client.get("/api/v1/notifications", headers=as_user("client"))

        assert len(feed.json()) == 1
        assert feed.json()[0]["title"] == "3 Ada sent you messages"
        assert feed.json()[0]["subtitle"] == "Latest: three"

    async def test_send_validation(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("admin"), "client-1")

        missing = await client.post(f"{BASE}/send", json={"channel_id": channel_id}, headers=as_user("admin"))
        outsider = await client.post(
            f"{BASE}/send", json={"channel_id": channel_id, "content": "hi"}, headers=as_user("coach")
        )
        unknown = await client.post(f"{BASE}/send", json={"channel_id": "nope", "content": "hi"}, headers=as_user("admin"))

        assert missing.json() == {"error": "channel_id and content are required"}
        assert outsider.status_code == 403
        assert outsider.json() == {"error": "You are not a participant in this conversation"}
        assert unknown.status_code == 404

    async def test_post_with_attachments_and_list(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("coach"), "client-1")

        posted = await client.post(
            f"{BASE}/{channel_id}",
            json={
                "content": "See attached",
                "attachments": [{"file_name": "cv.pdf", "storage_path": "chat/cv.pdf", "mime_type": "application/pdf"}],
            },
            headers=as_user("coach"),
        )
        await client.post(f"{BASE}/{channel_id}", json={"content": "Thanks"}, headers=as_user("client"))

        assert posted.status_code == 201
        assert posted.json()["attachments"][0]["file_name"] == "cv.pdf"

        listed = await client.get(f"{BASE}/{channel_id}", headers=as_user("client"))
        messages = listed.json()
        assert [m["content"] for m in messages] == ["See attached", "Thanks"]
        assert [a["storage_path"] for a in messages[0]["attachments"]] == ["chat/cv.pdf"]
        assert messages[1]["attachments"] == []

    async def test_post_requires_content_or_attachments(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("coach"), "client-1")

        response = await client.post(f"{BASE}/{channel_id}", json={}, headers=as_user("coach"))

        assert response.status_code == 400
        assert response.json() == {"error": "Message content or attachments are required"}

    async def test_list_messages_sees_new_message_after_cache(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("coach"), "client-1")
        await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": "first"}, headers=as_user("coach"))
        await client.get(f"{BASE}/{channel_id}", headers=as_user("coach"))

        await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": "second"}, headers=as_user("coach"))
        listed = await client.get(f"{BASE}/{channel_id}", headers=as_user("coach"))

        assert [m["content"] for m in listed.json()] == ["first", "second"]


class TestConversations:
    async def test_conversations_show_other_participant(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("admin"), "client-1")
        await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": "one"}, headers=as_user("admin"))
        await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": "two"}, headers=as_user("admin"))

        response = await client.get(f"{BASE}/conversations", headers=as_user("client"))

        assert response.status_code == 200
        [conversation] = response.json()
        assert conversation["id"] == channel_id
        assert conversation["name"] == "Ada"
        assert conversation["participants"][0]["id"] == "admin-1"
        assert conversation["last_message"] == "two"
        assert conversation["unread_count"] == 1

    async def test_group_named_after_channel(self, client: AsyncClient, as_user):
        await client.post(
            f"{BASE}/start-group",
            json={"name": "Coaching", "participantIds": ["coach-1", "client-1"]},
            headers=as_user("admin"),
        )

        response = await client.get(f"{BASE}/conversations", headers=as_user("coach"))

        [conversation] = response.json()
        assert conversation["name"] == "Coaching"
        assert sorted(p["id"] for p in conversation["participants"]) == ["admin-1", "client-1"]
        assert conversation["last_message"] is None

    async def test_new_conversation_invalidates_cached_list(self, client: AsyncClient, as_user):
        first = await client.get(f"{BASE}/conversations", headers=as_user("client"))
        await _start_dm(client, as_user("admin"), "client-1")
        second = await client.get(f"{BASE}/conversations", headers=as_user("client"))

        assert first.json() == []
        assert len(second.json()) == 1


class TestDeleteConversation:
    async def test_delete_removes_channel_and_attachments(self, client: AsyncClient, as_user, storage):
        channel_id = await _start_dm(client, as_user("coach"), "client-1")
        await storage.upload("message-attachments", "chat/cv.pdf", b"pdf")
        await client.post(
            f"{BASE}/{channel_id}",
            json={"content": "cv", "attachments": [{"file_name": "cv.pdf", "storage_path": "chat/cv.pdf"}]},
            headers=as_user("coach"),
        )

        response = await client.delete(f"{BASE}/{channel_id}", headers=as_user("client"))

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Conversation deleted successfully",
            "channelId": channel_id,
            "channelName": None,
        }
        assert not (storage.root / "message-attachments" / "chat" / "cv.pdf").exists()
        gone = await client.get(f"{BASE}/{channel_id}", headers=as_user("client"))
        assert gone.status_code == 404

    async def test_missing_attachment_file_does_not_fail(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("coach"), "client-1")
        await client.post(
            f"{BASE}/{channel_id}",
            json={"attachments": [{"file_name": "gone.png", "storage_path": "chat/gone.png"}]},
            headers=as_user("coach"),
        )

        response = await client.delete(f"{BASE}/{channel_id}", headers=as_user("coach"))

        assert response.status_code == 200

    async def test_outsider_cannot_delete(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("coach"), "client-1")

        response = await client.delete(f"{BASE}/{channel_id}", headers=as_user("client2"))

        assert response.status_code == 403


async def _count(session, entity) -> int:
    return (await session.execute(select(func.count()).select_from(entity))).scalar_one()


class TestGroupMessaging:
    async def test_one_message_row_and_one_notification_per_recipient(self, client: AsyncClient, as_user, session):
        group = await client.post(
            f"{BASE}/start-group",
            json={"name": "Team", "participantIds": ["coach-1", "client-1"]},
            headers=as_user("admin"),
        )
        channel_id = group.json()["channelId"]

        response = await client.post(
            f"{BASE}/send", json={"channel_id": channel_id, "content": "Morning all"}, headers=as_user("admin")
        )

        assert response.status_code == 200
        assert await _count(session, Message) == 1
        rows = (await session.execute(select(Notification))).scalars().all()
        assert sorted(n.receiver_id for n in rows) == ["client-1", "coach-1"]
        assert {n.title for n in rows} == {"Ada sent you a message"}

    async def test_message_after_window_creates_new_notification(self, client: AsyncClient, as_user, session):
        channel_id = await _start_dm(client, as_user("admin"), "client-1")
        await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": "one"}, headers=as_user("admin"))
        first = (await session.execute(select(Notification))).scalar_one()
        first.created_at = utc_now() - timedelta(minutes=6)
        session.add(first)
        await session.commit()

        await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": "two"}, headers=as_user("admin"))

        feed = await client.get("/api/v1/notifications", headers=as_user("client"))
        assert [(n["title"], n["subtitle"]) for n in feed.json()] == [
            ("Ada sent you a message", "two"),
            ("Ada sent you a message", "one"),
        ]


class TestMessageTransaction:
    async def test_failed_notification_leaves_no_message(self, client: AsyncClient, as_user, session):
        channel_id = await _start_dm(client, as_user("admin"), "client-1")

        with patch(
            "orgdesk.server.api.v1.messages.MessageNotifier.notify",
            new=AsyncMock(side_effect=ServiceUnavailableError("Notifications")),
        ):
            response = await client.post(
                f"{BASE}/send", json={"channel_id": channel_id, "content": "lost"}, headers=as_user("admin")
            )

        assert response.status_code == 503
        assert await _count(session, Message) == 0
        assert await _count(session, Notification) == 0


class TestUnreadCounts:
    async def test_mark_read_refreshes_cached_unread_count(self, client: AsyncClient, as_user):
        channel_id = await _start_dm(client, as_user("admin"), "client-1")
        await client.post(f"{BASE}/send", json={"channel_id": channel_id, "content": "hi"}, headers=as_user("admin"))
        before = await client.get(f"{BASE}/conversations", headers=as_user("client"))
        feed = await client.get("/api/v1/notifications", headers=as_user("client"))

        await client.post(
            "/api/v1/notifications/mark-read",
            json={"notificationIds": [n["id"] for n in feed.json()]},
            headers=as_user("client"),
        )
        after = await client.get(f"{BASE}/conversations", headers=as_user("client"))

        assert before.json()[0]["unread_count"] == 1
        assert after.json()[0]["unread_count"] == 0
