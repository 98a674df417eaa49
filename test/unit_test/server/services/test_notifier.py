"""Unit tests for chat message notifications."""

from datetime import timedelta

import pytest

from orgdesk.core.database.base import utc_now
from orgdesk.core.database.entities import Notification, Profile
from orgdesk.core.database.repositories import NotificationRepository
from orgdesk.server.services.notifier import MessageNotifier, display_name, preview, stacked_title


class TestFormatting:
    @pytest.mark.parametrize(
        "profile,expected",
        [
            (Profile(id="a", display_name="Ada", full_name="Ada Lovelace", email="ada@example.com"), "Ada"),
            (Profile(id="b", full_name="Carl Coach", email="carl@example.com"), "Carl Coach"),
            (Profile(id="c", email="cleo@example.com"), "cleo"),
            (Profile(id="d"), "Someone"),
            (None, "Someone"),
        ],
    )
    def test_display_name(self, profile, expected):
        assert display_name(profile) == expected

    def test_preview_truncates_long_content(self):
        assert preview("x" * 50) == "x" * 50
        assert preview("y" * 51) == "y" * 50 + "..."

    @pytest.mark.parametrize(
        "previous,expected",
        [
            ("Ada sent you a message", "2 Ada sent you messages"),
            ("2 Ada sent you messages", "3 Ada sent you messages"),
            ("12 Ada sent you messages", "13 Ada sent you messages"),
        ],
    )
    def test_stacked_title(self, previous, expected):
        assert stacked_title(previous, "Ada") == expected


class TestMessageNotifier:
    async def test_first_message_creates_notification(self, session, users):
        notifier = MessageNotifier(NotificationRepository(session))

        created = await notifier.notify(users["admin"], "c-1", "Hello there", ["admin-1", "coach-1", "client-1"])

        assert {n.receiver_id for n in created} == {"coach-1", "client-1"}
        first = created[0]
        assert first.title == "Ada sent you a message"
        assert first.subtitle == "Hello there"
        assert first.action_url == "/messages/c-1"
        assert first.read is False

    async def test_messages_within_window_stack(self, session, users):
        notifier = MessageNotifier(NotificationRepository(session))

        await notifier.notify(users["admin"], "c-1", "one", ["coach-1"])
        await notifier.notify(users["admin"], "c-1", "two", ["coach-1"])
        stacked = await notifier.notify(users["admin"], "c-1", "three", ["coach-1"])

        feed = await NotificationRepository(session).list_for_receiver("coach-1")
        assert len(feed) == 1
        assert stacked[0].title == "3 Ada sent you messages"
        assert stacked[0].subtitle == "Latest: three"

    async def test_stacking_marks_notification_unread(self, session, users):
        repo = NotificationRepository(session)
        notifier = MessageNotifier(repo)
        first = (await notifier.notify(users["admin"], "c-1", "one", ["coach-1"]))[0]
        await repo.mark_read([first.id], "coach-1")

        stacked = (await notifier.notify(users["admin"], "c-1", "two", ["coach-1"]))[0]

        assert stacked.id == first.id
        assert stacked.read is False

    async def test_old_notification_is_not_stacked(self, session, users):
        repo = NotificationRepository(session)
        old = await repo.create(
            Notification(
                sender_id="admin-1",
                receiver_id="coach-1",
                title="Ada sent you a message",
                created_at=utc_now() - timedelta(minutes=10),
            )
        )

        created = await MessageNotifier(repo).notify(users["admin"], "c-1", "later", ["coach-1"])

        assert created[0].id != old.id
        assert created[0].title == "Ada sent you a message"

    async def test_other_senders_do_not_stack(self, session, users):
        notifier = MessageNotifier(NotificationRepository(session))

        await notifier.notify(users["admin"], "c-1", "from Ada", ["client-1"])
        created = await notifier.notify(users["coach"], "c-2", "from Carl", ["client-1"])

        assert created[0].title == "Carl Coach sent you a message"
        assert len(await NotificationRepository(session).list_for_receiver("client-1")) == 2
