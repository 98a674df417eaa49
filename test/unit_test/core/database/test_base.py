"""Unit tests for the shared database helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from orgdesk.core.database.base import as_utc, utc_now
from orgdesk.core.database.entities import Invite, Notification


class TestUtcNow:
    def test_is_timezone_aware(self):
        assert utc_now().tzinfo == timezone.utc


class TestAsUtc:
    def test_none_passes_through(self):
        assert as_utc(None) is None

    def test_naive_is_taken_as_utc(self):
        assert as_utc(datetime(2026, 10, 19, 12, 0)) == datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def test_offset_is_converted(self):
        amsterdam = timezone(timedelta(hours=2))

        converted = as_utc(datetime(2026, 10, 19, 14, 0, tzinfo=amsterdam))

        assert converted == datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        assert converted.tzinfo == timezone.utc


class TestUTCDateTimeColumn:
    async def test_timestamps_read_back_as_aware_utc(self, in_memory_session, sample_profiles):
        notification = Notification(receiver_id="coach-1", title="Hello")
        in_memory_session.add(notification)
        await in_memory_session.commit()
        in_memory_session.expunge_all()

        stored = await in_memory_session.get(Notification, notification.id)

        assert stored.created_at.tzinfo == timezone.utc
        assert abs(utc_now() - stored.created_at) < timedelta(minutes=1)

    async def test_naive_and_offset_values_are_stored_as_utc(self, in_memory_session, sample_profiles):
        amsterdam = timezone(timedelta(hours=2))
        invite = Invite(role_id="client7x", inviter_id="admin-1", expires_at=datetime(2026, 10, 19, 14, 0, tzinfo=amsterdam))
        naive = Notification(receiver_id="coach-1", title="Naive", created_at=datetime(2026, 10, 19, 9, 30))
        in_memory_session.add_all([invite, naive])
        await in_memory_session.commit()
        in_memory_session.expunge_all()

        stored_invite = await in_memory_session.get(Invite, invite.code)
        stored_naive = await in_memory_session.get(Notification, naive.id)

        assert stored_invite.expires_at == datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        assert stored_naive.created_at == datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
