"""Unit tests for calendar repositories."""

from __future__ import annotations

from datetime import date

import pytest_asyncio

from orgdesk.core.database.entities import CalendarEvent, CoachDailyReport, EventType, WorkLocation
from orgdesk.core.database.repositories import (
    CalendarEventRepository,
    CoachReportRepository,
    EventTypeRepository,
    WorkLocationRepository,
)


@pytest_asyncio.fixture
async def meeting_type(in_memory_session, sample_profiles) -> EventType:
    return await EventTypeRepository(in_memory_session).create(
        EventType(name="Meeting", color="#3B82F6", visible_to_coaches=True)
    )


def _event(title: str, day: date, start: str = "09:00", **kwargs) -> CalendarEvent:
    return CalendarEvent(
        title=title,
        event_date=day,
        start_time=start,
        end_time="10:00",
        created_by_id="admin-1",
        **kwargs,
    )


class TestEventTypeRepository:
    async def test_list_active_and_lookup(self, in_memory_session, meeting_type):
        repo = EventTypeRepository(in_memory_session)
        await repo.create(EventType(name="Archived", is_active=False))

        active = await repo.list_active()

        assert [et.name for et in active] == ["Meeting"]
        assert (await repo.get_by_name("Meeting")).id == meeting_type.id
        assert set((await repo.get_map()).keys()) == {meeting_type.id, (await repo.get_by_name("Archived")).id}


class TestCalendarEventRepository:
    async def test_list_range_is_inclusive_and_ordered(self, in_memory_session, meeting_type):
        repo = CalendarEventRepository(in_memory_session)
        await repo.create(_event("Late", date(2026, 3, 2), "14:00", event_type_id=meeting_type.id))
        await repo.create(_event("Early", date(2026, 3, 2), "08:00"))
        await repo.create(_event("First", date(2026, 3, 1)))
        await repo.create(_event("Outside", date(2026, 3, 5)))

        rows = await repo.list_range(date(2026, 3, 1), date(2026, 3, 2))

        assert [event.title for event, _ in rows] == ["First", "Early", "Late"]
        types = {event.title: event_type for event, event_type in rows}
        assert types["Early"] is None
        assert types["Late"].name == "Meeting"

    async def test_list_sls_filters(self, in_memory_session, meeting_type):
        repo = CalendarEventRepository(in_memory_session)
        await repo.create(_event("SLS: Cleo", date(2026, 3, 1), client_id="client-1", coach_id="coach-1"))
        await repo.create(_event("SLS: Other", date(2026, 3, 9), client_id="client-1"))
        await repo.create(_event("Team sync", date(2026, 3, 1), client_id="client-1"))

        assert len(await repo.list_sls()) == 2
        assert [e.title for e in await repo.list_sls(coach_id="coach-1")] == ["SLS: Cleo"]
        assert [e.title for e in await repo.list_sls(client_id="client-1", start_date=date(2026, 3, 5))] == [
            "SLS: Other"
        ]

    async def test_count_by_type_groups_untyped(self, in_memory_session, meeting_type):
        repo = CalendarEventRepository(in_memory_session)
        await repo.create(_event("A", date(2026, 3, 1), event_type_id=meeting_type.id))
        await repo.create(_event("B", date(2026, 3, 2), event_type_id=meeting_type.id))
        await repo.create(_event("C", date(2026, 3, 3)))
        await repo.create(_event("Old", date(2025, 1, 1), event_type_id=meeting_type.id))

        counts = await repo.count_by_type(date(2026, 1, 1))

        assert counts == [("Meeting", 2), (None, 1)]


class TestCoachReportRepository:
    async def test_total_and_range_with_location(self, in_memory_session, sample_profiles):
        location = await WorkLocationRepository(in_memory_session).create(
            WorkLocation(location_name="Main office", city="Oslo")
        )
        repo = CoachReportRepository(in_memory_session)
        await repo.create(
            CoachDailyReport(
                coach_id="coach-1",
                report_date=date(2026, 3, 2),
                hours_worked=6.5,
                activity_type="coaching",
                work_location_id=location.id,
            )
        )
        await repo.create(
            CoachDailyReport(coach_id="admin-1", report_date=date(2026, 3, 1), hours_worked=2, activity_type="admin")
        )

        assert await repo.total_for_day("coach-1", date(2026, 3, 2)) == 6.5
        assert await repo.total_for_day("coach-1", date(2026, 3, 3)) == 0.0
        assert (await repo.get_for_day("coach-1", date(2026, 3, 2))).hours_worked == 6.5

        everyone = await repo.list_range(date(2026, 3, 1), date(2026, 3, 31))
        own = await repo.list_range(date(2026, 3, 1), date(2026, 3, 31), coach_id="coach-1")

        assert [report.coach_id for report, _ in everyone] == ["admin-1", "coach-1"]
        assert len(own) == 1
        assert own[0][1].label == "Main office, Oslo"

    async def test_work_locations_active_only(self, in_memory_session):
        repo = WorkLocationRepository(in_memory_session)
        await repo.create(WorkLocation(location_name="Closed", is_active=False))
        await repo.create(WorkLocation(location_name="Annex"))

        assert [loc.location_name for loc in await repo.list_active()] == ["Annex"]
