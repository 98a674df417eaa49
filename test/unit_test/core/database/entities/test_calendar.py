"""Unit tests for calendar entity models."""

from __future__ import annotations

from datetime import date

from orgdesk.core.database.entities import CalendarEvent, CoachDailyReport, EventType, WorkLocation


class TestEventType:
    def test_visibility_defaults_to_admins_only(self):
        event_type = EventType(name="Internal")

        assert event_type.visible_to_admins is True
        assert event_type.visible_to_coaches is False
        assert event_type.visible_to_clients is False
        assert event_type.is_active is True


class TestCalendarEvent:
    def test_defaults(self):
        event = CalendarEvent(
            title="Intake",
            event_date=date(2026, 3, 2),
            start_time="09:00",
            end_time="10:00",
            created_by_id="admin-1",
        )

        assert event.status == "scheduled"
        assert event.priority == "medium"
        assert event.event_type_id is None

    def test_repr(self):
        event = CalendarEvent(
            id="ev-1",
            title="Intake",
            event_date=date(2026, 3, 2),
            start_time="09:00",
            end_time="10:00",
            created_by_id="admin-1",
        )

        assert repr(event) == "CalendarEvent(id=ev-1, title=Intake, date=2026-03-02)"


class TestWorkLocation:
    def test_label_with_city(self):
        assert WorkLocation(location_name="Head office", city="Utrecht").label == "Head office, Utrecht"

    def test_label_without_city(self):
        assert WorkLocation(location_name="Remote").label == "Remote"


class TestCoachDailyReport:
    def test_creation(self):
        report = CoachDailyReport(
            coach_id="coach-1",
            report_date=date(2026, 3, 2),
            hours_worked=7.5,
            activity_type="Coaching",
            custom_location="Client site",
        )

        assert report.hours_worked == 7.5
        assert report.work_location_id is None
