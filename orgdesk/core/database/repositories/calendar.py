"""
Calendar repositories.

This module provides data access for calendar events, event types, per-event
permission grants, coach hour logs and work locations.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.calendar import (
    CalendarEvent,
    CalendarPermission,
    CoachDailyReport,
    EventType,
    WorkLocation,
)
from .base import SQLModelRepository

SLS_TITLE_PREFIX = "SLS: "


class EventTypeRepository(SQLModelRepository[EventType]):
    """Repository for calendar event types."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EventType)

    async def list_active(self) -> List[EventType]:
        return await self.list(filters={"is_active": True}, order_by=EventType.name)

    async def get_by_name(self, name: str) -> Optional[EventType]:
        result = await self.session.execute(select(EventType).where(EventType.name == name))
        return result.scalars().first()

    async def get_map(self) -> Dict[str, EventType]:
        result = await self.session.execute(select(EventType))
        return {et.id: et for et in result.scalars().all()}


class CalendarEventRepository(SQLModelRepository[CalendarEvent]):
    """Repository for scheduled calendar events."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CalendarEvent)

    async def list_range(self, start_date: date, end_date: date) -> List[Tuple[CalendarEvent, Optional[EventType]]]:
        """Events between two dates (inclusive) with their event type, ordered by date and start time."""
        stmt = (
            select(CalendarEvent, EventType)
            .join(EventType, EventType.id == CalendarEvent.event_type_id, isouter=True)
            .where(CalendarEvent.event_date >= start_date, CalendarEvent.event_date <= end_date)
            .order_by(CalendarEvent.event_date, CalendarEvent.start_time)
        )
        result = await self.session.execute(stmt)
        return [(event, event_type) for event, event_type in result.all()]

    async def list_public(self, start_date: date, end_date: date) -> List[Tuple[CalendarEvent, Optional[EventType]]]:
        """Events assigned to neither a coach nor a client, with their event type."""
        stmt = (
            select(CalendarEvent, EventType)
            .join(EventType, EventType.id == CalendarEvent.event_type_id, isouter=True)
            .where(
                CalendarEvent.event_date >= start_date,
                CalendarEvent.event_date <= end_date,
                CalendarEvent.coach_id == None,  # noqa: E711
                CalendarEvent.client_id == None,  # noqa: E711
            )
            .order_by(CalendarEvent.event_date, CalendarEvent.start_time)
        )
        result = await self.session.execute(stmt)
        return [(event, event_type) for event, event_type in result.all()]

    async def list_sls(
        self,
        client_id: Optional[str] = None,
        coach_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[CalendarEvent]:
        """SLS events, optionally narrowed to a client, a coach and a date range."""
        stmt = select(CalendarEvent).where(CalendarEvent.title.like(f"{SLS_TITLE_PREFIX}%"))
        if client_id:
            stmt = stmt.where(CalendarEvent.client_id == client_id)
        if coach_id:
            stmt = stmt.where(CalendarEvent.coach_id == coach_id)
        if start_date:
            stmt = stmt.where(CalendarEvent.event_date >= start_date)
        if end_date:
            stmt = stmt.where(CalendarEvent.event_date <= end_date)
        stmt = stmt.order_by(CalendarEvent.event_date, CalendarEvent.start_time)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_type(self, since: date) -> List[Tuple[Optional[str], int]]:
        """Number of events per event type name from ``since`` onwards."""
        stmt = (
            select(EventType.name, func.count(CalendarEvent.id))
            .select_from(CalendarEvent)
            .join(EventType, EventType.id == CalendarEvent.event_type_id, isouter=True)
            .where(CalendarEvent.event_date >= since)
            .group_by(EventType.name)
            .order_by(func.count(CalendarEvent.id).desc())
        )
        result = await self.session.execute(stmt)
        return [(name, int(count)) for name, count in result.all()]


class CalendarPermissionRepository(SQLModelRepository[CalendarPermission]):
    """Repository for per-event permission grants."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CalendarPermission)

    async def list_for_event(self, event_id: str) -> List[CalendarPermission]:
        result = await self.session.execute(
            select(CalendarPermission).where(CalendarPermission.event_id == event_id)
        )
        return list(result.scalars().all())


class WorkLocationRepository(SQLModelRepository[WorkLocation]):
    """Repository for work locations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, WorkLocation)

    async def list_active(self) -> List[WorkLocation]:
        return await self.list(filters={"is_active": True}, order_by=WorkLocation.location_name)


class CoachReportRepository(SQLModelRepository[CoachDailyReport]):
    """Repository for coach hour logs."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CoachDailyReport)

    async def get_for_day(self, coach_id: str, report_date: date) -> Optional[CoachDailyReport]:
        result = await self.session.execute(
            select(CoachDailyReport).where(
                CoachDailyReport.coach_id == coach_id,
                CoachDailyReport.report_date == report_date,
            )
        )
        return result.scalars().first()

    async def total_for_day(self, coach_id: str, report_date: date) -> float:
        result = await self.session.execute(
            select(func.coalesce(func.sum(CoachDailyReport.hours_worked), 0)).where(
                CoachDailyReport.coach_id == coach_id,
                CoachDailyReport.report_date == report_date,
            )
        )
        return float(result.scalar_one())

    async def list_range(
        self, start_date: date, end_date: date, coach_id: Optional[str] = None
    ) -> List[Tuple[CoachDailyReport, Optional[WorkLocation]]]:
        """Hour logs in a date range with their work location, newest date last.

        Args:
            start_date: First day, inclusive
            end_date: Last day, inclusive
            coach_id: Restrict to one coach; ``None`` returns every coach

        Returns:
            List of (report, location) pairs
        """
        stmt = (
            select(CoachDailyReport, WorkLocation)
            .join(WorkLocation, WorkLocation.id == CoachDailyReport.work_location_id, isouter=True)
            .where(CoachDailyReport.report_date >= start_date, CoachDailyReport.report_date <= end_date)
            .order_by(CoachDailyReport.report_date)
        )
        if coach_id:
            stmt = stmt.where(CoachDailyReport.coach_id == coach_id)
        result = await self.session.execute(stmt)
        return [(report, location) for report, location in result.all()]
