"""
Web analytics repository.

Aggregations run in SQL and return plain rows; shaping for charts happens
in the analytics service.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.analytics import AnalyticsEvent, AnalyticsSession, PageView
from .base import SQLModelRepository


class AnalyticsRepository(SQLModelRepository[PageView]):
    """Repository for analytics sessions, page views and custom events."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PageView)

    async def touch_session(self, session_row: AnalyticsSession) -> AnalyticsSession:
        """Insert a session on first sight, otherwise refresh ``last_seen_at``."""
        existing = await self.session.get(AnalyticsSession, session_row.id)
        if existing is None:
            self.session.add(session_row)
            await self.session.flush()
            return session_row
        existing.last_seen_at = utc_now()
        self.session.add(existing)
        await self.session.flush()
        return existing

    async def record_page_view(self, session_row: AnalyticsSession, view: PageView) -> PageView:
        await self.touch_session(session_row)
        self.session.add(view)
        await self.session.commit()
        await self.session.refresh(view)
        return view

    async def record_event(self, session_row: AnalyticsSession, event: AnalyticsEvent) -> AnalyticsEvent:
        await self.touch_session(session_row)
        self.session.add(event)
        await self.session.commit()
        await self.session.refresh(event)
        return event

    async def page_views_since(self, since: datetime) -> List[Tuple[datetime, str]]:
        """(created_at, session_id) for every page view since ``since``."""
        result = await self.session.execute(
            select(PageView.created_at, PageView.session_id).where(PageView.created_at >= since)
        )
        return [(created_at, session_id) for created_at, session_id in result.all()]

    async def device_counts_since(self, since: datetime) -> List[Tuple[str, int]]:
        """Page view counts per raw device type since ``since``."""
        stmt = (
            select(AnalyticsSession.device_type, func.count(PageView.id))
            .select_from(PageView)
            .join(AnalyticsSession, AnalyticsSession.id == PageView.session_id)
            .where(PageView.created_at >= since)
            .group_by(AnalyticsSession.device_type)
        )
        result = await self.session.execute(stmt)
        return [(device_type, int(count)) for device_type, count in result.all()]

    async def event_counts_since(self, since: datetime) -> List[Tuple[str, int]]:
        stmt = (
            select(AnalyticsEvent.event_name, func.count(AnalyticsEvent.id))
            .where(AnalyticsEvent.created_at >= since)
            .group_by(AnalyticsEvent.event_name)
            .order_by(func.count(AnalyticsEvent.id).desc(), AnalyticsEvent.event_name)
        )
        result = await self.session.execute(stmt)
        return [(name, int(count)) for name, count in result.all()]
