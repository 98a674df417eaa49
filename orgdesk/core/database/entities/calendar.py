"""
Calendar entity models.

This module contains the database entities for scheduled calendar events,
their types and visibility flags, per-event permission grants, and coach
hour logs (daily reports) with the work locations they reference.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class EventType(Base, table=True):
    """Category of calendar event with per-role visibility flags.

    Table: event_types
    """

    __tablename__ = "event_types"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True, unique=True)
    description: Optional[str] = Field(default=None)
    color: Optional[str] = Field(default=None, description="Hex display colour")
    is_active: bool = Field(default=True)
    visible_to_admins: bool = Field(default=True)
    visible_to_coaches: bool = Field(default=False)
    visible_to_clients: bool = Field(default=False)


class CalendarEvent(Base, table=True):
    """A scheduled event.

    Table: calendar_events
    """

    __tablename__ = "calendar_events"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    title: str
    description: Optional[str] = Field(default=None)
    event_date: date = Field(index=True)
    start_time: str = Field(description="HH:MM")
    end_time: str = Field(description="HH:MM")
    event_type_id: Optional[str] = Field(default=None, foreign_key="event_types.id", index=True)
    client_id: Optional[str] = Field(default=None, foreign_key="profiles.id", index=True)
    coach_id: Optional[str] = Field(default=None, foreign_key="profiles.id", index=True)
    created_by_id: str = Field(foreign_key="profiles.id")
    status: str = Field(default="scheduled")
    priority: str = Field(default="medium")
    location: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"CalendarEvent(id={self.id}, title={self.title}, date={self.event_date})"


class CalendarPermission(Base, table=True):
    """Grant on a single calendar event, written alongside SLS events.

    Table: calendar_permissions
    """

    __tablename__ = "calendar_permissions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    event_id: str = Field(foreign_key="calendar_events.id", index=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)
    permission_level: str = Field(default="view")
    specific_actions: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    granted_by: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class WorkLocation(Base, table=True):
    """Table: work_locations"""

    __tablename__ = "work_locations"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    location_name: str
    city: Optional[str] = Field(default=None)
    is_active: bool = Field(default=True)

    @property
    def label(self) -> str:
        return f"{self.location_name}, {self.city}" if self.city else self.location_name


class CoachDailyReport(Base, table=True):
    """Hours a coach logged for one day. One row per coach and date.

    Table: coach_daily_reports
    """

    __tablename__ = "coach_daily_reports"
    __table_args__ = (
        UniqueConstraint("coach_id", "report_date", name="uq_coach_daily_report"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    coach_id: str = Field(foreign_key="profiles.id", index=True)
    report_date: date = Field(index=True)
    hours_worked: float
    activity_type: str
    work_location_id: Optional[str] = Field(default=None, foreign_key="work_locations.id")
    custom_location: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    created_by: Optional[str] = Field(default=None, foreign_key="profiles.id", description="Who logged the hours")

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
