"""
Calendar I/O models for API requests and responses.

This module contains the display shape shared by scheduled events and hour
logs, and the request bodies for events, SLS events and hour logging.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CalendarEventView(BaseModel):
    """A calendar entry as displayed to a user.

    Scheduled events, logged hours and not-yet-confirmed hour logs all share
    this shape; ``is_hour_log`` tells them apart.
    """

    id: str
    title: str
    description: Optional[str] = None
    event_date: date
    start_time: str
    end_time: str
    event_type: str = "Event"
    color: str = "#3B82F6"
    status: str = "scheduled"
    priority: Optional[str] = None
    client_id: Optional[str] = None
    coach_id: Optional[str] = None
    client_name: Optional[str] = None
    coach_name: Optional[str] = None
    location: Optional[str] = None
    duration_minutes: Optional[int] = None
    hours: Optional[float] = Field(default=None, description="Logged hours, set on hour log entries only")
    is_hour_log: bool = False
    is_public: bool = Field(default=False, description="Set on events assigned to no coach or client")


class CalendarEventCreate(BaseModel):
    """Request body for creating a calendar event."""

    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    event_type: Optional[str] = Field(default=None, description="Event type name")
    client_id: Optional[str] = None
    coach_id: Optional[str] = None
    priority: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class CalendarEventUpdate(BaseModel):
    """Partial update for a calendar event."""

    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    event_type: Optional[str] = None
    client_id: Optional[str] = None
    coach_id: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class SLSEventCreate(BaseModel):
    """Request body for creating an SLS event for a client or a coach."""

    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    user_id: Optional[str] = Field(default=None, description="Client or coach the event is for")
    location: Optional[str] = None
    notes: Optional[str] = None
    priority: Optional[str] = None


class SLSEventsResponse(BaseModel):
    success: bool = True
    events: List[CalendarEventView]


class EventTypeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    color: str = "#3B82F6"
    visible_to_admins: bool
    visible_to_coaches: bool
    visible_to_clients: bool


class WorkLocationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_name: str
    city: Optional[str] = None
    is_active: bool = True
    label: str


class HourLogCreate(BaseModel):
    """Request body for logging a coach's hours for one day."""

    coach_id: Optional[str] = Field(default=None, description="Coach the hours are for, defaults to the caller")
    report_date: Optional[date] = None
    hours_worked: Optional[float] = None
    activity_type: Optional[str] = None
    work_location_id: Optional[str] = None
    location: Optional[str] = Field(default=None, description="Free-text location when no work location is chosen")
    notes: Optional[str] = None


class HourLogUpdate(BaseModel):
    report_date: Optional[date] = None
    coach_id: Optional[str] = None
    hours_worked: Optional[float] = None
    activity_type: Optional[str] = None
    work_location_id: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class HourLogRead(BaseModel):
    id: str
    coach_id: str
    report_date: date
    hours_worked: float
    activity_type: str
    location: str
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime


class DailyHoursRead(BaseModel):
    totalHours: float
    date: date
    coach_id: str


class OptimisticHourRead(BaseModel):
    id: str
    date: date
    hours: float
    activity: str
    location: str
    notes: Optional[str] = None
    coach_name: Optional[str] = None
    timestamp: datetime
