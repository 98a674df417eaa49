"""
Cleaning schedule entity models.

Businesses are cleaned on a four-week rota: each ``Schedule`` row marks the
weekdays a business is visited in one week of the cycle. A
``DailyCleanInstance`` snapshots one day's rota into ``DailyCleanItem`` rows
so the crew can tick businesses off or move them to another date.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class Business(Base, table=True):
    """Table: businesses"""

    __tablename__ = "businesses"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    business_name: str = Field(index=True)
    address: str
    before_open: bool = Field(default=False, description="Must be cleaned before the business opens")
    business_notes: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Schedule(Base, table=True):
    """Table: schedules"""

    __tablename__ = "schedules"
    __table_args__ = (
        UniqueConstraint("business_id", "week", name="uq_schedule_business_week"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    business_id: int = Field(foreign_key="businesses.id", index=True)
    week: int = Field(index=True, description="Week of the four-week cycle, 1 to 4")
    monday: bool = Field(default=False)
    tuesday: bool = Field(default=False)
    wednesday: bool = Field(default=False)
    thursday: bool = Field(default=False)
    friday: bool = Field(default=False)


class ScheduleMember(Base, table=True):
    """Table: schedule_members

    A cleaning crew member and the weekdays they work.
    """

    __tablename__ = "schedule_members"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    monday: bool = Field(default=False)
    tuesday: bool = Field(default=False)
    wednesday: bool = Field(default=False)
    thursday: bool = Field(default=False)
    friday: bool = Field(default=False)


class ScheduleJob(Base, table=True):
    """Table: schedule_jobs"""

    __tablename__ = "schedule_jobs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    schedule_id: int = Field(foreign_key="schedules.id", index=True)
    job_type: str
    member_id: Optional[int] = Field(default=None, foreign_key="schedule_members.id")


class DailyCleanInstance(Base, table=True):
    """Table: daily_clean_instances"""

    __tablename__ = "daily_clean_instances"
    __table_args__ = (
        UniqueConstraint("instance_date", "week_number", "day_name", name="uq_daily_clean_instance"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    instance_date: date = Field(index=True)
    week_number: int
    day_name: str
    status: str = Field(default="active")
    created_by: Optional[str] = Field(default=None, foreign_key="profiles.id")
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})


class DailyCleanItem(Base, table=True):
    """Table: daily_clean_items

    Business details are copied in so the day's record survives later
    edits to, or deletion of, the business.
    """

    __tablename__ = "daily_clean_items"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    instance_id: str = Field(foreign_key="daily_clean_instances.id", index=True)
    business_id: int = Field(index=True)
    business_name: str
    address: Optional[str] = Field(default=None)
    before_open: bool = Field(default=False)
    status: str = Field(default="pending", index=True)
    cleaned_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    moved_to_date: Optional[date] = Field(default=None, index=True)
    notes: Optional[str] = Field(default=None)
    marked_by: Optional[str] = Field(default=None, foreign_key="profiles.id")
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, sa_column_kwargs={"onupdate": utc_now})
