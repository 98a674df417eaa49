"""
Cleaning schedule I/O models for API requests and responses.

Request fields are optional so that missing values are answered with the
API's own 400 messages instead of a validation error.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScheduledJob(BaseModel):
    job_type: str
    member_name: str


class ScheduledBusiness(BaseModel):
    business_name: str
    jobs: List[ScheduledJob] = Field(default_factory=list)


class ScheduleForDay(BaseModel):
    schedule: List[ScheduledBusiness]


class BusinessSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_name: str


class BusinessRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    business_name: str
    address: str
    before_open: bool = False


class BusinessCreate(BaseModel):
    business_name: Optional[str] = None
    address: Optional[str] = None
    before_open: bool = False


class BusinessCreated(BaseModel):
    success: bool = True
    data: BusinessRead


class IdBody(BaseModel):
    id: Optional[int] = None


class BusinessNotes(BaseModel):
    business_id: int
    notes: List[Dict[str, Any]]


class NoteCreate(BaseModel):
    business_id: Optional[int] = None
    type: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None


class NoteCreated(BaseModel):
    success: bool = True
    note: Dict[str, Any]
    all_notes: List[Dict[str, Any]]


class NoteUpdate(BaseModel):
    business_id: Optional[int] = None
    note_id: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None


class NoteDelete(BaseModel):
    business_id: Optional[int] = None
    note_id: Optional[str] = None


class NotesChanged(BaseModel):
    success: bool = True
    notes: List[Dict[str, Any]]


class ScheduleWeek(BaseModel):
    """One week of a business's rota; also the element of a bulk update."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    week: Optional[int] = None
    monday: Optional[bool] = None
    tuesday: Optional[bool] = None
    wednesday: Optional[bool] = None
    thursday: Optional[bool] = None
    friday: Optional[bool] = None


class DayMove(BaseModel):
    business_id: Optional[int] = None
    week: Optional[int] = None
    currentDay: Optional[str] = None
    newDay: Optional[str] = None


class MemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    monday: bool = False
    tuesday: bool = False
    wednesday: bool = False
    thursday: bool = False
    friday: bool = False


class MemberWrite(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    monday: Optional[bool] = None
    tuesday: Optional[bool] = None
    wednesday: Optional[bool] = None
    thursday: Optional[bool] = None
    friday: Optional[bool] = None


class CleanItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    instance_id: str
    business_id: int
    business_name: str
    address: Optional[str] = None
    before_open: bool = False
    status: str
    cleaned_at: Optional[datetime] = None
    moved_to_date: Optional[date] = None
    notes: Optional[str] = None
    marked_by: Optional[str] = None
    updated_at: datetime


class InstanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    instance_date: date
    week_number: int
    day_name: str
    status: str
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class InstanceWithItems(BaseModel):
    instance: InstanceRead
    items: List[CleanItemRead]


class CleanItemUpdate(BaseModel):
    instance_id: Optional[str] = None
    business_id: Optional[int] = None
    status: Optional[str] = None
    moved_to_date: Optional[date] = None
    notes: Optional[str] = None


class CleanItemUpdated(BaseModel):
    success: bool = True
    item: CleanItemRead


class InstanceUpdate(BaseModel):
    instance_id: Optional[str] = None
    status: Optional[str] = None


class InstanceUpdated(BaseModel):
    success: bool = True
    instance: InstanceRead


class MovedBusiness(BaseModel):
    id: str
    business_id: int
    business_name: str
    address: Optional[str] = None
    before_open: bool = False
    status: str = "pending"
    notes: str
    original_date: date
    moved_from: str


class MovedBusinesses(BaseModel):
    movedBusinesses: List[MovedBusiness]


class InstanceWithItemsRead(InstanceRead):
    items: List[CleanItemRead] = Field(default_factory=list)


class MonthlySummary(BaseModel):
    total_instances: int
    total_businesses_cleaned: int
    total_cleaning_sessions: int
    days_with_activity: int
    completion_rate: int


class DateRange(BaseModel):
    start_date: date
    end_date: date


class MonthlyReport(BaseModel):
    instances: List[InstanceWithItemsRead]
    summary: MonthlySummary
    date_range: DateRange
