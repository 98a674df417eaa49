"""
Analytics I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class UtmParams(BaseModel):
    source: Optional[str] = None
    medium: Optional[str] = None
    campaign: Optional[str] = None
    term: Optional[str] = None
    content: Optional[str] = None


class TrackPageViewRequest(BaseModel):
    sessionId: Optional[str] = None
    pageUrl: Optional[str] = None
    pageTitle: Optional[str] = None
    referrer: Optional[str] = None
    userAgent: Optional[str] = None
    loadTime: Optional[float] = None
    utmParams: Optional[UtmParams] = None


class TrackEventRequest(BaseModel):
    sessionId: Optional[str] = None
    eventName: Optional[str] = None
    eventCategory: Optional[str] = None
    eventAction: Optional[str] = None
    eventLabel: Optional[str] = None
    eventValue: Optional[float] = None
    pageUrl: Optional[str] = None
    userAgent: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class TrackResponse(BaseModel):
    success: bool = True
    id: str


class ChartPoint(BaseModel):
    x: date
    y: int


class VisitorsRead(BaseModel):
    total_visitors: int
    total_page_views: int
    chart: List[ChartPoint]


class DeviceUsage(BaseModel):
    name: str
    amount: int
    percentage: int


class EventCount(BaseModel):
    name: str
    count: int
