"""
Web analytics entity models.

An analytics session is one browser session identified by a client-side
UUID. Page views and custom events reference it by ``session_id``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now


class AnalyticsSession(Base, table=True):
    """Table: analytics_sessions"""

    __tablename__ = "analytics_sessions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(primary_key=True, description="Client-generated session UUID")
    user_agent: Optional[str] = Field(default=None)
    device_type: str = Field(default="unknown", index=True)
    utm_source: Optional[str] = Field(default=None)
    utm_medium: Optional[str] = Field(default=None)
    utm_campaign: Optional[str] = Field(default=None, index=True)
    started_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
    last_seen_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class PageView(Base, table=True):
    """Table: page_views"""

    __tablename__ = "page_views"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(foreign_key="analytics_sessions.id", index=True)
    page_url: str
    page_title: Optional[str] = Field(default=None)
    referrer: Optional[str] = Field(default=None)
    load_time: Optional[float] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)


class AnalyticsEvent(Base, table=True):
    """Table: analytics_events"""

    __tablename__ = "analytics_events"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    session_id: str = Field(foreign_key="analytics_sessions.id", index=True)
    event_name: str = Field(index=True)
    event_category: Optional[str] = Field(default=None)
    event_action: Optional[str] = Field(default=None)
    event_label: Optional[str] = Field(default=None)
    event_value: Optional[float] = Field(default=None)
    page_url: Optional[str] = Field(default=None)
    event_metadata: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
