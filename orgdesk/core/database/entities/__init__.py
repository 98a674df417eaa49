"""
Database entities organized by business domain.

Importing this package registers every table on ``Base.metadata``.
"""

from .analytics import AnalyticsEvent, AnalyticsSession, PageView
from .calendar import CalendarEvent, CalendarPermission, CoachDailyReport, EventType, WorkLocation
from .catalog import CatalogSection, CatalogSubsection, Product
from .documents import Document, DocumentActivity, DocumentShare
from .messaging import (
    DIRECT_CHANNEL,
    GROUP_CHANNEL,
    Channel,
    ChannelParticipant,
    Message,
    MessageAttachment,
    Notification,
)
from .profiles import (
    Invite,
    InviteSpecialization,
    Profile,
    Role,
    RolePermission,
    Specialization,
    UserSpecialization,
)
from .schedule import (
    Business,
    DailyCleanInstance,
    DailyCleanItem,
    Schedule,
    ScheduleJob,
    ScheduleMember,
)

__all__ = [
    "AnalyticsEvent",
    "AnalyticsSession",
    "PageView",
    "CalendarEvent",
    "CalendarPermission",
    "CoachDailyReport",
    "EventType",
    "WorkLocation",
    "CatalogSection",
    "CatalogSubsection",
    "Product",
    "Document",
    "DocumentActivity",
    "DocumentShare",
    "DIRECT_CHANNEL",
    "GROUP_CHANNEL",
    "Channel",
    "ChannelParticipant",
    "Message",
    "MessageAttachment",
    "Notification",
    "Invite",
    "InviteSpecialization",
    "Profile",
    "Role",
    "RolePermission",
    "Specialization",
    "UserSpecialization",
    "Business",
    "DailyCleanInstance",
    "DailyCleanItem",
    "Schedule",
    "ScheduleJob",
    "ScheduleMember",
]
