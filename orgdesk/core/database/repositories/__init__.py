"""
Repositories organized by business domain.

Each repository wraps an ``AsyncSession`` and exposes the queries one
domain needs on top of the shared CRUD operations.
"""

from .analytics import AnalyticsRepository
from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .calendar import (
    CalendarEventRepository,
    CalendarPermissionRepository,
    CoachReportRepository,
    EventTypeRepository,
    WorkLocationRepository,
)
from .catalog import CatalogRepository
from .documents import DocumentRepository, DocumentShareRepository
from .messaging import (
    ChannelRepository,
    DeleteConversationResult,
    MessageRepository,
    NotificationRepository,
)
from .profiles import (
    InviteRepository,
    ProfileRepository,
    RolePermissionRepository,
    RoleRepository,
    SpecializationRepository,
)
from .schedule import BusinessRepository, ScheduleMemberRepository, ScheduleRepository

__all__ = [
    "AnalyticsRepository",
    "AsyncBaseRepository",
    "QueryBuilder",
    "SQLModelRepository",
    "CalendarEventRepository",
    "CalendarPermissionRepository",
    "CoachReportRepository",
    "EventTypeRepository",
    "WorkLocationRepository",
    "CatalogRepository",
    "DocumentRepository",
    "DocumentShareRepository",
    "ChannelRepository",
    "DeleteConversationResult",
    "MessageRepository",
    "NotificationRepository",
    "InviteRepository",
    "ProfileRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "SpecializationRepository",
    "BusinessRepository",
    "ScheduleMemberRepository",
    "ScheduleRepository",
]
