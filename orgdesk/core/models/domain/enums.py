"""
Domain enumerations.

Role identifiers are the short opaque strings stored on profiles. Every other
enum mirrors a string column value used by the API.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class RoleId(str, Enum):
    """The four role identifiers a profile can hold."""

    ADMIN = "admin1"
    COACH = "coachx7"
    CLIENT = "client7x"
    USER = "user0x"


ROLE_NAMES = {
    RoleId.ADMIN: "admin",
    RoleId.COACH: "jobcoach",
    RoleId.CLIENT: "client",
    RoleId.USER: "user",
}

# Notification broadcast column per role
ROLE_FLAG_COLUMNS = {
    RoleId.ADMIN: "role_admin",
    RoleId.COACH: "role_jobcoach",
    RoleId.CLIENT: "role_client",
    RoleId.USER: "role_anonymous",
}


def normalize_role(role: Optional[str]) -> RoleId:
    """Map a stored role string to a RoleId; anything unknown is a plain user."""
    try:
        return RoleId(role)
    except ValueError:
        return RoleId.USER


class DocumentType(str, Enum):
    FILE = "file"
    FOLDER = "folder"


class SharePermission(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    ADMIN = "admin"


class DocumentAction(str, Enum):
    """Actions written to the document activity log."""

    CREATED = "created"
    UPLOADED = "uploaded"
    VIEWED = "viewed"
    DOWNLOADED = "downloaded"
    RENAMED = "renamed"
    UPDATED = "updated"
    MOVED = "moved"
    DELETED = "deleted"
    SHARED = "shared"
    UNSHARED = "unshared"
    MADE_PUBLIC = "made_public"
    MADE_PRIVATE = "made_private"


class EventStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Weekday(str, Enum):
    """Working days of the four-week cleaning rota."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"


class CleanStatus(str, Enum):
    PENDING = "pending"
    CLEANED = "cleaned"
    MOVED = "moved"


class InstanceStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
