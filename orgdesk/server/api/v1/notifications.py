"""
Notifications API Endpoints.

The notification feed combines notifications addressed to the caller with
broadcasts to the caller's role. The whole router can be switched off with
``NOTIFICATIONS_API_ENABLED=false``.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from orgdesk.core.cache import invalidate_conversations
from orgdesk.core.database.entities import Notification
from orgdesk.core.database.repositories import NotificationRepository, ProfileRepository
from orgdesk.core.errors import BadRequestError, ForbiddenError, NotFoundError, ServiceUnavailableError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.domain.enums import ROLE_FLAG_COLUMNS, RoleId
from orgdesk.core.models.io.messaging import (
    MarkReadRequest,
    MarkReadResponse,
    NotificationCreate,
    NotificationRead,
)
from orgdesk.server.core.config import settings
from orgdesk.server.services.deps import CacheDep, CurrentUserDep, SessionDep, require_role, role_of

logger = get_logger(__name__)


def ensure_notifications_enabled() -> None:
    if not settings.notifications_api_enabled:
        raise ServiceUnavailableError("Notifications API")


router = APIRouter(dependencies=[Depends(ensure_notifications_enabled)])

FEED_LIMIT = 20
USER_LIMIT = 10


@router.get(
    "",
    response_model=List[NotificationRead],
    summary="Get Notification Feed",
    description="Notifications addressed to the caller or broadcast to the caller's role, newest first.",
    responses={
        401: {"description": "Caller is not authenticated"},
        503: {"description": "Notifications API is disabled"},
    },
)
async def get_feed(user: CurrentUserDep, session: SessionDep) -> List[NotificationRead]:
    """
    Get the caller's notification feed.

    Returns at most 20 notifications. Broadcasts are matched through the
    role flag column of the caller's role (`role_admin`, `role_jobcoach`,
    `role_client` or `role_anonymous`).
    """
    column = ROLE_FLAG_COLUMNS[role_of(user)]
    notifications = await NotificationRepository(session).feed(user.id, column, limit=FEED_LIMIT)
    return [NotificationRead.model_validate(n) for n in notifications]


@router.post(
    "",
    response_model=NotificationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Notification",
    description="Send a notification to one user or broadcast it to roles. Administrators only.",
    responses={
        400: {"description": "Missing title, subtitle or target"},
        403: {"description": "Caller is not an administrator"},
        404: {"description": "Receiver not found"},
    },
)
async def create_notification(
    body: NotificationCreate, user: CurrentUserDep, session: SessionDep
) -> NotificationRead:
    """
    Create a notification.

    - **title** / **subtitle**: Required.
    - **receiverId**: Direct receiver, or
    - **role_admin** / **role_jobcoach** / **role_client** / **role_anonymous**: Roles to broadcast to.
    """
    require_role(user, RoleId.ADMIN, message="Only administrators can create notifications")
    if not body.title or not body.subtitle:
        raise BadRequestError("title and subtitle are required")
    role_flags = {column: getattr(body, column) for column in ROLE_FLAG_COLUMNS.values()}
    if not body.receiverId and not any(role_flags.values()):
        raise BadRequestError("A receiverId or at least one role flag is required")
    if body.receiverId and await ProfileRepository(session).get_by_id(body.receiverId) is None:
        raise NotFoundError("User", body.receiverId)

    notification = await NotificationRepository(session).create(
        Notification(
            sender_id=user.id,
            receiver_id=body.receiverId,
            title=body.title,
            subtitle=body.subtitle,
            action_url=body.action_url,
            **role_flags,
        )
    )
    return NotificationRead.model_validate(notification)


@router.post(
    "/mark-read",
    response_model=MarkReadResponse,
    summary="Mark Notifications Read",
    description="Mark notifications as read. Only notifications received by the caller are changed.",
    responses={
        400: {"description": "notificationIds is not a list"},
    },
)
async def mark_read(
    body: MarkReadRequest, user: CurrentUserDep, session: SessionDep, cache: CacheDep
) -> MarkReadResponse:
    if not isinstance(body.notificationIds, list):
        raise BadRequestError("notificationIds must be a list")
    updated = await NotificationRepository(session).mark_read([str(i) for i in body.notificationIds], user.id)
    if updated:
        # Unread counts on the conversation list come from notifications
        invalidate_conversations(cache, [user.id])
    return MarkReadResponse(updated=updated)


@router.get(
    "/user/{user_id}",
    response_model=List[NotificationRead],
    summary="List A User's Notifications",
    description="The ten most recent notifications received by a user. Callers may read their own; admins anyone's.",
    responses={
        403: {"description": "Caller may not read this user's notifications"},
        404: {"description": "User not found"},
    },
)
async def list_user_notifications(user_id: str, user: CurrentUserDep, session: SessionDep) -> List[NotificationRead]:
    if user_id != user.id and role_of(user) != RoleId.ADMIN:
        raise ForbiddenError("You can only read your own notifications")
    if await ProfileRepository(session).get_by_id(user_id) is None:
        raise NotFoundError("User", user_id)
    notifications = await NotificationRepository(session).list_for_receiver(user_id, limit=USER_LIMIT)
    return [NotificationRead.model_validate(n) for n in notifications]
