"""
Chat Message Notifications.

Every message sent in a channel notifies the other participants. Messages
from the same sender arriving within a short window are stacked into the
receiver's existing notification instead of creating a new one.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Optional, Sequence

from orgdesk.core.database.base import utc_now
from orgdesk.core.database.entities import Notification, Profile
from orgdesk.core.database.repositories import NotificationRepository
from orgdesk.core.logging_config import get_logger

logger = get_logger(__name__)

STACK_WINDOW = timedelta(minutes=5)
SUBTITLE_LENGTH = 50
_STACK_COUNT = re.compile(r"^(\d+)\s")


def display_name(profile: Optional[Profile]) -> str:
    """Name shown for a user: display name, full name, email local part, or "Someone"."""
    if profile is None:
        return "Someone"
    if profile.display_name:
        return profile.display_name
    if profile.full_name:
        return profile.full_name
    if profile.email:
        return profile.email.split("@")[0]
    return "Someone"


def preview(content: str, length: int = SUBTITLE_LENGTH) -> str:
    if len(content) > length:
        return content[:length] + "..."
    return content


def stacked_title(previous_title: str, sender_name: str) -> str:
    """Title for a notification that now covers one more message."""
    match = _STACK_COUNT.match(previous_title)
    count = int(match.group(1)) + 1 if match else 2
    return f"{count} {sender_name} sent you messages"


class MessageNotifier:
    """Creates or stacks message notifications for channel participants."""

    def __init__(self, repository: NotificationRepository) -> None:
        self.repository = repository

    async def notify(
        self,
        sender: Profile,
        channel_id: str,
        content: str,
        receiver_ids: Sequence[str],
    ) -> list[Notification]:
        """
        Notify every receiver about a new message.

        Args:
            sender: Profile of the message author
            channel_id: Channel the message was posted to
            content: Message text used for the subtitle preview
            receiver_ids: Participants to notify; the sender is skipped

        Returns:
            The created or updated notifications
        """
        name = display_name(sender)
        now = utc_now()
        since = now - STACK_WINDOW
        action_url = f"/messages/{channel_id}"
        touched: list[Notification] = []

        for receiver_id in receiver_ids:
            if receiver_id == sender.id:
                continue
            existing = await self.repository.find_stackable(sender.id, receiver_id, since)
            if existing is not None:
                existing.title = stacked_title(existing.title, name)
                existing.subtitle = f"Latest: {preview(content)}"
                existing.created_at = now
                existing.read = False
                existing.action_url = action_url
                self.repository.session.add(existing)
                touched.append(existing)
                logger.debug(f"Stacked message notification for '{receiver_id}': {existing.title}")
            else:
                notification = Notification(
                    sender_id=sender.id,
                    receiver_id=receiver_id,
                    title=f"{name} sent you a message",
                    subtitle=preview(content),
                    action_url=action_url,
                    read=False,
                    created_at=now,
                )
                self.repository.session.add(notification)
                touched.append(notification)

        await self.repository.session.flush()
        return touched
