"""
Messaging and notification repositories.

This module provides data access for chat channels, their participants,
messages with attachments, and notifications. ``delete_conversation`` and
``create_or_get_group_channel`` replace stored procedures of the hosted
backend and run inside a single commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.messaging import (
    DIRECT_CHANNEL,
    GROUP_CHANNEL,
    Channel,
    ChannelParticipant,
    Message,
    MessageAttachment,
    Notification,
)
from .base import SQLModelRepository


@dataclass
class DeleteConversationResult:
    """Outcome of deleting a conversation."""

    success: bool
    channel_name: Optional[str] = None
    message_ids: List[str] = field(default_factory=list)
    attachment_paths: List[str] = field(default_factory=list)


class ChannelRepository(SQLModelRepository[Channel]):
    """Repository for chat channels and their participants."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Channel)

    async def is_participant(self, channel_id: str, user_id: str) -> bool:
        result = await self.session.execute(
            select(ChannelParticipant.id).where(
                ChannelParticipant.channel_id == channel_id,
                ChannelParticipant.user_id == user_id,
            )
        )
        return result.first() is not None

    async def participant_ids(self, channel_id: str) -> List[str]:
        result = await self.session.execute(
            select(ChannelParticipant.user_id)
            .where(ChannelParticipant.channel_id == channel_id)
            .order_by(ChannelParticipant.joined_at)
        )
        return list(result.scalars().all())

    async def find_direct_channel(self, user_a: str, user_b: str) -> Optional[Channel]:
        """Find the direct channel whose participants are exactly ``user_a`` and ``user_b``."""
        candidates = (
            select(ChannelParticipant.channel_id)
            .join(Channel, Channel.id == ChannelParticipant.channel_id)
            .where(Channel.type == DIRECT_CHANNEL, ChannelParticipant.user_id.in_([user_a, user_b]))
            .group_by(ChannelParticipant.channel_id)
            .having(func.count(func.distinct(ChannelParticipant.user_id)) == 2)
        )
        result = await self.session.execute(candidates)
        for channel_id in result.scalars().all():
            if len(await self.participant_ids(channel_id)) == 2:
                return await self.get_by_id(channel_id)
        return None

    async def create_with_participants(
        self, channel: Channel, participant_ids: Iterable[str]
    ) -> Channel:
        self.session.add(channel)
        await self.session.flush()
        for user_id in dict.fromkeys(participant_ids):
            self.session.add(ChannelParticipant(channel_id=channel.id, user_id=user_id))
        await self.session.commit()
        await self.session.refresh(channel)
        return channel

    async def create_or_get_group_channel(
        self, name: str, creator_id: str, participant_ids: Sequence[str]
    ) -> tuple[Channel, bool]:
        """Reuse a group with the same name and member set, or create one.

        Returns:
            (channel, is_existing)
        """
        members = set(participant_ids) | {creator_id}
        result = await self.session.execute(
            select(Channel).where(Channel.type == GROUP_CHANNEL, Channel.name == name)
        )
        for channel in result.scalars().all():
            if set(await self.participant_ids(channel.id)) == members:
                return channel, True
        channel = Channel(name=name, type=GROUP_CHANNEL, created_by=creator_id)
        return await self.create_with_participants(channel, [creator_id, *participant_ids]), False

    async def list_for_user(self, user_id: str) -> List[Channel]:
        stmt = (
            select(Channel)
            .join(ChannelParticipant, ChannelParticipant.channel_id == Channel.id)
            .where(ChannelParticipant.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def participants_by_channel(self, channel_ids: Sequence[str]) -> Dict[str, List[str]]:
        if not channel_ids:
            return {}
        result = await self.session.execute(
            select(ChannelParticipant.channel_id, ChannelParticipant.user_id).where(
                ChannelParticipant.channel_id.in_(channel_ids)
            )
        )
        grouped: Dict[str, List[str]] = {cid: [] for cid in channel_ids}
        for channel_id, user_id in result.all():
            grouped[channel_id].append(user_id)
        return grouped

    async def delete_conversation(self, channel_id: str, user_id: str) -> DeleteConversationResult:
        """Delete a channel with its messages, attachments and participants.

        Only participants may delete a conversation. Nothing is changed when
        the channel is missing or the user is not a participant.
        """
        channel = await self.get_by_id(channel_id)
        if channel is None or not await self.is_participant(channel_id, user_id):
            return DeleteConversationResult(success=False)

        ids_result = await self.session.execute(select(Message.id).where(Message.channel_id == channel_id))
        message_ids = list(ids_result.scalars().all())

        attachment_paths: List[str] = []
        if message_ids:
            paths_result = await self.session.execute(
                select(MessageAttachment.storage_path).where(MessageAttachment.message_id.in_(message_ids))
            )
            attachment_paths = list(paths_result.scalars().all())
            await self.session.execute(delete(MessageAttachment).where(MessageAttachment.message_id.in_(message_ids)))
            await self.session.execute(delete(Message).where(Message.channel_id == channel_id))

        await self.session.execute(delete(ChannelParticipant).where(ChannelParticipant.channel_id == channel_id))
        channel_name = channel.name
        await self.session.delete(channel)
        await self.session.commit()
        return DeleteConversationResult(
            success=True,
            channel_name=channel_name,
            message_ids=message_ids,
            attachment_paths=attachment_paths,
        )


class MessageRepository(SQLModelRepository[Message]):
    """Repository for chat messages and their attachments."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Message)

    async def create_with_attachments(
        self, message: Message, attachments: Sequence[MessageAttachment] = ()
    ) -> Message:
        self.session.add(message)
        await self.session.flush()
        for attachment in attachments:
            attachment.message_id = message.id
            self.session.add(attachment)
        await self.session.flush()
        return message

    async def list_for_channel(self, channel_id: str, limit: int = 100, before: Optional[datetime] = None) -> List[Message]:
        """Most recent messages of a channel, returned oldest first."""
        stmt = select(Message).where(Message.channel_id == channel_id)
        if before is not None:
            stmt = stmt.where(Message.created_at < before)
        stmt = stmt.order_by(Message.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def attachments_for(self, message_ids: Sequence[str]) -> Dict[str, List[MessageAttachment]]:
        if not message_ids:
            return {}
        result = await self.session.execute(
            select(MessageAttachment).where(MessageAttachment.message_id.in_(message_ids))
        )
        grouped: Dict[str, List[MessageAttachment]] = {}
        for attachment in result.scalars().all():
            grouped.setdefault(attachment.message_id, []).append(attachment)
        return grouped

    async def latest_for_channels(self, channel_ids: Sequence[str]) -> Dict[str, Message]:
        if not channel_ids:
            return {}
        latest = (
            select(Message.channel_id, func.max(Message.created_at).label("latest_at"))
            .where(Message.channel_id.in_(channel_ids))
            .group_by(Message.channel_id)
            .subquery()
        )
        stmt = select(Message).join(
            latest,
            (Message.channel_id == latest.c.channel_id) & (Message.created_at == latest.c.latest_at),
        )
        result = await self.session.execute(stmt)
        return {m.channel_id: m for m in result.scalars().all()}


class NotificationRepository(SQLModelRepository[Notification]):
    """Repository for user and role notifications."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Notification)

    async def find_stackable(self, sender_id: str, receiver_id: str, since: datetime) -> Optional[Notification]:
        """Most recent message notification from a sender to a receiver created after ``since``."""
        stmt = (
            select(Notification)
            .where(
                Notification.sender_id == sender_id,
                Notification.receiver_id == receiver_id,
                Notification.title.like("%sent you%message%"),
                Notification.created_at >= since,
            )
            .order_by(Notification.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def feed(self, user_id: str, role_column: Optional[str], limit: int = 20) -> List[Notification]:
        """Notifications addressed to a user directly or through their role flag."""
        targets = [Notification.receiver_id == user_id]
        if role_column:
            targets.append(getattr(Notification, role_column) == True)  # noqa: E712
        stmt = select(Notification).where(or_(*targets)).order_by(Notification.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_receiver(self, user_id: str, limit: int = 10) -> List[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.receiver_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_read(self, notification_ids: Sequence[str], user_id: str) -> int:
        """Mark notifications read, touching only those received by ``user_id``.

        Returns:
            Number of rows updated
        """
        if not notification_ids:
            return 0
        result = await self.session.execute(
            select(Notification).where(
                Notification.id.in_(notification_ids),
                Notification.receiver_id == user_id,
                Notification.read == False,  # noqa: E712
            )
        )
        unread = list(result.scalars().all())
        for notification in unread:
            notification.read = True
            self.session.add(notification)
        await self.session.commit()
        return len(unread)

    async def unread_by_action_url(self, user_id: str) -> Dict[str, int]:
        stmt = (
            select(Notification.action_url, func.count(Notification.id))
            .where(Notification.receiver_id == user_id, Notification.read == False)  # noqa: E712
            .group_by(Notification.action_url)
        )
        result = await self.session.execute(stmt)
        return {url: int(count) for url, count in result.all() if url}
