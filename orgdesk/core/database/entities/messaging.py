"""
Messaging entity models.

Channels hold participants and messages. Type 1 channels are direct
messages between exactly two users, type 2 channels are named groups.
Notifications are addressed to one receiver and/or broadcast to roles
through the ``role_*`` flags.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, UTCDateTime, new_id, utc_now

DIRECT_CHANNEL = 1
GROUP_CHANNEL = 2


class Channel(Base, table=True):
    """Table: channels"""

    __tablename__ = "channels"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    name: Optional[str] = Field(default=None)
    type: int = Field(default=DIRECT_CHANNEL, index=True)
    created_by: Optional[str] = Field(default=None, foreign_key="profiles.id")
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class ChannelParticipant(Base, table=True):
    """Table: channel_participants"""

    __tablename__ = "channel_participants"
    __table_args__ = (
        UniqueConstraint("channel_id", "user_id", name="uq_channel_participant"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    channel_id: str = Field(foreign_key="channels.id", index=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)
    joined_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Message(Base, table=True):
    """Table: messages"""

    __tablename__ = "messages"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    channel_id: str = Field(foreign_key="channels.id", index=True)
    sender_id: str = Field(foreign_key="profiles.id", index=True)
    content: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)

    def __repr__(self) -> str:
        return f"Message(id={self.id}, channel_id={self.channel_id}, sender_id={self.sender_id})"


class MessageAttachment(Base, table=True):
    """Table: message_attachments"""

    __tablename__ = "message_attachments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    message_id: str = Field(foreign_key="messages.id", index=True)
    file_name: str
    storage_path: str
    mime_type: Optional[str] = Field(default=None)
    size: Optional[int] = Field(default=None)


class Notification(Base, table=True):
    """Table: notifications"""

    __tablename__ = "notifications"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    sender_id: Optional[str] = Field(default=None, foreign_key="profiles.id", index=True)
    receiver_id: Optional[str] = Field(default=None, foreign_key="profiles.id", index=True)
    title: str
    subtitle: Optional[str] = Field(default=None)
    action_url: Optional[str] = Field(default=None)
    read: bool = Field(default=False)
    role_admin: bool = Field(default=False)
    role_jobcoach: bool = Field(default=False)
    role_client: bool = Field(default=False)
    role_anonymous: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime, index=True)
