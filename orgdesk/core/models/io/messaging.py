"""
Messaging and notification I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    channel_id: Optional[str] = None
    content: Optional[str] = None


class AttachmentCreate(BaseModel):
    file_name: str
    storage_path: str
    mime_type: Optional[str] = None
    size: Optional[int] = None


class ChannelMessageCreate(BaseModel):
    content: Optional[str] = None
    attachments: List[AttachmentCreate] = Field(default_factory=list)


class AttachmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    storage_path: str
    mime_type: Optional[str] = None
    size: Optional[int] = None


class MessageRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    channel_id: str
    sender_id: str
    content: Optional[str] = None
    created_at: datetime
    attachments: List[AttachmentRead] = Field(default_factory=list)


class ParticipantRead(BaseModel):
    id: str
    display_name: str
    avatar_url: Optional[str] = None


class ConversationRead(BaseModel):
    """A channel as listed in the caller's inbox."""

    id: str
    name: str
    type: int
    participants: List[ParticipantRead]
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    unread_count: int = 0


class StartDMRequest(BaseModel):
    userIds: Any = None


class StartDMResponse(BaseModel):
    channelId: str
    isExisting: bool
    message: str


class StartGroupRequest(BaseModel):
    name: Optional[str] = None
    participantIds: Any = None


class StartGroupResponse(BaseModel):
    channelId: str
    isExisting: bool = False


class DeleteConversationResponse(BaseModel):
    success: bool
    message: str
    channelId: str
    channelName: Optional[str] = None


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: Optional[str] = None
    receiver_id: Optional[str] = None
    title: str
    subtitle: Optional[str] = None
    action_url: Optional[str] = None
    read: bool
    role_admin: bool = False
    role_jobcoach: bool = False
    role_client: bool = False
    role_anonymous: bool = False
    created_at: datetime


class NotificationCreate(BaseModel):
    """Direct or broadcast notification created by an administrator."""

    title: Optional[str] = None
    subtitle: Optional[str] = None
    action_url: Optional[str] = None
    receiverId: Optional[str] = None
    role_admin: bool = False
    role_jobcoach: bool = False
    role_client: bool = False
    role_anonymous: bool = False


class MarkReadRequest(BaseModel):
    notificationIds: Any = None


class MarkReadResponse(BaseModel):
    success: bool = True
    updated: int
