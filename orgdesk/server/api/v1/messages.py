"""
Messaging API Endpoints.

Direct and group conversations between users. Sending a message notifies
the other participants, stacking repeated notifications from one sender.
Conversation lists and message pages are cached per user and per channel.
"""

from typing import List

from fastapi import APIRouter, status

from orgdesk.core.cache import (
    CACHE_EXPIRY,
    TTLStorage,
    cached_fetch,
    conversations_key,
    invalidate_conversations,
    messages_key,
)
from orgdesk.core.database.entities import DIRECT_CHANNEL, Channel, Message, MessageAttachment, Profile
from orgdesk.core.database.repositories import (
    ChannelRepository,
    MessageRepository,
    NotificationRepository,
    ProfileRepository,
)
from orgdesk.core.errors import BadRequestError, ForbiddenError, NotFoundError
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.io.messaging import (
    AttachmentRead,
    ChannelMessageCreate,
    ConversationRead,
    DeleteConversationResponse,
    MessageRead,
    ParticipantRead,
    SendMessageRequest,
    StartDMRequest,
    StartDMResponse,
    StartGroupRequest,
    StartGroupResponse,
)
from orgdesk.server.core.config import settings
from orgdesk.server.services.deps import CacheDep, CurrentUserDep, SessionDep, StorageDep
from orgdesk.server.services.notifier import MessageNotifier, display_name
from orgdesk.storage import StorageError

logger = get_logger(__name__)

router = APIRouter()


async def _require_participant(channels: ChannelRepository, channel_id: str, user_id: str) -> Channel:
    channel = await channels.get_by_id(channel_id)
    if channel is None:
        raise NotFoundError("Conversation", channel_id)
    if not await channels.is_participant(channel_id, user_id):
        raise ForbiddenError("You are not a participant in this conversation")
    return channel


async def _post_message(
    session: SessionDep,
    cache: TTLStorage,
    sender: Profile,
    channel_id: str,
    content: str,
    attachments: List[MessageAttachment],
) -> Message:
    """Insert one message and notify the other participants in a single transaction."""
    sender_id = sender.id
    try:
        message = await MessageRepository(session).create_with_attachments(
            Message(channel_id=channel_id, sender_id=sender_id, content=content), attachments
        )
        participant_ids = await ChannelRepository(session).participant_ids(channel_id)
        await MessageNotifier(NotificationRepository(session)).notify(sender, channel_id, content, participant_ids)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    cache.remove(messages_key(channel_id))
    invalidate_conversations(cache, participant_ids)
    logger.debug(f"User '{sender_id}' posted message '{message.id}' to channel '{channel_id}'")
    return message


@router.post(
    "/send",
    summary="Send Message",
    description="Post a text message to a conversation and notify the other participants.",
    response_description="Success flag.",
    responses={
        400: {"description": "channel_id or content missing"},
        401: {"description": "Caller is not authenticated"},
        403: {"description": "Caller is not a participant"},
        404: {"description": "Conversation not found"},
    },
)
async def send_message(body: SendMessageRequest, user: CurrentUserDep, session: SessionDep, cache: CacheDep):
    """
    Send a message.

    - **channel_id**: Conversation to post to.
    - **content**: Message text.

    Each other participant gets a notification. A second message from the same
    sender within five minutes updates the existing notification into
    "N {name} sent you messages" instead of adding another one.
    """
    if not body.channel_id or not body.content:
        raise BadRequestError("channel_id and content are required")
    await _require_participant(ChannelRepository(session), body.channel_id, user.id)
    await _post_message(session, cache, user, body.channel_id, body.content, [])
    return {"success": True}


@router.get(
    "/conversations",
    response_model=List[ConversationRead],
    summary="List Conversations",
    description="List the caller's conversations with participants, last message and unread count.",
)
async def list_conversations(user: CurrentUserDep, session: SessionDep, cache: CacheDep) -> List[ConversationRead]:
    """
    List the caller's conversations, most recently active first.

    Direct conversations are named after the other participant.
    """
    user_id = user.id

    async def load() -> List[ConversationRead]:
        channels_repo = ChannelRepository(session)
        channels = await channels_repo.list_for_user(user_id)
        channel_ids = [c.id for c in channels]
        members = await channels_repo.participants_by_channel(channel_ids)
        profiles = await ProfileRepository(session).get_many(uid for ids in members.values() for uid in ids)
        latest = await MessageRepository(session).latest_for_channels(channel_ids)
        unread = await NotificationRepository(session).unread_by_action_url(user_id)

        conversations = []
        for channel in channels:
            others = [profiles.get(uid) for uid in members.get(channel.id, []) if uid != user_id]
            participants = [
                ParticipantRead(id=p.id, display_name=display_name(p), avatar_url=p.avatar_url)
                for p in others
                if p is not None
            ]
            if channel.type == DIRECT_CHANNEL and participants:
                name = participants[0].display_name
            else:
                name = channel.name or ", ".join(p.display_name for p in participants) or "Conversation"
            last = latest.get(channel.id)
            conversations.append(
                ConversationRead(
                    id=channel.id,
                    name=name,
                    type=channel.type,
                    participants=participants,
                    last_message=last.content if last else None,
                    last_message_at=last.created_at if last else channel.created_at,
                    unread_count=unread.get(f"/messages/{channel.id}", 0),
                )
            )
        conversations.sort(key=lambda c: c.last_message_at, reverse=True)
        return conversations

    return await cached_fetch(cache, conversations_key(user_id), load, CACHE_EXPIRY["MEDIUM"])


@router.post(
    "/start-dm",
    response_model=StartDMResponse,
    summary="Start Direct Message",
    description="Open the direct conversation with another user, reusing an existing one.",
    responses={
        400: {"description": "userIds must contain exactly one other user"},
        404: {"description": "User not found"},
    },
)
async def start_direct_message(
    body: StartDMRequest, user: CurrentUserDep, session: SessionDep, cache: CacheDep
) -> StartDMResponse:
    """
    Start a direct conversation.

    - **userIds**: List holding the ID of exactly one user other than the caller.
    """
    if not isinstance(body.userIds, list):
        raise BadRequestError("userIds must be a list")
    others = list(dict.fromkeys(uid for uid in body.userIds if uid and uid != user.id))
    if len(others) != 1:
        raise BadRequestError("Direct messages need exactly one other user")
    other_id = others[0]
    if await ProfileRepository(session).get_by_id(other_id) is None:
        raise NotFoundError("User", other_id)

    user_id = user.id
    channels = ChannelRepository(session)
    channel = await channels.find_direct_channel(user_id, other_id)
    if channel is not None:
        return StartDMResponse(channelId=channel.id, isExisting=True, message="Existing conversation found")

    channel = await channels.create_with_participants(
        Channel(type=DIRECT_CHANNEL, created_by=user_id), [user_id, other_id]
    )
    invalidate_conversations(cache, [user_id, other_id])
    logger.info(f"User '{user_id}' started direct conversation '{channel.id}' with '{other_id}'")
    return StartDMResponse(channelId=channel.id, isExisting=False, message="Conversation created")


@router.post(
    "/start-group",
    response_model=StartGroupResponse,
    summary="Start Group Conversation",
    description="Create a named group conversation, or reuse one with the same name and members.",
    responses={
        400: {"description": "name missing or participantIds is not a list"},
    },
)
async def start_group(
    body: StartGroupRequest, user: CurrentUserDep, session: SessionDep, cache: CacheDep
) -> StartGroupResponse:
    """
    Start a group conversation.

    - **name**: Group name.
    - **participantIds**: List of user IDs; the caller is always added.
    """
    if not body.name:
        raise BadRequestError("Group name is required")
    if not isinstance(body.participantIds, list):
        raise BadRequestError("participantIds must be a list")

    user_id = user.id
    participant_ids = [uid for uid in dict.fromkeys(body.participantIds) if uid and uid != user_id]
    channel, is_existing = await ChannelRepository(session).create_or_get_group_channel(
        body.name, user_id, participant_ids
    )
    invalidate_conversations(cache, [user_id, *participant_ids])
    return StartGroupResponse(channelId=channel.id, isExisting=is_existing)


@router.get(
    "/{channel_id}",
    response_model=List[MessageRead],
    summary="List Messages",
    description="Messages of a conversation, oldest first, with their attachments.",
    responses={
        403: {"description": "Caller is not a participant"},
        404: {"description": "Conversation not found"},
    },
)
async def list_messages(
    channel_id: str, user: CurrentUserDep, session: SessionDep, cache: CacheDep
) -> List[MessageRead]:
    await _require_participant(ChannelRepository(session), channel_id, user.id)

    async def load() -> List[MessageRead]:
        messages_repo = MessageRepository(session)
        messages = await messages_repo.list_for_channel(channel_id)
        attachments = await messages_repo.attachments_for([m.id for m in messages])
        return [
            MessageRead(
                id=m.id,
                channel_id=m.channel_id,
                sender_id=m.sender_id,
                content=m.content,
                created_at=m.created_at,
                attachments=[AttachmentRead.model_validate(a) for a in attachments.get(m.id, [])],
            )
            for m in messages
        ]

    return await cached_fetch(cache, messages_key(channel_id), load, CACHE_EXPIRY["SHORT"])


@router.post(
    "/{channel_id}",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Post Message",
    description="Post a message with optional attachments to a conversation.",
    responses={
        400: {"description": "Neither content nor attachments given"},
        403: {"description": "Caller is not a participant"},
        404: {"description": "Conversation not found"},
    },
)
async def post_message(
    channel_id: str,
    body: ChannelMessageCreate,
    user: CurrentUserDep,
    session: SessionDep,
    cache: CacheDep,
) -> MessageRead:
    """
    Post a message.

    - **content**: Message text.
    - **attachments**: Objects already uploaded to the attachments bucket.
    """
    if not body.content and not body.attachments:
        raise BadRequestError("Message content or attachments are required")
    await _require_participant(ChannelRepository(session), channel_id, user.id)

    attachments = [MessageAttachment(message_id="", **a.model_dump()) for a in body.attachments]
    message = await _post_message(session, cache, user, channel_id, body.content or "", attachments)
    return MessageRead(
        id=message.id,
        channel_id=message.channel_id,
        sender_id=message.sender_id,
        content=message.content,
        created_at=message.created_at,
        attachments=[AttachmentRead.model_validate(a) for a in attachments],
    )


@router.delete(
    "/{channel_id}",
    response_model=DeleteConversationResponse,
    summary="Delete Conversation",
    description="Delete a conversation with all its messages and attachments.",
    responses={
        403: {"description": "Caller is not a participant"},
        404: {"description": "Conversation not found"},
    },
)
async def delete_conversation(
    channel_id: str,
    user: CurrentUserDep,
    session: SessionDep,
    cache: CacheDep,
    storage: StorageDep,
) -> DeleteConversationResponse:
    """
    Delete a conversation.

    Messages, attachments, participants and the channel are removed in one
    transaction. Stored attachment files are removed afterwards; failures
    there are logged and do not fail the request.
    """
    user_id = user.id
    channels = ChannelRepository(session)
    await _require_participant(channels, channel_id, user_id)
    participant_ids = await channels.participant_ids(channel_id)

    result = await channels.delete_conversation(channel_id, user_id)
    if not result.success:
        raise ForbiddenError("You are not a participant in this conversation")

    if result.attachment_paths:
        try:
            await storage.remove(settings.storage.attachments_bucket, result.attachment_paths)
        except StorageError as e:
            logger.warning(f"Could not remove attachments of conversation '{channel_id}': {e}")

    cache.remove(messages_key(channel_id))
    invalidate_conversations(cache, participant_ids)
    logger.info(f"User '{user_id}' deleted conversation '{channel_id}' ({len(result.message_ids)} messages)")
    return DeleteConversationResponse(
        success=True,
        message="Conversation deleted successfully",
        channelId=channel_id,
        channelName=result.channel_name,
    )
