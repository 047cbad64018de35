"""
Pairwise messaging.

A conversation between two users has one id both sides can compute on their
own: ``conv_{lower id}_{higher id}``. Each participant owns a summary copy
(``conversation:{ownerId}:{conversationId}``) holding the other party's
display info, the last message and an unread flag. Messages themselves are
append-only under ``message:{conversationId}:``.

Delivery is by polling ``list_messages``; there is no push channel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from edugram.db.models import ConversationSummary, Message, new_id, utcnow
from edugram.errors import Forbidden, NotFound, ValidationError
from edugram.profiles.service import get_profile, load_profile

if TYPE_CHECKING:
    from datetime import datetime

    from edugram.db.models import UserProfile
    from edugram.store import KeyValueStore

logger = structlog.get_logger()


def conversation_id_for(user_a: str, user_b: str) -> str:
    low, high = sorted((user_a, user_b))
    return f"conv_{low}_{high}"


def is_participant(conversation_id: str, user_id: str) -> bool:
    return conversation_id.startswith(f"conv_{user_id}_") or conversation_id.endswith(f"_{user_id}")


def summary_key(owner_id: str, conversation_id: str) -> str:
    return f"conversation:{owner_id}:{conversation_id}"


def message_key(conversation_id: str, message_id: str) -> str:
    return f"message:{conversation_id}:{message_id}"


def _summary(
    conversation_id: str,
    owner_id: str,
    other: UserProfile,
    last_message: str,
    last_message_at: datetime,
    unread: bool,
) -> ConversationSummary:
    return ConversationSummary(
        id=conversation_id,
        user_id=owner_id,
        other_user_id=other.id,
        other_user_name=other.full_name,
        other_user_profile_picture=other.profile_picture,
        other_user_department=other.department,
        last_message=last_message,
        last_message_at=last_message_at,
        unread=unread,
    )


async def _load_summary(store: KeyValueStore, owner_id: str, conversation_id: str) -> ConversationSummary | None:
    doc = await store.get(summary_key(owner_id, conversation_id))
    return ConversationSummary.from_document(doc) if doc else None


async def _save_summary(store: KeyValueStore, summary: ConversationSummary) -> None:
    await store.set(summary_key(summary.user_id, summary.id), summary.to_document())


async def start_conversation(store: KeyValueStore, user_id: str, recipient_id: str) -> str:
    """
    Return the conversation id for the pair, creating empty summaries where missing.

    Existing summaries are left alone so restarting a conversation never
    clears its last message or unread flag.
    """
    if not recipient_id:
        raise ValidationError("Recipient ID is required")
    if recipient_id == user_id:
        raise ValidationError("Cannot start a conversation with yourself")

    recipient = await load_profile(store, recipient_id)
    if recipient is None:
        raise NotFound("Recipient not found")
    sender = await get_profile(store, user_id)

    conversation_id = conversation_id_for(user_id, recipient_id)
    now = utcnow()
    for owner_id, other in ((user_id, recipient), (recipient_id, sender)):
        if await _load_summary(store, owner_id, conversation_id) is None:
            await _save_summary(store, _summary(conversation_id, owner_id, other, "", now, unread=False))

    logger.info("conversation_started", conversation_id=conversation_id, user_id=user_id)
    return conversation_id


async def list_conversations(store: KeyValueStore, user_id: str) -> list[ConversationSummary]:
    """The user's conversation summaries, most recently active first."""
    docs = await store.get_by_prefix(f"conversation:{user_id}:")
    summaries = [ConversationSummary.from_document(doc) for doc in docs if doc.get("id")]
    summaries.sort(key=lambda s: s.last_message_at, reverse=True)
    return summaries


async def list_messages(store: KeyValueStore, conversation_id: str, user_id: str) -> list[Message]:
    """Messages in a conversation, oldest first. Only participants may read."""
    if not is_participant(conversation_id, user_id):
        raise Forbidden("Not a participant in this conversation")
    docs = await store.get_by_prefix(f"message:{conversation_id}:")
    messages = [Message.from_document(doc) for doc in docs if doc.get("id")]
    messages.sort(key=lambda m: m.created_at)
    return messages


async def send_message(
    store: KeyValueStore,
    conversation_id: str,
    sender_id: str,
    recipient_id: str,
    content: str,
) -> Message:
    """
    Append a message and refresh both participants' summaries.

    Only the recipient's summary is flagged unread.

    Raises:
        ValidationError: If content or recipient is missing.
        Forbidden: If the conversation id is not the sender/recipient pair's.
        NotFound: If either participant has no profile.
    """
    if not (content or "").strip():
        raise ValidationError("Message content is required")
    if not recipient_id:
        raise ValidationError("Recipient ID is required")
    if conversation_id != conversation_id_for(sender_id, recipient_id):
        raise Forbidden("Not a participant in this conversation")

    sender = await get_profile(store, sender_id)
    recipient = await load_profile(store, recipient_id)
    if recipient is None:
        raise NotFound("Recipient not found")

    message = Message(
        id=new_id("message"),
        conversation_id=conversation_id,
        sender_id=sender_id,
        recipient_id=recipient_id,
        content=content,
    )
    await store.set(message_key(conversation_id, message.id), message.to_document())

    # Sender's copy first: if the second write fails the recipient still
    # has the message itself, just a stale summary.
    at = message.created_at
    await _save_summary(store, _summary(conversation_id, sender_id, recipient, content, at, unread=False))
    await _save_summary(store, _summary(conversation_id, recipient_id, sender, content, at, unread=True))

    logger.info("message_sent", conversation_id=conversation_id, sender_id=sender_id, message_id=message.id)
    return message


async def mark_conversation_read(store: KeyValueStore, user_id: str, conversation_id: str) -> ConversationSummary:
    """Clear the caller's unread flag on a conversation."""
    summary = await _load_summary(store, user_id, conversation_id)
    if summary is None:
        raise NotFound("Conversation not found")
    if summary.unread:
        summary.unread = False
        await _save_summary(store, summary)
    return summary
