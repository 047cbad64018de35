"""Messaging endpoints. Clients poll GET /messages/{conversationId} for new messages."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from edugram.auth.dependencies import get_current_user_id
from edugram.db.models import CamelModel, ConversationSummary, Message
from edugram.messaging.service import (
    list_conversations,
    list_messages,
    mark_conversation_read,
    send_message,
    start_conversation,
)
from edugram.store import KeyValueStore, get_store

router = APIRouter(prefix="/messages", tags=["Messages"])


class StartConversationRequest(CamelModel):
    recipient_id: str = ""


class StartConversationResponse(CamelModel):
    conversation_id: str


class ConversationListResponse(CamelModel):
    conversations: list[ConversationSummary]


class SendMessageRequest(CamelModel):
    content: str = ""
    recipient_id: str = ""


class MessageResponse(CamelModel):
    message: Message


class MessageListResponse(CamelModel):
    messages: list[Message]


class ConversationResponse(CamelModel):
    conversation: ConversationSummary


@router.post("/start", response_model=StartConversationResponse)
async def start(
    body: StartConversationRequest,
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> StartConversationResponse:
    """Start (or reopen) a conversation with another user."""
    conversation_id = await start_conversation(store, user_id, body.recipient_id)
    return StartConversationResponse(conversation_id=conversation_id)


@router.get("/conversations", response_model=ConversationListResponse)
async def conversations(
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> ConversationListResponse:
    return ConversationListResponse(conversations=await list_conversations(store, user_id))


@router.get("/{conversation_id}", response_model=MessageListResponse)
async def messages(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> MessageListResponse:
    return MessageListResponse(messages=await list_messages(store, conversation_id, user_id))


@router.post("/{conversation_id}", response_model=MessageResponse)
async def send(
    conversation_id: str,
    body: SendMessageRequest,
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> MessageResponse:
    message = await send_message(store, conversation_id, user_id, body.recipient_id, body.content)
    return MessageResponse(message=message)


@router.post("/{conversation_id}/read", response_model=ConversationResponse)
async def read(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> ConversationResponse:
    """Clear the caller's unread flag."""
    return ConversationResponse(conversation=await mark_conversation_read(store, user_id, conversation_id))
