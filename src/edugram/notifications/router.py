"""Notification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from edugram.auth.dependencies import get_current_user_id
from edugram.db.models import CamelModel, Notification
from edugram.notifications.service import get_unread_count, list_notifications, mark_all_as_read, mark_as_read
from edugram.store import KeyValueStore, get_store

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class NotificationListResponse(CamelModel):
    notifications: list[Notification]


class NotificationResponse(CamelModel):
    notification: Notification


class UnreadCountResponse(CamelModel):
    unread_count: int


class MarkAllReadResponse(CamelModel):
    updated: int


@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    return NotificationListResponse(notifications=await list_notifications(store, user_id))


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await get_unread_count(store, user_id))


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=await mark_all_as_read(store, user_id))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> NotificationResponse:
    """Mark a notification as read."""
    return NotificationResponse(notification=await mark_as_read(store, user_id, notification_id))
