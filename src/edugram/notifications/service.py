"""Notification creation and delivery.

Notifications are append-only records under ``notification:{ownerId}:``,
written by verification approval, likes and comments and read back by the
owner. The only mutation is marking one read.

Types: verification-approved, like, comment
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from edugram.db.models import Notification, new_id
from edugram.errors import NotFound

if TYPE_CHECKING:
    from edugram.store import KeyValueStore

logger = structlog.get_logger()

VERIFICATION_APPROVED = "verification-approved"
LIKE = "like"
COMMENT = "comment"


def notification_key(owner_id: str, notification_id: str) -> str:
    return f"notification:{owner_id}:{notification_id}"


async def push_notification(
    store: KeyValueStore,
    owner_id: str,
    type_: str,
    message: str,
    from_user: str | None = None,
    post_id: str | None = None,
    title: str | None = None,
    notification_id: str | None = None,
) -> Notification:
    """Append a notification for ``owner_id``.

    No deduplication unless the caller passes a fixed ``notification_id``, in
    which case a record already under that id is kept as is (read state
    included) and returned.
    """
    notification = Notification(
        id=notification_id or new_id("notif"),
        user_id=owner_id,
        type=type_,
        title=title,
        message=message,
        from_user=from_user,
        post_id=post_id,
    )
    key = notification_key(owner_id, notification.id)
    if notification_id is None:
        await store.set(key, notification.to_document())
    elif not await store.set_if_absent(key, notification.to_document()):
        existing = await store.get(key)
        if existing is not None:
            return Notification.from_document(existing)
    logger.info("notification_pushed", owner_id=owner_id, type=type_, notification_id=notification.id)
    return notification


async def push_notification_best_effort(store: KeyValueStore, owner_id: str, type_: str, message: str, **kwargs) -> None:  # noqa: ANN003
    """Push a notification whose failure must not fail the action that triggered it."""
    try:
        await push_notification(store, owner_id, type_, message, **kwargs)
    except Exception:
        logger.warning("notification_push_failed", owner_id=owner_id, type=type_, exc_info=True)


async def list_notifications(store: KeyValueStore, owner_id: str) -> list[Notification]:
    """All of the owner's notifications, most recent first."""
    docs = await store.get_by_prefix(f"notification:{owner_id}:")
    notifications = [Notification.from_document(doc) for doc in docs if doc.get("id")]
    notifications.sort(key=lambda n: n.created_at, reverse=True)
    return notifications


async def mark_as_read(store: KeyValueStore, owner_id: str, notification_id: str) -> Notification:
    """Mark one notification read. Marking an already-read notification is a no-op."""
    key = notification_key(owner_id, notification_id)
    doc = await store.get(key)
    if doc is None:
        raise NotFound("Notification not found")
    notification = Notification.from_document(doc)
    if not notification.read:
        notification.read = True
        await store.set(key, notification.to_document())
    return notification


async def mark_all_as_read(store: KeyValueStore, owner_id: str) -> int:
    """Mark every unread notification read. Returns count updated."""
    count = 0
    for notification in await list_notifications(store, owner_id):
        if notification.read:
            continue
        notification.read = True
        await store.set(notification_key(owner_id, notification.id), notification.to_document())
        count += 1
    return count


async def get_unread_count(store: KeyValueStore, owner_id: str) -> int:
    return sum(1 for n in await list_notifications(store, owner_id) if not n.read)
