"""
Student verification workflow.

States move forward only: unset -> pending -> approved. Submitting stores a
``reviewDueAt`` on the verification record; approval happens when a sweep
(``process_due``) finds the record pending and due. Because the due time is
persisted, approvals survive restarts and are picked up by the next sweep.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from edugram.config import get_settings
from edugram.db.models import VerificationRecord, utcnow
from edugram.errors import ValidationError
from edugram.notifications.service import VERIFICATION_APPROVED, push_notification
from edugram.profiles.service import get_profile, load_profile, save_profile
from edugram.storage.blob import COLLEGE_IDS

if TYPE_CHECKING:
    from edugram.storage.blob import BlobStorage, Upload
    from edugram.store import KeyValueStore

logger = structlog.get_logger()

VALID_TRANSITIONS: dict[str, list[str]] = {
    "unset": ["pending"],
    "pending": ["pending", "approved"],  # resubmission reschedules review
    "approved": [],
}

APPROVED_TITLE = "Verification Approved"
APPROVED_MESSAGE = "Your student status has been verified successfully!"


def verification_key(user_id: str) -> str:
    return f"verification:{user_id}"


def approval_notification_id(user_id: str) -> str:
    return f"notif_verification_{user_id}"


def validate_transition(current: str, target: str) -> None:
    """Raise ValidationError if ``current -> target`` is not allowed."""
    if target not in VALID_TRANSITIONS.get(current, []):
        if current == "approved":
            raise ValidationError("Student status is already verified")
        raise ValidationError(f"Invalid transition: {current} -> {target}")


async def get_status(store: KeyValueStore, user_id: str) -> VerificationRecord | None:
    doc = await store.get(verification_key(user_id))
    return VerificationRecord.from_document(doc) if doc else None


async def submit_verification(
    store: KeyValueStore,
    blobs: BlobStorage,
    user_id: str,
    full_name: str,
    dob: str,
    college_name: str,
    college_place: str,
    id_card: Upload | None,
    now: datetime | None = None,
) -> VerificationRecord:
    """
    Record a verification request and schedule its review.

    Raises:
        ValidationError: If a field or the ID card is missing, or the user is already verified.
        NotFound: If the user has no profile.
        UpstreamFailure: If the ID card upload fails.
    """
    fields = [(full_name or "").strip(), (dob or "").strip(), (college_name or "").strip(), (college_place or "").strip()]
    if not all(fields) or id_card is None or not id_card.data:
        raise ValidationError("Missing required fields")
    full_name, dob, college_name, college_place = fields

    profile = await get_profile(store, user_id)
    validate_transition(profile.verification_status, "pending")

    stored = await blobs.store(COLLEGE_IDS, user_id, id_card.filename, id_card.data)

    now = now or utcnow()
    review_due_at = now + timedelta(seconds=get_settings().verification_review_delay_seconds)

    profile.full_name = full_name
    profile.dob = dob
    profile.college_name = college_name
    profile.college_place = college_place
    profile.id_card_path = stored.path
    profile.verification_status = "pending"
    profile.verification_submitted_at = now
    await save_profile(store, profile)

    record = VerificationRecord(
        user_id=user_id,
        status="pending",
        id_card_path=stored.path,
        full_name=full_name,
        college_name=college_name,
        college_place=college_place,
        submitted_at=now,
        review_due_at=review_due_at,
    )
    await store.set(verification_key(user_id), record.to_document())

    logger.info("verification_submitted", user_id=user_id, review_due_at=review_due_at.isoformat())
    return record


async def approve(store: KeyValueStore, user_id: str, now: datetime | None = None) -> bool:
    """
    Approve a pending verification. Returns False if there was nothing to approve.

    Writes happen profile -> notification -> record. The record is written last
    because its status is what the sweep checks, so an interrupted approval is
    retried; the notification uses a fixed id so a retry doesn't duplicate it.
    """
    record = await get_status(store, user_id)
    if record is None or record.status != "pending":
        return False

    now = now or utcnow()
    profile = await load_profile(store, user_id)
    if profile is not None:
        profile.verified = True
        profile.verification_status = "approved"
        profile.verified_at = now
        await save_profile(store, profile)

    await push_notification(
        store,
        user_id,
        VERIFICATION_APPROVED,
        APPROVED_MESSAGE,
        title=APPROVED_TITLE,
        notification_id=approval_notification_id(user_id),
    )

    record.status = "approved"
    record.approved_at = now
    record.review_due_at = None
    await store.set(verification_key(user_id), record.to_document())

    logger.info("verification_approved", user_id=user_id)
    return True


async def process_due(store: KeyValueStore, now: datetime | None = None) -> int:
    """Approve every pending verification whose review is due. Returns count approved."""
    now = now or utcnow()
    approved = 0
    for doc in await store.get_by_prefix("verification:"):
        record = VerificationRecord.from_document(doc)
        if record.status != "pending" or record.review_due_at is None or record.review_due_at > now:
            continue
        if await approve(store, record.user_id, now=now):
            approved += 1
    return approved
