"""
Profile directory.

One ``user:{id}`` record per user. Display ids (``student_2025_K3ZQ``) are
reserved through ``handle:{displayId}`` so two users never share one.
"""

from __future__ import annotations

import secrets
import string
from typing import TYPE_CHECKING, Any

import structlog

from edugram.config import get_settings
from edugram.db.models import UserProfile, utcnow
from edugram.errors import DuplicateUser, NotFound, UpstreamFailure, ValidationError
from edugram.storage.blob import PROFILE_PICTURES

if TYPE_CHECKING:
    from edugram.storage.blob import BlobStorage, Upload
    from edugram.store import KeyValueStore

logger = structlog.get_logger()

DISPLAY_ID_CHARSET = string.digits + string.ascii_uppercase  # base36
DISPLAY_ID_SUFFIX_LENGTH = 4
MAX_DISPLAY_ID_ATTEMPTS = 10


def profile_key(user_id: str) -> str:
    return f"user:{user_id}"


def handle_key(display_id: str) -> str:
    return f"handle:{display_id}"


def generate_display_id(year: int) -> str:
    suffix = "".join(secrets.choice(DISPLAY_ID_CHARSET) for _ in range(DISPLAY_ID_SUFFIX_LENGTH))
    return f"student_{year}_{suffix}"


def is_accepted_email(email: str, suffixes: list[str] | None = None) -> bool:
    """True if ``email`` ends with one of the accepted college/test suffixes."""
    if suffixes is None:
        suffixes = get_settings().accepted_email_suffixes
    email = email.lower().strip()
    return any(email.endswith(suffix.lower()) for suffix in suffixes)


def _is_profile_document(doc: dict[str, Any]) -> bool:
    return bool(doc.get("id")) and bool(doc.get("userId"))


async def _reserve_display_id(store: KeyValueStore, user_id: str) -> str:
    year = get_settings().display_id_year
    for _ in range(MAX_DISPLAY_ID_ATTEMPTS):
        display_id = generate_display_id(year)
        if await store.set_if_absent(handle_key(display_id), {"id": user_id}):
            return display_id
        logger.warning("display_id_collision", display_id=display_id)
    raise UpstreamFailure(f"Failed to generate unique user id after {MAX_DISPLAY_ID_ATTEMPTS} attempts")


async def create_profile(store: KeyValueStore, user_id: str, email: str, full_name: str) -> UserProfile:
    """
    Create the profile for a freshly registered user.

    Raises:
        DuplicateUser: If ``user_id`` already has a profile.
    """
    display_id = await _reserve_display_id(store, user_id)
    profile = UserProfile(id=user_id, user_id=display_id, email=email, full_name=full_name)
    if not await store.set_if_absent(profile_key(user_id), profile.to_document()):
        await store.delete(handle_key(display_id))
        raise DuplicateUser("Profile already exists for this user")
    logger.info("profile_created", user_id=user_id, display_id=display_id)
    return profile


async def load_profile(store: KeyValueStore, user_id: str) -> UserProfile | None:
    doc = await store.get(profile_key(user_id))
    return UserProfile.from_document(doc) if doc else None


async def get_profile(store: KeyValueStore, user_id: str) -> UserProfile:
    profile = await load_profile(store, user_id)
    if profile is None:
        raise NotFound("User not found")
    return profile


async def save_profile(store: KeyValueStore, profile: UserProfile) -> None:
    await store.set(profile_key(profile.id), profile.to_document())


async def find_profile(store: KeyValueStore, identifier: str) -> UserProfile:
    """Look a user up by display id, falling back to internal id."""
    handle = await store.get(handle_key(identifier))
    if handle is not None:
        profile = await load_profile(store, str(handle["id"]))
        if profile is not None:
            return profile
    return await get_profile(store, identifier)


async def list_profiles(store: KeyValueStore) -> list[UserProfile]:
    docs = await store.get_by_prefix("user:")
    return [UserProfile.from_document(doc) for doc in docs if _is_profile_document(doc)]


async def complete_profile(
    store: KeyValueStore,
    blobs: BlobStorage,
    user_id: str,
    department: str,
    year: str,
    bio: str | None = None,
    picture: Upload | None = None,
) -> UserProfile:
    """
    Fill in department/year/bio, upload the picture if given, and mark the profile complete.

    Raises:
        ValidationError: If department or year is missing.
        NotFound: If the user has no profile.
        UpstreamFailure: If the picture upload fails.
    """
    department = (department or "").strip()
    year = (year or "").strip()
    if not department or not year:
        raise ValidationError("Department and year are required")

    profile = await get_profile(store, user_id)

    if picture is not None:
        stored = await blobs.store(PROFILE_PICTURES, user_id, picture.filename, picture.data)
        profile.profile_picture = stored.url

    profile.department = department
    profile.year = year
    profile.bio = (bio or "").strip() or None
    profile.profile_completed = True
    profile.profile_completed_at = utcnow()
    await save_profile(store, profile)

    logger.info("profile_completed", user_id=user_id, has_picture=picture is not None)
    return profile
