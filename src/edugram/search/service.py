"""User search: case-insensitive substring match over every profile."""

from __future__ import annotations

from typing import TYPE_CHECKING

from edugram.errors import ValidationError
from edugram.profiles.service import list_profiles

if TYPE_CHECKING:
    from edugram.db.models import UserProfile
    from edugram.store import KeyValueStore


def matches(profile: UserProfile, needle: str) -> bool:
    """True if ``needle`` (already lowercased) occurs in the display id or full name."""
    return needle in profile.user_id.lower() or needle in profile.full_name.lower()


async def search_users(store: KeyValueStore, query: str, exclude_user_id: str) -> list[UserProfile]:
    """Scan all profiles for ``query``, leaving out the caller. Unranked, unpaginated."""
    needle = (query or "").strip().lower()
    if not needle:
        raise ValidationError("Search query is required")
    profiles = await list_profiles(store)
    return [p for p in profiles if p.id != exclude_user_id and matches(p, needle)]
