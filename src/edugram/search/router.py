"""User search and lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from edugram.auth.dependencies import get_current_user_id
from edugram.db.models import CamelModel
from edugram.profiles.schemas import PublicProfile, PublicProfileResponse
from edugram.profiles.service import find_profile
from edugram.search.service import search_users
from edugram.store import KeyValueStore, get_store

router = APIRouter(prefix="/users", tags=["Users"])


class UserSearchResponse(CamelModel):
    users: list[PublicProfile]


@router.get("/search", response_model=UserSearchResponse)
async def search(
    q: str = Query(""),
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> UserSearchResponse:
    """Search users by display id or name."""
    results = await search_users(store, q, exclude_user_id=user_id)
    return UserSearchResponse(users=[PublicProfile.of(p) for p in results])


@router.get("/{identifier}", response_model=PublicProfileResponse)
async def get_user(
    identifier: str,
    _user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> PublicProfileResponse:
    """Public profile by display id (``student_2025_XXXX``) or internal id."""
    profile = await find_profile(store, identifier)
    return PublicProfileResponse(profile=PublicProfile.of(profile))
