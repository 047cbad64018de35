"""Own-profile endpoints: /profile and /profile/complete."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from edugram.auth.dependencies import get_current_user_id
from edugram.profiles.schemas import ProfileResponse
from edugram.profiles.service import complete_profile, load_profile
from edugram.storage.blob import BlobStorage, Upload, get_blob_storage
from edugram.store import KeyValueStore, get_store

router = APIRouter(prefix="/profile", tags=["Profile"])


async def read_upload(file: UploadFile | None) -> Upload | None:
    """Read a multipart file field, treating an absent or nameless part as no upload."""
    if file is None or not file.filename:
        return None
    return Upload(filename=file.filename, data=await file.read())


@router.get("", response_model=ProfileResponse)
async def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> ProfileResponse:
    return ProfileResponse(profile=await load_profile(store, user_id))


@router.post("/complete", response_model=ProfileResponse)
async def complete_my_profile(
    department: str = Form(""),
    year: str = Form(""),
    bio: str = Form(""),
    profile_picture: UploadFile | None = File(None, alias="profilePicture"),
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
    blobs: BlobStorage = Depends(get_blob_storage),
) -> ProfileResponse:
    """Finish onboarding: department, year, bio and optional profile picture."""
    profile = await complete_profile(
        store,
        blobs,
        user_id,
        department=department,
        year=year,
        bio=bio,
        picture=await read_upload(profile_picture),
    )
    return ProfileResponse(profile=profile)
