"""Verification endpoints: /verification/submit and /verification/status."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from edugram.auth.dependencies import get_current_user_id
from edugram.db.models import CamelModel, VerificationRecord
from edugram.profiles.router import read_upload
from edugram.storage.blob import BlobStorage, get_blob_storage
from edugram.store import KeyValueStore, get_store
from edugram.verification.service import get_status, submit_verification

router = APIRouter(prefix="/verification", tags=["Verification"])


class SubmitVerificationResponse(CamelModel):
    message: str = "Verification submitted successfully"
    verification: VerificationRecord


class VerificationStatusResponse(CamelModel):
    verification: VerificationRecord | None


@router.post("/submit", response_model=SubmitVerificationResponse)
async def submit(
    full_name: str = Form("", alias="fullName"),
    dob: str = Form(""),
    college_name: str = Form("", alias="collegeName"),
    college_place: str = Form("", alias="collegePlace"),
    id_card: UploadFile | None = File(None, alias="idCard"),
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
    blobs: BlobStorage = Depends(get_blob_storage),
) -> SubmitVerificationResponse:
    """Submit student details and an ID card for review."""
    record = await submit_verification(
        store,
        blobs,
        user_id,
        full_name=full_name,
        dob=dob,
        college_name=college_name,
        college_place=college_place,
        id_card=await read_upload(id_card),
    )
    return SubmitVerificationResponse(verification=record)


@router.get("/status", response_model=VerificationStatusResponse)
async def status(
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> VerificationStatusResponse:
    return VerificationStatusResponse(verification=await get_status(store, user_id))
