"""Authentication router: /auth/signup and /auth/signin."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from edugram.auth.jwt import create_access_token
from edugram.auth.schemas import AuthUser, SigninRequest, SigninResponse, SignupRequest, SignupResponse
from edugram.auth.service import authenticate, register_credentials, remove_credentials
from edugram.config import get_settings
from edugram.errors import EdugramError, ValidationError
from edugram.profiles.service import create_profile, is_accepted_email, load_profile
from edugram.store import KeyValueStore, get_store

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=SignupResponse)
async def signup(
    body: SignupRequest,
    store: KeyValueStore = Depends(get_store),
) -> SignupResponse:
    """Register with a college email and create the user's profile."""
    if not is_accepted_email(body.email):
        logger.info("signup_rejected", reason="email_domain")
        suffixes = ", ".join(get_settings().accepted_email_suffixes)
        raise ValidationError(f"Please use a valid college email or test email ({suffixes})")

    user_id = await register_credentials(store, body.email, body.password)
    try:
        profile = await create_profile(store, user_id, body.email, body.full_name)
    except EdugramError:
        # Don't leave a login behind that has no profile
        await remove_credentials(store, body.email)
        raise

    return SignupResponse(user=AuthUser(id=user_id, email=body.email), user_id=profile.user_id)


@router.post("/signin", response_model=SigninResponse)
async def signin(
    body: SigninRequest,
    store: KeyValueStore = Depends(get_store),
) -> SigninResponse:
    """Exchange email/password for a bearer token plus the caller's profile."""
    user_id = await authenticate(store, body.email, body.password)
    profile = await load_profile(store, user_id)
    logger.info("signin_succeeded", user_id=user_id)
    return SigninResponse(
        access_token=create_access_token(user_id, body.email),
        user=AuthUser(id=user_id, email=body.email),
        profile=profile,
    )
