"""
Access token issue and verification.

Tokens are HS256-signed JWTs whose ``sub`` claim is the user's internal id.
This is the only thing the rest of the API learns from a bearer credential.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from edugram.config import get_settings
from edugram.errors import Unauthorized


def create_access_token(user_id: str, email: str) -> str:
    """Create a signed access token for ``user_id``."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "iss": settings.jwt_issuer,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        Unauthorized: If the token is malformed, forged, expired, or not an access token.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired") from None
    except jwt.InvalidTokenError as e:
        raise Unauthorized("Unauthorized - Invalid token") from e

    if payload.get("type") != "access" or not payload.get("sub"):
        raise Unauthorized("Unauthorized - Invalid token")
    return payload
