"""FastAPI authentication dependencies."""

from __future__ import annotations

from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from edugram.auth.jwt import verify_token
from edugram.errors import Unauthorized

# auto_error=False so a missing header is a 401 with our error body
_bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> str:
    """Resolve the bearer token to the caller's internal user id."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("No authorization token provided")
    payload = verify_token(credentials.credentials)
    return str(payload["sub"])
