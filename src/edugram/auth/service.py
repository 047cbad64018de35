"""
Identity gateway.

Owns credentials (``auth:email:{email}``) and nothing else: it turns an
email/password into a stable internal user id and never touches profiles.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog

from edugram.auth.password import hash_password, validate_password, verify_password
from edugram.db.models import utcnow
from edugram.errors import DuplicateUser, Unauthorized

if TYPE_CHECKING:
    from edugram.store import KeyValueStore

logger = structlog.get_logger()


def credential_key(email: str) -> str:
    return f"auth:email:{email.lower()}"


async def register_credentials(store: KeyValueStore, email: str, password: str) -> str:
    """
    Create a login for ``email`` and return the new internal user id.

    Raises:
        ValidationError: If the password is unacceptable.
        DuplicateUser: If the email is already registered.
    """
    validate_password(password)
    user_id = uuid.uuid4().hex
    created = await store.set_if_absent(
        credential_key(email),
        {
            "id": user_id,
            "email": email.lower(),
            "passwordHash": hash_password(password),
            "createdAt": utcnow().isoformat(),
        },
    )
    if not created:
        raise DuplicateUser("A user with this email address has already been registered")
    logger.info("credentials_registered", user_id=user_id)
    return user_id


async def authenticate(store: KeyValueStore, email: str, password: str) -> str:
    """Return the internal user id for a valid email/password pair."""
    record = await store.get(credential_key(email))
    if record is None or not verify_password(password, record["passwordHash"]):
        logger.info("signin_rejected", reason="invalid_credentials")
        raise Unauthorized("Invalid login credentials")
    return str(record["id"])


async def remove_credentials(store: KeyValueStore, email: str) -> None:
    """Drop a login created for a signup that failed to complete."""
    await store.delete(credential_key(email))
