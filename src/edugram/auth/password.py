"""Password hashing with argon2id."""

from __future__ import annotations

import argon2

from edugram.errors import ValidationError

# Matches the identity provider the frontend was built against
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches. Never raises on mismatch or a corrupt hash."""
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def validate_password(password: str) -> None:
    """Raise ValidationError unless the password has an acceptable length."""
    if not password or not password.strip():
        raise ValidationError("Password cannot be empty")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValidationError(f"Password must not exceed {MAX_PASSWORD_LENGTH} characters")
