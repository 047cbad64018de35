"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from pydantic import Field, field_validator

from edugram.db.models import CamelModel, UserProfile


def _normalize_email(v: str) -> str:
    v = v.lower().strip()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


class SignupRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name cannot be blank")
        return v


class SigninRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class AuthUser(CamelModel):
    id: str
    email: str


class SignupResponse(CamelModel):
    user: AuthUser
    user_id: str
    message: str = "Account created successfully"


class SigninResponse(CamelModel):
    access_token: str
    user: AuthUser
    profile: UserProfile | None = None
