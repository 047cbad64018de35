"""Persisted record types.

Each record is stored as a JSON document in the key-value store and is also
the JSON shape returned by the API, so field names serialise as camelCase.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

VerificationStatus = Literal["unset", "pending", "approved"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Time-ordered random identifier, e.g. ``post_1736940000000_3fa94c1b``."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


class CamelModel(BaseModel):
    """Base model using camelCase aliases on the wire and in storage."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, doc: dict[str, Any]):  # noqa: ANN206
        return cls.model_validate(doc)


# ---------------------------------------------------------------------------
# Profiles & verification
# ---------------------------------------------------------------------------


class UserProfile(CamelModel):
    """One record per user, key ``user:{id}``."""

    id: str
    user_id: str  # human-facing display id, e.g. student_2025_K3ZQ
    email: str
    full_name: str
    dob: str | None = None
    college_name: str | None = None
    college_place: str | None = None
    department: str | None = None
    year: str | None = None
    bio: str | None = None
    profile_picture: str | None = None
    id_card_path: str | None = None
    verified: bool = False
    verification_status: VerificationStatus = "unset"
    profile_completed: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    verification_submitted_at: datetime | None = None
    verified_at: datetime | None = None
    profile_completed_at: datetime | None = None


class VerificationRecord(CamelModel):
    """Audit copy of a user's verification state, key ``verification:{id}``."""

    user_id: str  # internal id
    status: VerificationStatus
    id_card_path: str | None = None
    full_name: str | None = None
    college_name: str | None = None
    college_place: str | None = None
    submitted_at: datetime | None = None
    review_due_at: datetime | None = None
    approved_at: datetime | None = None


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class Post(CamelModel):
    """Key ``post:{id}``. Author fields are captured at creation time."""

    id: str
    author_id: str
    author_name: str
    author_department: str | None = None
    author_profile_picture: str | None = None
    author_college: str | None = None
    content: str
    image: str | None = None
    is_college_community_only: bool = False
    likes: int = 0
    liked_by: list[str] = Field(default_factory=list)
    comments: int = 0
    shares: int = 0
    created_at: datetime = Field(default_factory=utcnow)


class Comment(CamelModel):
    """Key ``comment:{postId}:{id}``."""

    id: str
    post_id: str
    author_id: str
    author_name: str
    author_profile_picture: str | None = None
    content: str
    created_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class Notification(CamelModel):
    """Key ``notification:{ownerId}:{id}``."""

    id: str
    user_id: str  # owner
    type: str
    message: str
    title: str | None = None
    from_user: str | None = None
    post_id: str | None = None
    read: bool = False
    created_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Messaging
# ---------------------------------------------------------------------------


class ConversationSummary(CamelModel):
    """One participant's view of a conversation, key ``conversation:{ownerId}:{id}``."""

    id: str
    user_id: str  # owner of this copy
    other_user_id: str
    other_user_name: str
    other_user_profile_picture: str | None = None
    other_user_department: str | None = None
    last_message: str = ""
    last_message_at: datetime = Field(default_factory=utcnow)
    unread: bool = False


class Message(CamelModel):
    """Key ``message:{conversationId}:{id}``."""

    id: str
    conversation_id: str
    sender_id: str
    recipient_id: str
    content: str
    read: bool = False
    created_at: datetime = Field(default_factory=utcnow)
