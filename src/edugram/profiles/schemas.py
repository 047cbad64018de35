"""Profile request/response schemas."""

from __future__ import annotations

from edugram.db.models import CamelModel, UserProfile


class PublicProfile(CamelModel):
    """What other users may see of a profile."""

    id: str
    user_id: str
    full_name: str
    department: str | None = None
    year: str | None = None
    college_name: str | None = None
    profile_picture: str | None = None
    bio: str | None = None
    verified: bool = False

    @classmethod
    def of(cls, profile: UserProfile) -> PublicProfile:
        return cls.model_validate(profile.model_dump(include=set(cls.model_fields)))


class ProfileResponse(CamelModel):
    profile: UserProfile | None


class PublicProfileResponse(CamelModel):
    profile: PublicProfile
