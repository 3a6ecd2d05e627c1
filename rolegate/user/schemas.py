"""User domain schemas.

Response schemas for profile operations. Responses use camelCase keys.

Security notes:
- status_changed_by is internal-only and has no field here, so it can never
  leak through a response
- PublicProfileRead is what other users see; it honours show_location
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

from rolegate.user.models import UserProfile, UserStatus


def _iso_utc(value: datetime | None) -> str | None:
    """Format datetime as ISO 8601 in UTC with a Z suffix (2026-01-19T12:34:56Z)."""
    if value is None:
        return None
    if value.tzinfo is not None:
        utc_value = value.astimezone(UTC)
    else:
        # SQLite hands back naive datetimes; they were written as UTC.
        utc_value = value.replace(tzinfo=UTC)
    return utc_value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


class ProfileSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class PublicProfileRead(ProfileSchema):
    """Profile fields visible to anyone."""

    id: str
    display_name: str
    profile_picture: str | None
    bio: str | None
    location: str | None
    website: str | None
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str | None:
        return _iso_utc(value)

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "PublicProfileRead":
        public = cls.model_validate(profile)
        if not profile.show_location:
            public.location = None
        return public


class ProfileRead(ProfileSchema):
    """The signed-in user's own profile."""

    id: str
    email: str
    display_name: str
    profile_picture: str | None
    bio: str | None
    location: str | None
    website: str | None
    show_location: bool
    status: UserStatus
    identity_provider: str
    login_count: int
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None

    @field_serializer("created_at", "updated_at", "last_login_at")
    def serialize_datetime(self, value: datetime | None) -> str | None:
        return _iso_utc(value)


class SyncResponse(ProfileSchema):
    user: ProfileRead
    is_new_user: bool
