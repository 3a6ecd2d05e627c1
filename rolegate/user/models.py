"""User domain models.

SQLModel table definition for UserProfile.
"""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from rolegate.core.mixins import TimestampMixin


class UserStatus(str, Enum):
    """Profile status.

    - active: normal account
    - blocked: barred by an admin; may not read or change the profile
    - pending: reserved for accounts awaiting review
    """

    active = "active"
    blocked = "blocked"
    pending = "pending"


class UserProfile(TimestampMixin, SQLModel, table=True):
    """User profile keyed by the identity provider's user id.

    email is the fallback lookup key for users whose provider id changed
    (e.g. after an identity provider migration).

    Note: status_changed_by is internal-only and must never be exposed in
    API responses.
    """

    __tablename__: str = "user_profiles"

    id: str = Field(primary_key=True, max_length=255)
    email: str = Field(index=True, max_length=255)
    display_name: str = Field(default="", max_length=100)
    profile_picture: str | None = Field(default=None)
    bio: str | None = Field(default=None, max_length=500)
    location: str | None = Field(default=None, max_length=200)
    website: str | None = Field(default=None)
    show_location: bool = Field(default=True)
    status: UserStatus = Field(default=UserStatus.active, max_length=20)
    status_changed_by: str | None = Field(default=None)
    identity_provider: str = Field(default="unknown", max_length=50)
    last_login_at: datetime | None = Field(default=None)
    login_count: int = Field(default=0)
