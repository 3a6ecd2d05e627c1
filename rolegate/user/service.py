"""Profile store operations.

Thin functions over a SQLModel session, keyed by the provider user id with
email as the fallback key.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func
from sqlmodel import Session, select

from rolegate.auth.principal import PICTURE_CLAIM_TYPES, Principal
from rolegate.core.mixins import utc_now
from rolegate.user.exceptions import UserNotFoundError
from rolegate.user.models import UserProfile, UserStatus

logger = logging.getLogger(__name__)

# Update payload keys (camelCase, as validated) -> UserProfile attributes.
UPDATABLE_FIELDS = {
    "displayName": "display_name",
    "profilePicture": "profile_picture",
    "bio": "bio",
    "location": "location",
    "website": "website",
    "showLocation": "show_location",
}


def display_name_from_email(email: str) -> str:
    """jane.doe-smith@x -> 'Jane Doe Smith'."""
    local_part = email.split("@", 1)[0]
    words = [word for word in re.split(r"[._-]", local_part) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def get_profile(
    session: Session, user_id: str | None, email: str | None = None
) -> UserProfile | None:
    """Find a profile by provider id, falling back to email."""
    profile = session.get(UserProfile, user_id) if user_id else None
    if profile is None and email:
        profile = session.exec(
            select(UserProfile).where(func.lower(UserProfile.email) == email.lower())
        ).first()
    return profile


def create_profile(session: Session, principal: Principal) -> UserProfile:
    now = utc_now()
    profile = UserProfile(
        id=principal.user_id,
        email=principal.email,
        display_name=(
            principal.claim("name") or display_name_from_email(principal.email)
        ),
        profile_picture=principal.claim(*PICTURE_CLAIM_TYPES),
        identity_provider=principal.identity_provider,
        status=UserStatus.active,
        last_login_at=now,
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    logger.info(
        "Created profile for %s", principal.email, extra={"email": principal.email}
    )
    return profile


def record_login(session: Session, profile: UserProfile) -> UserProfile:
    profile.last_login_at = utc_now()
    profile.login_count += 1
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def get_or_create_profile(
    session: Session, principal: Principal
) -> tuple[UserProfile, bool]:
    """Return (profile, created). Existing profiles get their login recorded."""
    profile = get_profile(session, principal.user_id, principal.email)
    if profile is None:
        return create_profile(session, principal), True
    return record_login(session, profile), False


def update_profile(
    session: Session,
    user_id: str | None,
    updates: Mapping[str, Any],
    email: str | None = None,
) -> UserProfile:
    """Apply validated updates to a profile.

    Raises:
        UserNotFoundError: If neither the id nor the email matches a profile
    """
    profile = get_profile(session, user_id, email)
    if profile is None:
        raise UserNotFoundError()

    for key, attribute in UPDATABLE_FIELDS.items():
        if key in updates:
            setattr(profile, attribute, updates[key])
    profile.updated_at = utc_now()

    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def is_blocked(
    session: Session, user_id: str | None, email: str | None = None
) -> bool:
    profile = get_profile(session, user_id, email)
    return profile is not None and profile.status == UserStatus.blocked
