"""User domain router.

Profile routes for the signed-in user plus the public profile view. The
caller is identified by the client-principal header; /me routes must be
declared before /{user_id} so the literal path wins.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request

from rolegate.auth.dependencies import CurrentPrincipalDep
from rolegate.core.constants import CommonResponses, Routes
from rolegate.core.deps import ModerationGateDep, SessionDep
from rolegate.core.exceptions import BadRequestError
from rolegate.moderation.exceptions import ModerationBlockedError
from rolegate.user.exceptions import (
    ProfileValidationError,
    UserBlockedError,
    UserNotFoundError,
)
from rolegate.user.models import UserStatus
from rolegate.user.schemas import ProfileRead, PublicProfileRead, SyncResponse
from rolegate.user.service import (
    get_or_create_profile,
    get_profile,
    is_blocked,
    update_profile,
)
from rolegate.user.validation import ProfileUpdateValidator

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "Your account has been blocked. Please contact support."

router = APIRouter(
    prefix=Routes.USER.prefix,
    tags=[Routes.USER.tag],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)

validator = ProfileUpdateValidator()


async def _json_object(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        raise BadRequestError("Request body must be a JSON object") from None
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")
    return payload


@router.get("/me", response_model=ProfileRead)
async def get_me(principal: CurrentPrincipalDep, session: SessionDep):
    """Return the caller's profile, creating it on first visit."""
    profile, _ = get_or_create_profile(session, principal)
    if profile.status == UserStatus.blocked:
        raise UserBlockedError(BLOCKED_MESSAGE)
    return profile


@router.put(
    "/me",
    response_model=ProfileRead,
    responses={**CommonResponses.BAD_REQUEST, **CommonResponses.NOT_FOUND},
)
async def update_me(
    request: Request,
    principal: CurrentPrincipalDep,
    session: SessionDep,
    gate: ModerationGateDep,
):
    """Update the caller's profile.

    The payload is validated field by field, then the text fields go through
    the moderation gate. Nothing is written unless both pass.
    """
    if is_blocked(session, principal.user_id, principal.email):
        raise UserBlockedError(BLOCKED_MESSAGE)

    payload = await _json_object(request)
    result = validator.validate(payload)
    if not result.ok:
        error = result.errors[0]
        raise ProfileValidationError(error.message, field=error.field)

    decision = await gate.evaluate(result.updates, principal)
    if not decision.allowed:
        logger.info(
            "Profile update for %s blocked by moderation",
            principal.user_id,
            extra={"email": principal.email, "workflow": "profile"},
        )
        raise ModerationBlockedError(decision.reason)

    return update_profile(
        session, principal.user_id, result.updates, email=principal.email
    )


@router.post("/sync", response_model=SyncResponse)
async def sync_me(principal: CurrentPrincipalDep, session: SessionDep):
    """Login sync: make sure the caller has a profile and record the login."""
    profile, created = get_or_create_profile(session, principal)
    if profile.status == UserStatus.blocked:
        raise UserBlockedError(BLOCKED_MESSAGE)
    return SyncResponse(user=ProfileRead.model_validate(profile), is_new_user=created)


@router.get(
    "/{user_id}",
    response_model=PublicProfileRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_public_profile(user_id: str, session: SessionDep):
    """Public view of a profile. Location is hidden unless the owner shares it."""
    profile = get_profile(session, user_id)
    if profile is None:
        raise UserNotFoundError()
    return PublicProfileRead.from_profile(profile)
