"""Roles domain router.

Role-check endpoint queried by the hosting platform after sign-in (and by
the UI). It always answers 200 with a roles array: authorization subsystem
failures are logged here and surface as an empty role set.
"""

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from rolegate.auth.principal import PrincipalSource, extract_principal
from rolegate.core.constants import Routes
from rolegate.core.deps import RoleResolverDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix=Routes.ROLES.prefix, tags=[Routes.ROLES.tag])


class RolesResponse(BaseModel):
    roles: list[str]


@router.api_route("", methods=["GET", "POST"], response_model=RolesResponse)
async def get_user_roles(request: Request, resolver: RoleResolverDep):
    """Resolve roles for the principal in the body or client-principal header."""
    try:
        body = await request.body()
        source = PrincipalSource(body=body, headers=request.headers)
        principal = extract_principal(source)
        if principal is None:
            logger.info("No principal in body or header; returning empty roles")
        roles = await resolver.resolve_roles(principal)
    except Exception:
        logger.exception("Role resolution failed; returning empty roles")
        roles = []
    return RolesResponse(roles=roles)
