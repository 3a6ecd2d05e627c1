"""Centralized dependency type aliases for FastAPI routes.

Import dependencies from this single module:
    from rolegate.core.deps import SessionDep, RoleResolverDep

Long-lived collaborators are built once in the application lifespan and kept
on app.state; the getters below only hand them out, so tests can replace any
of them through app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlmodel import Session

from rolegate.db.engine import get_session
from rolegate.moderation.gate import ModerationGate
from rolegate.roles.resolver import RoleResolver

# Database session
SessionDep = Annotated[Session, Depends(get_session)]


def get_role_resolver(request: Request) -> RoleResolver:
    return request.app.state.role_resolver


def get_moderation_gate(request: Request) -> ModerationGate:
    return request.app.state.moderation_gate


RoleResolverDep = Annotated[RoleResolver, Depends(get_role_resolver)]
ModerationGateDep = Annotated[ModerationGate, Depends(get_moderation_gate)]
