"""Role resolution and auto-provisioning.

Per request the resolver walks a small state machine:

    no principal                   -> no roles
    principal, untrusted domain    -> no roles (registry is not touched)
    principal, trusted domain      -> registry lookup raced against a timer
        found                      -> authenticated + record roles
        not found                  -> authenticated + admin, record provisioned
        timed out / errored        -> authenticated + admin (fail open)

A found record contributes exactly its stored roles (admin when they are
missing or malformed); every other trusted-domain outcome, including a
registry timeout or failure, yields authenticated and admin. Registry writes
are detached and never delay or alter the answer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from rolegate.auth.principal import Principal
from rolegate.core.background import DetachedTasks
from rolegate.core.mixins import utc_now
from rolegate.roles.models import (
    ROLE_ADMIN,
    ROLE_AUTHENTICATED,
    AdminStatus,
    AdminUser,
)
from rolegate.roles.registry import RegistryClient

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_TIMEOUT = 2.0
PROVISIONED_ROLES = (ROLE_ADMIN, ROLE_AUTHENTICATED)


class ResolutionOutcome(str, Enum):
    no_principal = "no_principal"
    untrusted_domain = "untrusted_domain"
    found = "found"
    provisioned = "provisioned"
    timed_out = "timed_out"
    errored = "errored"


@dataclass(frozen=True)
class RoleResolution:
    roles: list[str]
    outcome: ResolutionOutcome


def _dedupe(roles: list[str]) -> list[str]:
    return list(dict.fromkeys(roles))


def _record_roles(record: AdminUser) -> list[str] | None:
    """Return the stored roles if they are a non-empty list of strings."""
    roles = record.roles
    if not isinstance(roles, list) or not roles:
        return None
    if not all(isinstance(role, str) and role for role in roles):
        return None
    return roles


class RoleResolver:
    """Derives the role set for an authenticated principal."""

    def __init__(
        self,
        registry: RegistryClient,
        detached: DetachedTasks,
        trusted_suffix: str,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    ):
        self._registry = registry
        self._detached = detached
        self._trusted_suffix = trusted_suffix.lower()
        self._lookup_timeout = lookup_timeout

    def is_trusted(self, email: str) -> bool:
        return bool(email) and email.lower().endswith(self._trusted_suffix)

    async def resolve_roles(self, principal: Principal | None) -> list[str]:
        """Return the deduplicated roles; registry failures never propagate."""
        resolution = await self.resolve(principal)
        return resolution.roles

    async def resolve(self, principal: Principal | None) -> RoleResolution:
        if principal is None:
            return RoleResolution([], ResolutionOutcome.no_principal)

        email = principal.email.lower()
        if not self.is_trusted(email):
            logger.info(
                "Principal %s is outside the trusted domain",
                email or "<no email>",
                extra={
                    "email": email,
                    "outcome": ResolutionOutcome.untrusted_domain.value,
                },
            )
            return RoleResolution([], ResolutionOutcome.untrusted_domain)

        roles = [ROLE_AUTHENTICATED]
        lookup = asyncio.create_task(
            self._registry.find_by_email(email), name=f"registry-lookup:{email}"
        )
        done, _ = await asyncio.wait({lookup}, timeout=self._lookup_timeout)

        if not done:
            # The lookup is abandoned, not cancelled; it finishes in the background.
            self._detached.adopt(lookup)
            logger.warning(
                "Registry lookup for %s exceeded %.1fs; granting admin",
                email,
                self._lookup_timeout,
            )
            roles.append(ROLE_ADMIN)
            outcome = ResolutionOutcome.timed_out
        elif lookup.exception() is not None:
            logger.error(
                "Registry lookup for %s failed; granting admin",
                email,
                exc_info=lookup.exception(),
            )
            roles.append(ROLE_ADMIN)
            outcome = ResolutionOutcome.errored
        else:
            record = lookup.result()
            if record is not None:
                roles.extend(_record_roles(record) or [ROLE_ADMIN])
                self._detached.spawn(
                    self._touch_last_login(record), name=f"registry-last-login:{email}"
                )
                outcome = ResolutionOutcome.found
            else:
                self._detached.spawn(
                    self._provision(principal, email),
                    name=f"registry-provision:{email}",
                )
                roles.append(ROLE_ADMIN)
                outcome = ResolutionOutcome.provisioned

        resolved = _dedupe(roles)
        logger.info(
            "Assigned roles for %s: %s (%s)",
            email,
            resolved,
            outcome.value,
            extra={"email": email, "roles": resolved, "outcome": outcome.value},
        )
        return RoleResolution(resolved, outcome)

    async def _touch_last_login(self, record: AdminUser) -> None:
        record.last_login = utc_now()
        await self._registry.upsert(record)

    async def _provision(self, principal: Principal, email: str) -> None:
        now = utc_now()
        record = AdminUser(
            email=email,
            name=principal.details or email,
            roles=list(PROVISIONED_ROLES),
            status=AdminStatus.active,
            identity_provider=principal.identity_provider,
            created_at=now,
            last_login=now,
        )
        await self._registry.create(record)
        logger.info("Auto-registered admin user %s", email, extra={"email": email})
