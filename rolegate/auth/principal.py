"""Principal extraction.

The hosting platform authenticates users before requests reach this service
and hands over the signed-in identity either as the JSON body of a role query
or as a base64-encoded JSON header. Nothing here verifies signatures; it only
normalizes whatever principal was supplied into one canonical shape.

Extraction is an ordered list of extractor functions. The first one that
returns a Principal wins; an extractor that fails to parse its input is
skipped and the next one is tried.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from rolegate.core.constants import CLIENT_PRINCIPAL_HEADER

logger = logging.getLogger(__name__)

# Claim types carrying a profile picture URL, in preference order.
PICTURE_CLAIM_TYPES = ("picture", "photo", "avatar")


@dataclass(frozen=True)
class Claim:
    type: str
    value: str


@dataclass(frozen=True)
class Principal:
    """Canonical authenticated identity for one request.

    email is always lower-cased: the identity provider does not guarantee
    case, while the trust check and registry keys are case-sensitive.
    """

    user_id: str | None
    email: str
    identity_provider: str = "unknown"
    claims: tuple[Claim, ...] = field(default_factory=tuple)
    details: str | None = None

    def claim(self, *types: str) -> str | None:
        """Return the value of the first claim matching any of the given types."""
        for claim_type in types:
            for claim in self.claims:
                if claim.type == claim_type and claim.value:
                    return claim.value
        return None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Principal:
        details = payload.get("userDetails")
        raw_email = details or payload.get("email") or ""
        user_id = payload.get("userId")
        return cls(
            user_id=str(user_id) if user_id else None,
            email=str(raw_email).strip().lower(),
            identity_provider=str(payload.get("identityProvider") or "unknown"),
            claims=_parse_claims(payload.get("claims")),
            details=str(details) if details else None,
        )


def _parse_claims(raw: Any) -> tuple[Claim, ...]:
    if not isinstance(raw, list):
        return ()
    claims = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        claim_type = item.get("typ", item.get("type"))
        value = item.get("val", item.get("value"))
        if isinstance(claim_type, str) and isinstance(value, str):
            claims.append(Claim(type=claim_type, value=value))
    return tuple(claims)


@dataclass(frozen=True)
class PrincipalSource:
    """Transport-level inputs a principal can be read from."""

    body: bytes
    headers: Mapping[str, str]


PrincipalExtractor = Callable[[PrincipalSource], Principal | None]


def from_body(source: PrincipalSource) -> Principal | None:
    """Use the request body itself as the principal (server-to-server role queries)."""
    if not source.body:
        return None
    payload = json.loads(source.body)
    if not isinstance(payload, dict):
        return None
    if payload.get("userId") or payload.get("userDetails"):
        return Principal.from_payload(payload)
    return None


def from_header(source: PrincipalSource) -> Principal | None:
    """Decode the base64 JSON client-principal header."""
    raw = source.headers.get(CLIENT_PRINCIPAL_HEADER)
    if not raw:
        return None
    payload = json.loads(base64.b64decode(raw))
    if not isinstance(payload, dict):
        raise ValueError("client principal is not a JSON object")
    return Principal.from_payload(payload)


# Role queries accept a principal in the body; everything else reads the header.
ROLE_QUERY_EXTRACTORS: tuple[PrincipalExtractor, ...] = (from_body, from_header)
HEADER_EXTRACTORS: tuple[PrincipalExtractor, ...] = (from_header,)


def extract_principal(
    source: PrincipalSource,
    extractors: Sequence[PrincipalExtractor] = ROLE_QUERY_EXTRACTORS,
) -> Principal | None:
    """Run extractors in order and return the first principal found, else None."""
    for extractor in extractors:
        try:
            principal = extractor(source)
        except (ValueError, TypeError) as e:
            # JSON, base64 and unicode decode errors are all ValueErrors.
            logger.debug("Principal extractor %s failed: %s", extractor.__name__, e)
            continue
        if principal is not None:
            return principal
    return None


def encode_principal(payload: Mapping[str, Any]) -> str:
    """Encode a principal payload the way the platform puts it in the header."""
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
