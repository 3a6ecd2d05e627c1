"""Auth domain dependencies.

Principal resolution for profile routes. These routes read the principal from
the client-principal header only; their request body is the mutation itself.
"""

from typing import Annotated

from fastapi import Depends, Request

from rolegate.auth.exceptions import PrincipalRequiredError
from rolegate.auth.principal import (
    HEADER_EXTRACTORS,
    Principal,
    PrincipalSource,
    extract_principal,
)


def get_optional_principal(request: Request) -> Principal | None:
    """Return the header principal, or None when absent or unreadable."""
    source = PrincipalSource(body=b"", headers=request.headers)
    return extract_principal(source, HEADER_EXTRACTORS)


OptionalPrincipalDep = Annotated[Principal | None, Depends(get_optional_principal)]


def get_current_principal(principal: OptionalPrincipalDep) -> Principal:
    """Require a principal with a provider user id.

    Raises:
        PrincipalRequiredError: If no usable principal was supplied
    """
    if principal is None or not principal.user_id:
        raise PrincipalRequiredError()
    return principal


CurrentPrincipalDep = Annotated[Principal, Depends(get_current_principal)]
