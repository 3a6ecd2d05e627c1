"""Auth domain exceptions."""

from rolegate.core.exceptions import AuthenticationError


class PrincipalRequiredError(AuthenticationError):
    """Raised when a route needs a signed-in principal and none was supplied."""

    error_type = "principal_required"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)
