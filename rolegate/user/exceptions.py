"""User domain exceptions."""

from rolegate.core.exceptions import AuthorizationError, NotFoundError, ValidationError


class UserNotFoundError(NotFoundError):
    """Raised when a user profile cannot be found."""

    error_type = "user_not_found"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class UserBlockedError(AuthorizationError):
    """Raised when a blocked user touches their profile."""

    error_type = "user_blocked"

    def __init__(self, message: str = "Your account has been blocked"):
        super().__init__(message)


class ProfileValidationError(ValidationError):
    """Raised when a profile update fails a field rule."""

    error_type = "profile_validation_error"

    def __init__(
        self, message: str = "Invalid profile update", field: str | None = None
    ):
        self.field = field
        super().__init__(message)
