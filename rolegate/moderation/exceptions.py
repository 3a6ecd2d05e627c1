"""Moderation domain exceptions."""

from rolegate.core.exceptions import ExternalServiceError, ValidationError


class ModerationUnavailableError(ExternalServiceError):
    """Raised when the moderation pipeline cannot produce a verdict."""

    error_type = "moderation_unavailable"

    def __init__(self, message: str = "Moderation pipeline unavailable"):
        super().__init__(message)


class ModerationBlockedError(ValidationError):
    """Raised when moderation rejects submitted content."""

    error_type = "moderation_blocked"

    def __init__(self, message: str = "Content rejected by moderation"):
        super().__init__(message)
