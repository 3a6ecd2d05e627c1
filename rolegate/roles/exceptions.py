"""Roles domain exceptions."""

from rolegate.core.exceptions import ConflictError


class RegistryConflictError(ConflictError):
    """Raised when creating a registry record for an email that already has one."""

    error_type = "registry_conflict"

    def __init__(self, message: str = "Admin record already exists"):
        super().__init__(message)
