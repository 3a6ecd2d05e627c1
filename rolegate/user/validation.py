"""Profile update validation.

Checks a raw update payload against the field whitelist and per-field shape
rules. Validation is fail-fast: the first failing rule is the only error
reported. Rules run in a fixed order, and each one may normalize the value
it checks (displayName is trimmed).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

ALLOWED_FIELDS = (
    "displayName",
    "profilePicture",
    "bio",
    "location",
    "website",
    "showLocation",
)
DISPLAY_NAME_MAX_LENGTH = 100
BIO_MAX_LENGTH = 500
LOCATION_MAX_LENGTH = 200

_URL = TypeAdapter(AnyUrl)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Either the normalized updates or the field errors, never both."""

    updates: dict[str, Any] | None = None
    errors: tuple[FieldError, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.errors


def is_valid_url(value: str) -> bool:
    try:
        _URL.validate_python(value)
    except PydanticValidationError:
        return False
    return True


Rule = Callable[[dict[str, Any]], FieldError | None]


def _check_show_location(updates: dict[str, Any]) -> FieldError | None:
    if "showLocation" in updates and not isinstance(updates["showLocation"], bool):
        return FieldError("showLocation", "showLocation must be a boolean")
    return None


def _check_display_name(updates: dict[str, Any]) -> FieldError | None:
    if "displayName" not in updates:
        return None
    value = updates["displayName"]
    if not isinstance(value, str) or not value.strip():
        return FieldError("displayName", "Display name cannot be empty")
    if len(value) > DISPLAY_NAME_MAX_LENGTH:
        return FieldError(
            "displayName",
            f"Display name must be {DISPLAY_NAME_MAX_LENGTH} characters or less",
        )
    updates["displayName"] = value.strip()
    return None


def _check_profile_picture(updates: dict[str, Any]) -> FieldError | None:
    value = updates.get("profilePicture")
    if value is None:
        return None
    if not isinstance(value, str):
        return FieldError("profilePicture", "Profile picture must be a URL string")
    if not is_valid_url(value):
        return FieldError("profilePicture", "Invalid profile picture URL")
    return None


def _check_bio(updates: dict[str, Any]) -> FieldError | None:
    value = updates.get("bio")
    if value is None:
        return None
    if not isinstance(value, str):
        return FieldError("bio", "Bio must be a string")
    if len(value) > BIO_MAX_LENGTH:
        return FieldError("bio", f"Bio must be {BIO_MAX_LENGTH} characters or less")
    return None


def _check_website(updates: dict[str, Any]) -> FieldError | None:
    value = updates.get("website")
    if value is None:
        return None
    if not isinstance(value, str):
        return FieldError("website", "Website must be a URL string")
    if not is_valid_url(value):
        return FieldError("website", "Invalid website URL")
    return None


def _check_location(updates: dict[str, Any]) -> FieldError | None:
    value = updates.get("location")
    if value is None:
        return None
    if not isinstance(value, str):
        return FieldError("location", "Location must be a string")
    if len(value) > LOCATION_MAX_LENGTH:
        return FieldError(
            "location", f"Location must be {LOCATION_MAX_LENGTH} characters or less"
        )
    return None


RULES: tuple[Rule, ...] = (
    _check_show_location,
    _check_display_name,
    _check_profile_picture,
    _check_bio,
    _check_website,
    _check_location,
)


class ProfileUpdateValidator:
    """Validates and normalizes profile update payloads."""

    def __init__(self, rules: tuple[Rule, ...] = RULES):
        self._rules = rules

    def validate(self, payload: Mapping[str, Any]) -> ValidationResult:
        unknown = [key for key in payload if key not in ALLOWED_FIELDS]
        if unknown:
            names = ", ".join(unknown)
            error = FieldError(names, f"Invalid fields: {names}")
            return ValidationResult(errors=(error,))

        updates = dict(payload)
        for rule in self._rules:
            error = rule(updates)
            if error is not None:
                return ValidationResult(errors=(error,))
        return ValidationResult(updates=updates)
