"""
App-wide constants for route configuration.

Single source of truth for route prefixes, tags, the principal header and
common response definitions for API routes.
"""

from dataclasses import dataclass
from typing import Any

from rolegate.models.error import ErrorResponse


@dataclass(frozen=True)
class RouteConfig:
    """Configuration for a route group."""

    prefix: str
    tag: str


class Routes:
    """Route configurations for all API endpoints."""

    ROLES = RouteConfig(prefix="/GetUserRoles", tag="roles")
    USER = RouteConfig(prefix="/users", tag="users")
    HEALTH = RouteConfig(prefix="/health", tag="health")


# Base64-encoded JSON principal injected by the hosting platform after sign-in.
CLIENT_PRINCIPAL_HEADER = "x-ms-client-principal"


class CommonResponses:
    """Standard HTTP error response definitions for OpenAPI documentation."""

    UNAUTHORIZED: dict[int, dict[str, Any]] = {
        401: {"model": ErrorResponse, "description": "No authenticated principal"}
    }
    FORBIDDEN: dict[int, dict[str, Any]] = {
        403: {"model": ErrorResponse, "description": "User account is blocked"}
    }
    NOT_FOUND: dict[int, dict[str, Any]] = {
        404: {"model": ErrorResponse, "description": "Resource not found"}
    }
    BAD_REQUEST: dict[int, dict[str, Any]] = {
        400: {
            "model": ErrorResponse,
            "description": "Invalid request data or content rejected by moderation",
        }
    }
