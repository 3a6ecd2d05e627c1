"""App-wide exception hierarchy.

Every error a route can surface derives from AppException, which carries the
HTTP status code and a stable error_type used in the JSON error envelope.
Domain packages subclass these bases in their own exceptions modules.
"""


class AppException(Exception):
    """Base exception for all application errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


# Authentication errors (401)
class AuthenticationError(AppException):
    """Base class for authentication failures."""

    status_code = 401
    error_type = "authentication_error"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


# Authorization errors (403)
class AuthorizationError(AppException):
    """Base class for authorization failures."""

    status_code = 403
    error_type = "authorization_error"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


# Not found errors (404)
class NotFoundError(AppException):
    """Base class for resource not found errors."""

    status_code = 404
    error_type = "not_found"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


# Conflict errors (409)
class ConflictError(AppException):
    """Base class for resource conflict errors."""

    status_code = 409
    error_type = "conflict"

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message)


# Validation errors (400)
class ValidationError(AppException):
    """Base class for request-shape errors."""

    status_code = 400
    error_type = "validation_error"

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class BadRequestError(ValidationError):
    """Raised for general bad request errors."""

    error_type = "bad_request"

    def __init__(self, message: str = "Bad request"):
        super().__init__(message)


# External service errors (502)
class ExternalServiceError(AppException):
    """Base class for external service failures."""

    status_code = 502
    error_type = "external_service_error"

    def __init__(self, message: str = "External service error"):
        super().__init__(message)


# Internal errors (500)
class InternalError(AppException):
    """Raised for internal server errors."""

    status_code = 500
    error_type = "internal_error"

    def __init__(self, message: str = "An internal error occurred"):
        super().__init__(message)
