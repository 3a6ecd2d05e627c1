"""Error response schemas for consistent API error formatting."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema.

    All API errors return this format; field-level validation errors also
    name the rejected field.
    """

    type: str
    message: str
    field: str | None = None
