"""Reusable model mixins.

Provides common field patterns for SQLModel table definitions.
"""

from datetime import UTC, datetime

from sqlalchemy import text
from sqlmodel import Field


def utc_now() -> datetime:
    """Return current UTC time without microseconds."""
    return datetime.now(UTC).replace(microsecond=0)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps.

    Usage:
        class UserProfile(TimestampMixin, SQLModel, table=True):
            id: str = Field(primary_key=True)
    """

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={"server_default": text("CURRENT_TIMESTAMP")},
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={
            "server_default": text("CURRENT_TIMESTAMP"),
            "onupdate": utc_now,
        },
    )
