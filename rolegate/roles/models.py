"""Admin registry models.

One AdminUser row per email. The email is the primary key, so the database
itself rejects a second auto-provisioned record for the same address.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from rolegate.core.mixins import utc_now

ROLE_AUTHENTICATED = "authenticated"
ROLE_ADMIN = "admin"


class AdminStatus(str, Enum):
    """Registry record status.

    - active: may use the admin surface
    - inactive: kept for history, no longer in use
    - blocked: explicitly barred by another admin
    """

    active = "active"
    inactive = "inactive"
    blocked = "blocked"


def new_admin_id() -> str:
    return f"admin-{uuid.uuid4().hex}"


class AdminUser(SQLModel, table=True):
    """Admin registry record.

    roles is stored as JSON and is not validated on load; rows written by
    other tools may hold anything there, so readers must check its shape.
    """

    __tablename__: str = "admin_users"

    email: str = Field(primary_key=True, max_length=255)
    id: str = Field(default_factory=new_admin_id, index=True, unique=True)
    name: str = Field(default="", max_length=255)
    roles: Any = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    status: AdminStatus = Field(default=AdminStatus.active, max_length=20)
    identity_provider: str = Field(default="unknown", max_length=50)
    created_at: datetime = Field(default_factory=utc_now)
    last_login: datetime | None = Field(default=None)
