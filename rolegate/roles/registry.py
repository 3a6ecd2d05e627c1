"""Admin registry client.

RoleResolver depends on the RegistryClient protocol, not on a database. The
SQLModel implementation runs each operation in a worker thread with its own
short-lived session, so an operation abandoned by the role lookup timeout (or
detached as fire-and-forget) never shares state with the request that
started it.
"""

import asyncio
from typing import Protocol

from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from rolegate.roles.exceptions import RegistryConflictError
from rolegate.roles.models import AdminUser


class RegistryClient(Protocol):
    """Operations RoleResolver needs from the admin registry."""

    async def find_by_email(self, email: str) -> AdminUser | None:
        """Return the record for an email, or None."""
        ...

    async def upsert(self, record: AdminUser) -> AdminUser:
        """Insert or replace a record (last write wins)."""
        ...

    async def create(self, record: AdminUser) -> AdminUser:
        """Insert a new record; raise RegistryConflictError if the email exists."""
        ...


class SqlRegistryClient:
    """RegistryClient backed by the admin_users table."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def _session(self) -> Session:
        # Records are returned to callers after the session closes.
        return Session(self._engine, expire_on_commit=False)

    def _find_by_email(self, email: str) -> AdminUser | None:
        with self._session() as session:
            return session.exec(
                select(AdminUser).where(AdminUser.email == email)
            ).first()

    def _upsert(self, record: AdminUser) -> AdminUser:
        with self._session() as session:
            merged = session.merge(record)
            session.commit()
            return merged

    def _create(self, record: AdminUser) -> AdminUser:
        with self._session() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise RegistryConflictError(
                    f"Admin record already exists for {record.email}"
                ) from e
            return record

    async def find_by_email(self, email: str) -> AdminUser | None:
        return await asyncio.to_thread(self._find_by_email, email)

    async def upsert(self, record: AdminUser) -> AdminUser:
        return await asyncio.to_thread(self._upsert, record)

    async def create(self, record: AdminUser) -> AdminUser:
        return await asyncio.to_thread(self._create, record)
