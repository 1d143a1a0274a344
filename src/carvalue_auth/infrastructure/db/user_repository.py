"""SQLAlchemy adapter for user lookup and persistence."""

from __future__ import annotations

from typing import cast

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from carvalue_auth.application.ports.user_lifecycle_hook_port import UserLifecycleHookPort
from carvalue_auth.application.ports.user_repository_port import (
    UserNotFoundError,
    UserRecord,
    UserRepositoryPort,
)
from carvalue_auth.domain.auth.errors import DuplicateIdentifierError
from carvalue_auth.infrastructure.db.metadata import users


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions.

    Every committed insert, update, or delete is reported to the injected
    lifecycle hook, when one is provided.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        lifecycle_hook: UserLifecycleHookPort | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._lifecycle_hook = lifecycle_hook

    async def find_by_email(self, *, email: str) -> list[UserRecord]:
        """Return every user stored under the exact email, ordered by id."""

        statement = (
            sa.select(users.c.id, users.c.email, users.c.password)
            .where(users.c.email == email)
            .order_by(users.c.id)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        """Return user by id or None."""

        statement = (
            sa.select(users.c.id, users.c.email, users.c.password)
            .where(users.c.id == user_id)
            .limit(1)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def save(self, record: UserRecord) -> UserRecord:
        """Insert when ``record.user_id`` is None, otherwise update the existing row."""

        if record.user_id is None:
            return await self._insert(record)
        return await self._update(record, user_id=record.user_id)

    async def remove(self, *, user_id: int) -> UserRecord | None:
        """Delete one user and return the removed row, or None when absent."""

        statement = (
            sa.delete(users)
            .where(users.c.id == user_id)
            .returning(users.c.id, users.c.email, users.c.password)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)
            row = result.mappings().first()
            await session.commit()

        if row is None:
            return None

        removed = _to_user_record(row)
        if self._lifecycle_hook is not None:
            self._lifecycle_hook.on_delete(removed)
        return removed

    async def _insert(self, record: UserRecord) -> UserRecord:
        statement = (
            sa.insert(users)
            .values(email=record.email, password=record.password)
            .returning(users.c.id)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                inserted_id = result.scalar_one()
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateIdentifierError(email=record.email) from exc

        created = UserRecord(user_id=int(inserted_id), email=record.email, password=record.password)
        if self._lifecycle_hook is not None:
            self._lifecycle_hook.on_create(created)
        return created

    async def _update(self, record: UserRecord, *, user_id: int) -> UserRecord:
        statement = (
            sa.update(users)
            .where(users.c.id == user_id)
            .values(email=record.email, password=record.password)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateIdentifierError(email=record.email) from exc

        if result.rowcount == 0:
            raise UserNotFoundError(user_id=user_id)

        if self._lifecycle_hook is not None:
            self._lifecycle_hook.on_update(record)
        return record


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    return UserRecord(
        user_id=int(row["id"]),
        email=cast(str, row["email"]),
        password=cast(str, row["password"]),
    )
