"""Application service for user lookup, email change, and removal."""

from __future__ import annotations

import logging
from dataclasses import replace

from carvalue_auth.application.ports.user_repository_port import (
    UserNotFoundError,
    UserRecord,
    UserRepositoryPort,
)
from carvalue_auth.domain.auth.credentials import normalize_user_email
from carvalue_auth.domain.auth.errors import DuplicateIdentifierError

logger = logging.getLogger(__name__)


class UserManagementService:
    """Expose user lookup and lifecycle use-cases.

    The stored credential is never changed here; only the email is editable.
    """

    def __init__(self, *, users: UserRepositoryPort) -> None:
        self._users = users

    async def get_user(self, *, user_id: int) -> UserRecord:
        """Return one user or raise deterministic not-found error."""

        user = await self._users.get_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return user

    async def find_users(self, *, email: str) -> list[UserRecord]:
        """Return users stored under the exact email."""

        return await self._users.find_by_email(email=normalize_user_email(email=email))

    async def update_user(self, *, user_id: int, email: str | None) -> UserRecord:
        """Change one user's email, rejecting addresses owned by another user."""

        target = await self.get_user(user_id=user_id)
        if email is None:
            return target

        normalized_email = normalize_user_email(email=email)
        if normalized_email == target.email:
            return target

        owners = await self._users.find_by_email(email=normalized_email)
        if any(owner.user_id != user_id for owner in owners):
            raise DuplicateIdentifierError(email=normalized_email)

        updated = await self._users.save(replace(target, email=normalized_email))
        logger.info("user_email_changed user_id=%s", user_id)
        return updated

    async def remove_user(self, *, user_id: int) -> UserRecord:
        """Delete one user and return the removed record."""

        removed = await self._users.remove(user_id=user_id)
        if removed is None:
            raise UserNotFoundError(user_id=user_id)
        return removed
