"""Port for user lookup and persistence used by signup/signin services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class UserRecord:
    """Identity record persistence model.

    ``user_id`` is ``None`` until the record is saved for the first time.
    ``password`` holds the stored credential, never the plaintext.
    """

    user_id: int | None
    email: str
    password: str


class UserNotFoundError(LookupError):
    """Raised when an update targets a user id with no persisted row."""

    def __init__(self, *, user_id: int) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def find_by_email(self, *, email: str) -> list[UserRecord]:
        """Return every user stored under the exact email, ordered by id."""

    async def save(self, record: UserRecord) -> UserRecord:
        """Insert a new user or update an existing one and return the persisted row."""

    async def get_by_id(self, *, user_id: int) -> UserRecord | None:
        """Return user by id or None."""

    async def remove(self, *, user_id: int) -> UserRecord | None:
        """Delete one user and return the removed row, or None when absent."""
