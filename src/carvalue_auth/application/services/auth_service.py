"""Application service for email/password signup and signin."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial
from typing import TypeVar

from carvalue_auth.application.ports.password_hasher_port import PasswordHasherPort
from carvalue_auth.application.ports.user_repository_port import UserRecord, UserRepositoryPort
from carvalue_auth.domain.auth.credentials import normalize_user_email
from carvalue_auth.domain.auth.errors import (
    CredentialOperationTimeout,
    DuplicateIdentifierError,
    IdentifierNotFoundError,
    IdentityIntegrityError,
    InvalidCredentialError,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class AuthService:
    """Create users with hashed credentials and authenticate them by email."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
        operation_timeout_seconds: float | None = None,
        conceal_signin_failure: bool = False,
    ) -> None:
        if operation_timeout_seconds is not None and operation_timeout_seconds <= 0:
            raise ValueError("operation_timeout_seconds must be positive")
        self._users = users
        self._password_hasher = password_hasher
        self._operation_timeout_seconds = operation_timeout_seconds
        self._conceal_signin_failure = conceal_signin_failure

    async def signup(self, *, email: str, password: str) -> UserRecord:
        """Persist a new user unless the email is already in use."""

        normalized_email = normalize_user_email(email=email)
        existing = await self._users.find_by_email(email=normalized_email)
        if existing:
            logger.info("signup_rejected email=%s reason=email_in_use", normalized_email)
            raise DuplicateIdentifierError(email=normalized_email)

        password_hash = await self._offload(partial(self._password_hasher.hash_password, password))
        created = await self._users.save(
            UserRecord(user_id=None, email=normalized_email, password=password_hash)
        )
        logger.info("signup_created user_id=%s email=%s", created.user_id, created.email)
        return created

    async def signin(self, *, email: str, password: str) -> UserRecord:
        """Return the user whose stored credential matches the password."""

        normalized_email = normalize_user_email(email=email)
        matches = await self._users.find_by_email(email=normalized_email)
        if not matches:
            logger.info("signin_rejected email=%s reason=user_not_found", normalized_email)
            raise IdentifierNotFoundError(
                email=normalized_email,
                concealed=self._conceal_signin_failure,
            )
        if len(matches) > 1:
            logger.error(
                "signin_integrity_fault email=%s match_count=%s",
                normalized_email,
                len(matches),
            )
            raise IdentityIntegrityError(email=normalized_email, match_count=len(matches))

        user = matches[0]
        is_valid = await self._offload(
            partial(
                self._password_hasher.verify_password,
                password=password,
                password_hash=user.password,
            )
        )
        if not is_valid:
            logger.info(
                "signin_rejected user_id=%s email=%s reason=bad_password",
                user.user_id,
                normalized_email,
            )
            raise InvalidCredentialError(
                email=normalized_email,
                concealed=self._conceal_signin_failure,
            )

        logger.info("signin_authenticated user_id=%s", user.user_id)
        return user

    async def _offload(self, operation: Callable[[], _T]) -> _T:
        """Run one blocking hash/verify call in a worker thread.

        On timeout the caller gets ``CredentialOperationTimeout`` while the
        thread keeps running to completion in the background.
        """

        call = asyncio.to_thread(operation)
        if self._operation_timeout_seconds is None:
            return await call

        try:
            return await asyncio.wait_for(call, timeout=self._operation_timeout_seconds)
        except TimeoutError as exc:
            logger.warning(
                "credential_operation_timeout timeout_seconds=%s",
                self._operation_timeout_seconds,
            )
            raise CredentialOperationTimeout(
                timeout_seconds=self._operation_timeout_seconds
            ) from exc
