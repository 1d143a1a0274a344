"""Error taxonomy for credential hashing and signup/signin flows."""

from __future__ import annotations

CONCEALED_SIGNIN_FAILURE_MESSAGE = "invalid credentials"


class CredentialError(Exception):
    """Base class for every credential-handling failure."""


class MalformedCredentialError(CredentialError, ValueError):
    """Raised when a stored credential cannot be parsed into salt and derived key."""

    def __init__(self, *, reason: str) -> None:
        super().__init__(f"malformed stored credential: {reason}")
        self.reason = reason


class DuplicateIdentifierError(CredentialError):
    """Raised when signup targets an email that already has an identity record."""

    def __init__(self, *, email: str) -> None:
        super().__init__("email already in use")
        self.email = email


class AuthenticationFailedError(CredentialError):
    """Common base for signin rejections.

    When ``concealed`` is set the message is identical for every subclass so
    callers cannot tell an unknown email from a wrong password.
    """

    detail = CONCEALED_SIGNIN_FAILURE_MESSAGE

    def __init__(self, *, email: str, concealed: bool = False) -> None:
        super().__init__(CONCEALED_SIGNIN_FAILURE_MESSAGE if concealed else self.detail)
        self.email = email
        self.concealed = concealed


class IdentifierNotFoundError(AuthenticationFailedError, LookupError):
    """Raised when signin targets an email with no identity record."""

    detail = "user not found"


class InvalidCredentialError(AuthenticationFailedError):
    """Raised when the signin password does not match the stored credential."""

    detail = "bad password"


class IdentityIntegrityError(CredentialError):
    """Raised when more than one identity record shares one email."""

    def __init__(self, *, email: str, match_count: int) -> None:
        super().__init__(f"expected at most one user per email, found {match_count}")
        self.email = email
        self.match_count = match_count


class CredentialOperationTimeout(CredentialError, TimeoutError):
    """Raised when an offloaded hash/verify call exceeds the orchestration timeout."""

    def __init__(self, *, timeout_seconds: float) -> None:
        super().__init__(f"credential operation exceeded {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds
