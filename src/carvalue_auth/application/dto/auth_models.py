"""Pydantic models for signup/signin and user-management HTTP contracts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carvalue_auth.application.ports.user_repository_port import UserRecord
from carvalue_auth.domain.auth.credentials import normalize_user_email


class StrictModel(BaseModel):
    """Base model with strict unknown-field rejection."""

    model_config = ConfigDict(extra="forbid")


def validate_email_value(value: str) -> str:
    """Normalize one email and require a local part, a domain, and UTF-8 text."""

    normalized = normalize_user_email(email=value)
    try:
        normalized.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError("email must be valid UTF-8 text") from exc
    local_part, at, domain = normalized.partition("@")
    if not at or not local_part or not domain:
        raise ValueError("email must contain a local part and a domain")
    return normalized


class CredentialsRequest(StrictModel):
    """HTTP request model shared by signup and signin."""

    email: str = Field(min_length=3)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return validate_email_value(value)


class UpdateUserRequest(StrictModel):
    """HTTP request model for changing one user's email.

    The stored credential is immutable, so no password field is accepted.
    """

    email: str | None = Field(default=None, min_length=3)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_email_value(value)


class UserResponse(StrictModel):
    """HTTP response model exposing one user without its stored credential."""

    id: int
    email: str

    @classmethod
    def from_record(cls, record: UserRecord) -> UserResponse:
        if record.user_id is None:
            raise ValueError("cannot render an unsaved user")
        return cls(id=record.user_id, email=record.email)
