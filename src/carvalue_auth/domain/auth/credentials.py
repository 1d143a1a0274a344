"""Stored credential format and shared normalization helpers for credential inputs."""

from __future__ import annotations

import re
from dataclasses import dataclass

from carvalue_auth.domain.auth.errors import MalformedCredentialError

CREDENTIAL_DELIMITER = "."
SALT_BYTES = 16
DERIVED_KEY_BYTES = 32

_SALT_HEX_RE = re.compile(rf"[0-9a-fA-F]{{{SALT_BYTES * 2}}}")
_DERIVED_KEY_HEX_RE = re.compile(rf"[0-9a-fA-F]{{{DERIVED_KEY_BYTES * 2}}}")


@dataclass(frozen=True)
class StoredCredential:
    """Salt and derived key persisted as ``<salt-hex>.<derived-key-hex>``."""

    salt: bytes
    derived_key: bytes

    def encode(self) -> str:
        """Return the persisted string form."""

        return f"{self.salt.hex()}{CREDENTIAL_DELIMITER}{self.derived_key.hex()}"

    @classmethod
    def parse(cls, raw: str) -> StoredCredential:
        """Parse one persisted credential or raise ``MalformedCredentialError``.

        The raw value is never echoed in the error message.
        """

        parts = raw.split(CREDENTIAL_DELIMITER)
        if len(parts) != 2:
            raise MalformedCredentialError(
                reason=f"expected exactly one {CREDENTIAL_DELIMITER!r} delimiter"
            )

        salt_hex, key_hex = parts
        if _SALT_HEX_RE.fullmatch(salt_hex) is None:
            raise MalformedCredentialError(
                reason=f"salt must be {SALT_BYTES * 2} hex characters"
            )
        if _DERIVED_KEY_HEX_RE.fullmatch(key_hex) is None:
            raise MalformedCredentialError(
                reason=f"derived key must be {DERIVED_KEY_BYTES * 2} hex characters"
            )

        return cls(salt=bytes.fromhex(salt_hex), derived_key=bytes.fromhex(key_hex))


def normalize_user_email(*, email: str) -> str:
    """Strip surrounding whitespace from one email and reject blank values.

    Emails are case-sensitive as stored, so no case folding happens here.
    """

    normalized = email.strip()
    if not normalized:
        raise ValueError("email cannot be blank")
    return normalized
