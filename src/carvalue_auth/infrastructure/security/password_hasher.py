"""Scrypt password hasher adapter."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from collections.abc import Callable

from carvalue_auth.application.ports.password_hasher_port import PasswordHasherPort
from carvalue_auth.domain.auth.credentials import (
    DERIVED_KEY_BYTES,
    SALT_BYTES,
    StoredCredential,
)

# Stored credential format v1: scrypt(n=2**14, r=8, p=1), 16-byte salt, 32-byte key.
SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1

RandomBytesSource = Callable[[int], bytes]


class ScryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using scrypt with a per-hash random salt."""

    def __init__(self, *, random_bytes: RandomBytesSource = secrets.token_bytes) -> None:
        self._random_bytes = random_bytes

    def hash_password(self, password: str) -> str:
        salt = self._random_bytes(SALT_BYTES)
        if len(salt) != SALT_BYTES:
            raise ValueError(f"random source returned {len(salt)} bytes, expected {SALT_BYTES}")
        derived_key = _derive_key(password=password, salt=salt)
        return StoredCredential(salt=salt, derived_key=derived_key).encode()

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        stored = StoredCredential.parse(password_hash)
        candidate = _derive_key(password=password, salt=stored.salt)
        return hmac.compare_digest(candidate, stored.derived_key)


def _derive_key(*, password: str, salt: bytes) -> bytes:
    # surrogatepass keeps lone surrogates (valid JSON escapes) hashable.
    return hashlib.scrypt(
        password.encode("utf-8", errors="surrogatepass"),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=DERIVED_KEY_BYTES,
    )
