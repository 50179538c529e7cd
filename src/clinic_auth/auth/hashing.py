"""
clinic_auth.auth.hashing

Password hashing and verification.

Responsibilities:
- Hash secrets with Argon2id and a fresh random salt, stored as `<hex digest>.<hex salt>`.
- Verify in constant time; malformed stored forms verify False instead of raising.
- Keep hashes written by the previous (scrypt-based) deployment verifiable.
- Run the CPU-bound work off the event loop with bounded concurrency.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import secrets
from typing import Final

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw

from clinic_auth.observability.logging import get_logger

log = get_logger(__name__)

SALT_LENGTH: Final[int] = 16

# Argon2id cost (OWASP minimums). The stored form does not record these, so
# changing them invalidates every existing hash.
ARGON2_TIME_COST: Final[int] = 2
ARGON2_MEMORY_COST: Final[int] = 19 * 1024  # KiB
ARGON2_PARALLELISM: Final[int] = 1
ARGON2_HASH_LENGTH: Final[int] = 32

# Parameters of the legacy scrypt scheme (Node's crypto.scrypt defaults, 64-byte key).
SCRYPT_N: Final[int] = 16384
SCRYPT_R: Final[int] = 8
SCRYPT_P: Final[int] = 1
SCRYPT_HASH_LENGTH: Final[int] = 64

_SEPARATOR: Final[str] = "."


class CredentialHasher:
    """
    Salted Argon2id hashing with constant-time verification.

    Stored form is `<hex digest>.<hex salt>`. The digest length selects the
    scheme on verify: 32 bytes is Argon2id, 64 bytes is the legacy scrypt
    format (where the hex salt string itself was the scrypt salt).
    """

    def hash(self, secret: str) -> str:
        salt = secrets.token_bytes(SALT_LENGTH)
        digest = self._argon2(secret.encode("utf-8"), salt)
        return f"{digest.hex()}{_SEPARATOR}{salt.hex()}"

    def verify(self, stored: str, secret: str) -> bool:
        if not isinstance(stored, str) or not isinstance(secret, str):
            return False
        parts = stored.split(_SEPARATOR)
        if len(parts) != 2:
            return False
        digest_hex, salt_hex = parts
        try:
            expected = bytes.fromhex(digest_hex)
            salt = bytes.fromhex(salt_hex)
        except ValueError:
            return False
        if not salt:
            return False

        try:
            if len(expected) == ARGON2_HASH_LENGTH:
                actual = self._argon2(secret.encode("utf-8"), salt)
            elif len(expected) == SCRYPT_HASH_LENGTH:
                actual = _legacy_scrypt(secret.encode("utf-8"), salt_hex)
            else:
                return False
        except (HashingError, ValueError) as e:
            log.warning("credential_verify_error", error=type(e).__name__)
            return False

        return hmac.compare_digest(expected, actual)

    def _argon2(self, secret: bytes, salt: bytes) -> bytes:
        return hash_secret_raw(
            secret=secret,
            salt=salt,
            time_cost=ARGON2_TIME_COST,
            memory_cost=ARGON2_MEMORY_COST,
            parallelism=ARGON2_PARALLELISM,
            hash_len=ARGON2_HASH_LENGTH,
            type=Type.ID,
        )


def _legacy_scrypt(secret: bytes, salt_hex: str) -> bytes:
    # The old scheme fed the hex *text* of the salt to scrypt, not the decoded bytes.
    return hashlib.scrypt(
        secret,
        salt=salt_hex.encode("ascii"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        maxmem=64 * 1024 * 1024,
        dklen=SCRYPT_HASH_LENGTH,
    )


class BoundedHasher:
    """
    Async facade over `CredentialHasher`.

    Hashing runs in worker threads; a semaphore caps how many run at once so a
    burst of logins queues here instead of occupying every thread the server has.
    """

    def __init__(self, hasher: CredentialHasher, *, max_concurrency: int) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._hasher = hasher
        self._slots = asyncio.Semaphore(max_concurrency)

    @property
    def hasher(self) -> CredentialHasher:
        return self._hasher

    async def hash(self, secret: str) -> str:
        async with self._slots:
            return await asyncio.to_thread(self._hasher.hash, secret)

    async def verify(self, stored: str, secret: str) -> bool:
        async with self._slots:
            return await asyncio.to_thread(self._hasher.verify, stored, secret)


# --- Module Notes -----------------------------------------------------------
# argon2-cffi releases the GIL while hashing, so worker threads give real parallelism.
