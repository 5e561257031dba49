"""Salted SHA-256 hashing for short secrets (recovery codes, API keys, tokens).

Stored form is ``salt:digest`` where ``digest = sha256(data + salt)`` in hex.
This is not a password KDF; identity providers own password storage.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass

SALT_BYTES = 32
SEPARATOR = ":"


@dataclass(frozen=True)
class HashedSecret:
    salt: str
    digest: str

    def __str__(self) -> str:
        return f"{self.salt}{SEPARATOR}{self.digest}"

    @classmethod
    def parse(cls, value: str) -> HashedSecret | None:
        """Parse ``salt:digest``; None when the shape is wrong."""
        if not isinstance(value, str):
            return None
        parts = value.split(SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            return None
        return cls(salt=parts[0], digest=parts[1])


def generate_salt() -> str:
    return base64.b64encode(secrets.token_bytes(SALT_BYTES)).decode("ascii")


def _digest(data: str, salt: str) -> str:
    return hashlib.sha256((data + salt).encode("utf-8")).hexdigest()


def hash_data(data: str, salt: str | None = None) -> str:
    """Hash ``data`` with a salt, generating a fresh one when omitted.

    Deterministic for a given salt.

    Raises:
        ValueError: If the supplied salt contains the ``:`` separator.
    """
    if salt is None:
        salt = generate_salt()
    elif SEPARATOR in salt:
        raise ValueError("Salt must not contain ':'")
    return str(HashedSecret(salt=salt, digest=_digest(data, salt)))


def verify_hashed_data(data: str, hashed: str) -> bool:
    """Check ``data`` against a ``salt:digest`` string.

    Fails closed: malformed input returns False instead of raising. The digest
    comparison goes through ``hmac.compare_digest``.
    """
    parsed = HashedSecret.parse(hashed)
    if parsed is None:
        return False
    try:
        expected = _digest(data, parsed.salt)
    except (TypeError, UnicodeError):
        return False
    return hmac.compare_digest(expected.encode("ascii"), parsed.digest.encode("utf-8"))
