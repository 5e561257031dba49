"""Random token generation backed by the ``secrets`` CSPRNG."""

from __future__ import annotations

import hmac
import math
import secrets

DEFAULT_TOKEN_LENGTH = 32


def generate_secure_token(length: int = DEFAULT_TOKEN_LENGTH) -> str:
    """Return a URL-safe random string of exactly ``length`` characters."""
    if length <= 0:
        raise ValueError("Token length must be positive")
    # token_urlsafe yields ~1.3 chars per byte
    return secrets.token_urlsafe(math.ceil(length * 3 / 4) + 1)[:length]


def generate_csrf_token() -> str:
    return generate_secure_token(DEFAULT_TOKEN_LENGTH)


def validate_csrf_token(token: str, expected_token: str) -> bool:
    if not token or not expected_token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8"))
