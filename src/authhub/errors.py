"""Exception taxonomy for authhub.

Provider failures are surfaced to callers verbatim. Storage failures during
remember-me reads are recovered locally. Everything here derives from
``AuthHubError`` so callers can catch the whole family at once.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from authhub.models import AuthMethod

log = structlog.get_logger()

# Generic user-facing messages
AUTH_FAILED = "Authentication failed."
INTERNAL_ERROR = "An internal error occurred. Please try again later."


class AuthHubError(Exception):
    """Base exception for all authhub errors."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AuthErrorCode(StrEnum):
    """Normalized provider failure categories."""

    USER_NOT_FOUND = "user_not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_EMAIL = "invalid_email"
    USER_DISABLED = "user_disabled"
    TOO_MANY_REQUESTS = "too_many_requests"
    OPERATION_NOT_ALLOWED = "operation_not_allowed"
    WEAK_PASSWORD = "weak_password"
    EMAIL_ALREADY_IN_USE = "email_already_in_use"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


class ProviderError(AuthHubError):
    """Raised by a provider collaborator on network or credential failure."""

    def __init__(
        self,
        message: str,
        *,
        code: AuthErrorCode = AuthErrorCode.UNKNOWN,
        method: AuthMethod | None = None,
        backend_code: str | None = None,
    ) -> None:
        super().__init__(
            message,
            details={"code": code.value, "method": method, "backend_code": backend_code},
        )
        self.code = code
        self.method = method
        self.backend_code = backend_code


class ValidationError(AuthHubError):
    """Raised when input validation fails."""


class OAuthCallbackError(ValidationError):
    """Malformed or rejected OAuth callback."""

    def __init__(self, message: str, *, uri: str | None = None) -> None:
        super().__init__(message, details={"uri": uri} if uri else None)
        self.uri = uri


class OAuthError(OAuthCallbackError):
    """The authorization server returned an ``error`` parameter."""

    def __init__(self, error: str, *, uri: str | None = None) -> None:
        super().__init__(f"OAuth error: {error}", uri=uri)
        self.error = error


class MissingCodeError(OAuthCallbackError):
    """The callback carried no authorization code."""

    def __init__(self, *, uri: str | None = None) -> None:
        super().__init__("No authorization code received", uri=uri)


class UnknownProviderError(OAuthCallbackError):
    """The callback state could not be routed to a federated provider."""

    def __init__(self, state: str | None = None, *, uri: str | None = None) -> None:
        super().__init__("Unknown OAuth provider", uri=uri)
        self.state = state


class StorageError(AuthHubError):
    """Raised when secret storage cannot be read or written."""


class ConfigurationError(AuthHubError):
    """Raised when a provider's configuration is incomplete."""


class MethodUnavailableError(ConfigurationError):
    """Raised when dispatching to a disabled or unregistered auth method."""

    def __init__(self, method: AuthMethod) -> None:
        super().__init__(
            f"Authentication method not available: {method}",
            details={"method": str(method)},
        )
        self.method = method


# Backend error codes as reported by identity SDKs (kebab-case).
_BACKEND_CODES: dict[str, tuple[AuthErrorCode, str]] = {
    "user-not-found": (
        AuthErrorCode.USER_NOT_FOUND,
        "No user found with this email address.",
    ),
    "wrong-password": (AuthErrorCode.INVALID_CREDENTIALS, "Incorrect password."),
    "invalid-email": (AuthErrorCode.INVALID_EMAIL, "Invalid email address format."),
    "user-disabled": (AuthErrorCode.USER_DISABLED, "This user account has been disabled."),
    "too-many-requests": (
        AuthErrorCode.TOO_MANY_REQUESTS,
        "Too many failed attempts. Please try again later.",
    ),
    "operation-not-allowed": (
        AuthErrorCode.OPERATION_NOT_ALLOWED,
        "This sign-in method is not enabled.",
    ),
    "weak-password": (
        AuthErrorCode.WEAK_PASSWORD,
        "Password is too weak. Please choose a stronger password.",
    ),
    "email-already-in-use": (
        AuthErrorCode.EMAIL_ALREADY_IN_USE,
        "An account already exists with this email address.",
    ),
    "network-request-failed": (
        AuthErrorCode.NETWORK_ERROR,
        "Network error. Please check your connection and try again.",
    ),
}


def provider_error_from_code(
    backend_code: str,
    message: str | None = None,
    *,
    method: AuthMethod | None = None,
) -> ProviderError:
    """Build a ProviderError with a human-readable message from a backend code.

    Args:
        backend_code: Raw error code reported by the identity backend
        message: Backend message, used only for unrecognized codes
        method: Auth method the failure belongs to

    Returns:
        A ProviderError ready to raise
    """
    code, text = _BACKEND_CODES.get(
        backend_code,
        (AuthErrorCode.UNKNOWN, message or "An unknown authentication error occurred."),
    )
    return ProviderError(text, code=code, method=method, backend_code=backend_code)


def user_message(exc: BaseException) -> str:
    """Return a message safe to show an end user.

    OAuth callback failures collapse to a generic message. Provider errors carry
    their own human-readable text. Anything else is logged in full and reported
    generically.
    """
    if isinstance(exc, OAuthCallbackError):
        return AUTH_FAILED
    if isinstance(exc, AuthHubError):
        return exc.message

    log.error(
        "unexpected_auth_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
    )
    return INTERNAL_ERROR
