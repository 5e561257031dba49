"""Auth lifecycle events.

A single tagged value type: every event carries a kind, a creation timestamp
and the payload fields relevant to that kind. Consumers dispatch with
``match event.kind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from authhub.models import AuthMethod, Identity


class AuthEventKind(StrEnum):
    """Event tags published on the auth event bus."""

    SIGN_IN_STARTED = "sign_in_started"
    SIGN_IN_SUCCEEDED = "sign_in_succeeded"
    SIGN_IN_FAILED = "sign_in_failed"
    SIGN_UP_STARTED = "sign_up_started"
    SIGN_UP_SUCCEEDED = "sign_up_succeeded"
    SIGN_UP_FAILED = "sign_up_failed"
    SIGN_OUT_STARTED = "sign_out_started"
    SIGN_OUT_SUCCEEDED = "sign_out_succeeded"
    SIGN_OUT_FAILED = "sign_out_failed"
    PHONE_VERIFICATION_STARTED = "phone_verification_started"
    PHONE_VERIFICATION_CODE_SENT = "phone_verification_code_sent"
    PHONE_VERIFICATION_FAILED = "phone_verification_failed"
    PASSWORD_RESET_STARTED = "password_reset_started"
    PASSWORD_RESET_SENT = "password_reset_sent"
    PASSWORD_RESET_FAILED = "password_reset_failed"
    OAUTH_CALLBACK_FAILED = "oauth_callback_failed"


_STARTED = frozenset(
    {
        AuthEventKind.SIGN_IN_STARTED,
        AuthEventKind.SIGN_UP_STARTED,
        AuthEventKind.SIGN_OUT_STARTED,
        AuthEventKind.PHONE_VERIFICATION_STARTED,
        AuthEventKind.PASSWORD_RESET_STARTED,
    }
)

_FAILED = frozenset(
    {
        AuthEventKind.SIGN_IN_FAILED,
        AuthEventKind.SIGN_UP_FAILED,
        AuthEventKind.SIGN_OUT_FAILED,
        AuthEventKind.PHONE_VERIFICATION_FAILED,
        AuthEventKind.PASSWORD_RESET_FAILED,
        AuthEventKind.OAUTH_CALLBACK_FAILED,
    }
)

_SUCCEEDED = frozenset(
    {
        AuthEventKind.SIGN_IN_SUCCEEDED,
        AuthEventKind.SIGN_UP_SUCCEEDED,
        AuthEventKind.SIGN_OUT_SUCCEEDED,
        AuthEventKind.PHONE_VERIFICATION_CODE_SENT,
        AuthEventKind.PASSWORD_RESET_SENT,
    }
)


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class AuthEvent:
    """An auth lifecycle event."""

    kind: AuthEventKind
    timestamp: datetime
    method: AuthMethod | None = None
    identity: Identity | None = None
    error: str | None = None
    user_id: str | None = None
    phone_number: str | None = None
    verification_id: str | None = None
    email: str | None = None
    uri: str | None = None

    @property
    def is_started(self) -> bool:
        return self.kind in _STARTED

    @property
    def is_failure(self) -> bool:
        return self.kind in _FAILED

    @property
    def is_terminal(self) -> bool:
        return self.kind in _FAILED or self.kind in _SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict, dropping empty fields."""
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.method is not None:
            data["method"] = self.method.value
        if self.identity is not None:
            data["identity"] = self.identity.model_dump(mode="json")
        for name in ("error", "user_id", "phone_number", "verification_id", "email", "uri"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    # -- sign in ---------------------------------------------------------------

    @classmethod
    def sign_in_started(cls, method: AuthMethod, *, at: datetime | None = None) -> AuthEvent:
        return cls(AuthEventKind.SIGN_IN_STARTED, at or _now(), method=method)

    @classmethod
    def sign_in_succeeded(
        cls, method: AuthMethod, identity: Identity, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(
            AuthEventKind.SIGN_IN_SUCCEEDED,
            at or _now(),
            method=method,
            identity=identity,
            user_id=identity.id,
        )

    @classmethod
    def sign_in_failed(
        cls, method: AuthMethod, error: str, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(AuthEventKind.SIGN_IN_FAILED, at or _now(), method=method, error=error)

    # -- sign up ---------------------------------------------------------------

    @classmethod
    def sign_up_started(cls, method: AuthMethod, *, at: datetime | None = None) -> AuthEvent:
        return cls(AuthEventKind.SIGN_UP_STARTED, at or _now(), method=method)

    @classmethod
    def sign_up_succeeded(
        cls, method: AuthMethod, identity: Identity, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(
            AuthEventKind.SIGN_UP_SUCCEEDED,
            at or _now(),
            method=method,
            identity=identity,
            user_id=identity.id,
        )

    @classmethod
    def sign_up_failed(
        cls, method: AuthMethod, error: str, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(AuthEventKind.SIGN_UP_FAILED, at or _now(), method=method, error=error)

    # -- sign out --------------------------------------------------------------

    @classmethod
    def sign_out_started(cls, user_id: str | None, *, at: datetime | None = None) -> AuthEvent:
        return cls(AuthEventKind.SIGN_OUT_STARTED, at or _now(), user_id=user_id)

    @classmethod
    def sign_out_succeeded(
        cls, user_id: str | None, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(AuthEventKind.SIGN_OUT_SUCCEEDED, at or _now(), user_id=user_id)

    @classmethod
    def sign_out_failed(
        cls, error: str, *, user_id: str | None = None, at: datetime | None = None
    ) -> AuthEvent:
        return cls(AuthEventKind.SIGN_OUT_FAILED, at or _now(), user_id=user_id, error=error)

    # -- phone verification ----------------------------------------------------

    @classmethod
    def phone_verification_started(
        cls, phone_number: str, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(
            AuthEventKind.PHONE_VERIFICATION_STARTED,
            at or _now(),
            method=AuthMethod.PHONE,
            phone_number=phone_number,
        )

    @classmethod
    def phone_verification_code_sent(
        cls, phone_number: str, verification_id: str, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(
            AuthEventKind.PHONE_VERIFICATION_CODE_SENT,
            at or _now(),
            method=AuthMethod.PHONE,
            phone_number=phone_number,
            verification_id=verification_id,
        )

    @classmethod
    def phone_verification_failed(
        cls, phone_number: str, error: str, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(
            AuthEventKind.PHONE_VERIFICATION_FAILED,
            at or _now(),
            method=AuthMethod.PHONE,
            phone_number=phone_number,
            error=error,
        )

    # -- password reset --------------------------------------------------------

    @classmethod
    def password_reset_started(cls, email: str, *, at: datetime | None = None) -> AuthEvent:
        return cls(
            AuthEventKind.PASSWORD_RESET_STARTED, at or _now(), method=AuthMethod.EMAIL, email=email
        )

    @classmethod
    def password_reset_sent(cls, email: str, *, at: datetime | None = None) -> AuthEvent:
        return cls(
            AuthEventKind.PASSWORD_RESET_SENT, at or _now(), method=AuthMethod.EMAIL, email=email
        )

    @classmethod
    def password_reset_failed(
        cls, email: str, error: str, *, at: datetime | None = None
    ) -> AuthEvent:
        return cls(
            AuthEventKind.PASSWORD_RESET_FAILED,
            at or _now(),
            method=AuthMethod.EMAIL,
            email=email,
            error=error,
        )

    # -- oauth -----------------------------------------------------------------

    @classmethod
    def oauth_callback_failed(
        cls,
        uri: str,
        error: str,
        *,
        method: AuthMethod | None = None,
        at: datetime | None = None,
    ) -> AuthEvent:
        return cls(
            AuthEventKind.OAUTH_CALLBACK_FAILED, at or _now(), method=method, uri=uri, error=error
        )
