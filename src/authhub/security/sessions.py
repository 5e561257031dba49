"""Session descriptor helpers.

Pure functions over an immutable ``SessionDescriptor``; callers own
persistence. Every mutation returns a new value.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from authhub.security.tokens import generate_secure_token

DEFAULT_SESSION_TTL = timedelta(hours=24)
SESSION_ID_LENGTH = 32


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionDescriptor(BaseModel):
    """Short-lived record of an authenticated session."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    created_at: datetime
    expires_at: datetime
    active: bool = True
    last_activity: datetime
    revoked_at: datetime | None = None

    @model_validator(mode="after")
    def _check_window(self) -> SessionDescriptor:
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        return self


def create_session(
    owner_id: str,
    *,
    expires_in: timedelta = DEFAULT_SESSION_TTL,
    now: datetime | None = None,
) -> SessionDescriptor:
    now = now or _utcnow()
    return SessionDescriptor(
        session_id=generate_secure_token(SESSION_ID_LENGTH),
        owner_id=owner_id,
        created_at=now,
        expires_at=now + expires_in,
        active=True,
        last_activity=now,
    )


def is_valid_session(
    session: SessionDescriptor | Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> bool:
    """True when the session is active and unexpired.

    Accepts a raw mapping (e.g. deserialized from a cookie or cache); anything
    malformed is treated as invalid rather than raised.
    """
    if not isinstance(session, SessionDescriptor):
        try:
            session = SessionDescriptor.model_validate(session)
        except (ValidationError, TypeError, ValueError):
            return False
    try:
        return session.active and (now or _utcnow()) < session.expires_at
    except TypeError:
        # naive vs aware datetime comparison
        return False


def update_session_activity(
    session: SessionDescriptor, *, now: datetime | None = None
) -> SessionDescriptor:
    """Bump ``last_activity``; never extends ``expires_at``."""
    return session.model_copy(update={"last_activity": now or _utcnow()})


def revoke_session(session: SessionDescriptor, *, now: datetime | None = None) -> SessionDescriptor:
    return session.model_copy(update={"active": False, "revoked_at": now or _utcnow()})
