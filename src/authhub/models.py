"""Core value types shared across authhub."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthMethod(StrEnum):
    """Supported authentication methods.

    Used both as the capability key in the provider registry and as the tag on
    emitted auth events.
    """

    EMAIL = "email"
    PHONE = "phone"
    GOOGLE = "google"
    SLACK = "slack"
    TEAMS = "teams"
    BIOMETRIC = "biometric"

    @property
    def is_federated(self) -> bool:
        return self in _FEDERATED


_FEDERATED = frozenset({AuthMethod.GOOGLE, AuthMethod.SLACK, AuthMethod.TEAMS})


class AuthState(StrEnum):
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Identity(BaseModel):
    """Authenticated user record returned by a provider.

    Treated as an immutable value once obtained.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    email: str | None = None
    phone: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    provider: AuthMethod | None = None
    default_member: str | None = None
    created_at: datetime | None = None
    profile: dict[str, Any] = Field(default_factory=dict)


class EmailCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    password: str = Field(..., repr=False)


class PhoneCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone: str
    code: str = Field(..., repr=False)


class OAuthCodeCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., repr=False)


Credentials = EmailCredentials | PhoneCredentials | OAuthCodeCredentials
