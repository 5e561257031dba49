"""Configuration management for authhub.

Settings are read once from the environment. Components never read the
module-level ``settings`` directly; they receive immutable policy snapshots
(``PasswordPolicy``, ``UploadPolicy``, ``OAuthClientConfig``) at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from authhub.models import AuthMethod

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

DEFAULT_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "video/mp4",
    "video/quicktime",
    "application/pdf",
    "text/plain",
)

DEFAULT_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "mp4", "mov", "pdf", "txt")

SLACK_SCOPES = ("identity.basic", "identity.email")
TEAMS_SCOPES = ("openid", "profile", "email")
GOOGLE_SCOPES = ("openid", "email", "profile")


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 8
    require_strong: bool = True


@dataclass(frozen=True)
class UploadPolicy:
    """Limits applied by ``validate_file_upload``."""

    max_size_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_mime_types: tuple[str, ...] = DEFAULT_MIME_TYPES
    allowed_extensions: tuple[str, ...] = DEFAULT_EXTENSIONS


@dataclass(frozen=True)
class OAuthClientConfig:
    """Front-channel client settings for one federated provider."""

    client_id: str
    redirect_uri: str
    scopes: tuple[str, ...] = field(default_factory=tuple)
    client_secret: str | None = field(default=None, repr=False)
    tenant_id: str | None = None


def _secret(value: SecretStr) -> str:
    return value.get_secret_value().strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Runtime environment (development, staging, production)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Enabled methods
    enable_email_auth: bool = Field(default=True, description="Allow email/password sign-in")
    enable_phone_auth: bool = Field(default=True, description="Allow phone/OTP sign-in")
    enable_google_auth: bool = Field(default=True, description="Allow Google sign-in")
    enable_slack_auth: bool = Field(default=True, description="Allow Slack OAuth sign-in")
    enable_teams_auth: bool = Field(default=False, description="Allow Microsoft Teams sign-in")
    enable_biometric_auth: bool = Field(default=False, description="Allow biometric unlock")

    require_email_verification: bool = Field(default=False)
    allowed_email_domains: list[str] | None = Field(
        default=None,
        description="Restrict sign-up to these email domains (None = any)",
    )

    # Password policy
    password_min_length: int = Field(default=8, ge=6, le=128)
    require_strong_passwords: bool = Field(default=True)

    # Session and remember-me lifetimes
    session_timeout_minutes: int = Field(
        default=60 * 24, ge=5, le=60 * 24 * 30, description="Session TTL (minutes, default 24h)"
    )
    remember_me_days: int = Field(
        default=30, ge=1, le=365, description="Remember-me credential TTL (days)"
    )

    # Upload policy
    max_upload_bytes: int = Field(default=DEFAULT_MAX_UPLOAD_BYTES, ge=1)
    allowed_mime_types: list[str] = Field(default_factory=lambda: list(DEFAULT_MIME_TYPES))
    allowed_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    # Federated providers
    slack_client_id: SecretStr = Field(default=SecretStr(""), description="Slack OAuth client id")
    slack_client_secret: SecretStr = Field(
        default=SecretStr(""), description="Slack OAuth client secret"
    )
    slack_redirect_uri: str = Field(default="", description="Slack OAuth redirect URI")

    teams_client_id: SecretStr = Field(default=SecretStr(""), description="Teams OAuth client id")
    teams_tenant_id: str = Field(default="common", description="Azure AD tenant for Teams")
    teams_redirect_uri: str = Field(default="", description="Teams OAuth redirect URI")

    google_client_id: SecretStr = Field(
        default=SecretStr(""), description="Google OAuth client id"
    )
    google_redirect_uri: str = Field(default="", description="Google OAuth redirect URI")

    # Secret storage for remember-me credentials
    secret_store_path: Path = Field(
        default_factory=lambda: Path.home() / ".authhub" / "secrets.json",
        description="Location of the file-backed secret store",
    )

    @model_validator(mode="after")
    def validate_federated_settings(self) -> Settings:
        """In production an enabled federated provider must be fully configured."""
        if self.environment != "production":
            return self
        for method in (AuthMethod.GOOGLE, AuthMethod.SLACK, AuthMethod.TEAMS):
            if self.is_auth_method_enabled(method) and self.oauth_client(method) is None:
                raise ValueError(
                    f"CRITICAL: {method} sign-in is enabled but its OAuth client settings "
                    f"are incomplete. Set AUTHHUB_{method.upper()}_* or disable it."
                )
        return self

    def is_auth_method_enabled(self, method: AuthMethod) -> bool:
        match method:
            case AuthMethod.EMAIL:
                return self.enable_email_auth
            case AuthMethod.PHONE:
                return self.enable_phone_auth
            case AuthMethod.GOOGLE:
                return self.enable_google_auth
            case AuthMethod.SLACK:
                return self.enable_slack_auth
            case AuthMethod.TEAMS:
                return self.enable_teams_auth
            case AuthMethod.BIOMETRIC:
                return self.enable_biometric_auth
        return False

    def oauth_client(self, method: AuthMethod) -> OAuthClientConfig | None:
        """Return the provider's client config, or None if it is disabled or incomplete."""
        if not method.is_federated or not self.is_auth_method_enabled(method):
            return None

        if method is AuthMethod.SLACK:
            client_id = _secret(self.slack_client_id)
            client_secret = _secret(self.slack_client_secret)
            if not (client_id and client_secret and self.slack_redirect_uri):
                return None
            return OAuthClientConfig(
                client_id=client_id,
                client_secret=client_secret,
                redirect_uri=self.slack_redirect_uri,
                scopes=SLACK_SCOPES,
            )

        if method is AuthMethod.TEAMS:
            client_id = _secret(self.teams_client_id)
            if not (client_id and self.teams_tenant_id and self.teams_redirect_uri):
                return None
            return OAuthClientConfig(
                client_id=client_id,
                redirect_uri=self.teams_redirect_uri,
                scopes=TEAMS_SCOPES,
                tenant_id=self.teams_tenant_id,
            )

        client_id = _secret(self.google_client_id)
        if not (client_id and self.google_redirect_uri):
            return None
        return OAuthClientConfig(
            client_id=client_id,
            redirect_uri=self.google_redirect_uri,
            scopes=GOOGLE_SCOPES,
        )

    def password_policy(self) -> PasswordPolicy:
        return PasswordPolicy(
            min_length=self.password_min_length,
            require_strong=self.require_strong_passwords,
        )

    def upload_policy(self) -> UploadPolicy:
        return UploadPolicy(
            max_size_bytes=self.max_upload_bytes,
            allowed_mime_types=tuple(m.lower() for m in self.allowed_mime_types),
            allowed_extensions=tuple(e.lower().lstrip(".") for e in self.allowed_extensions),
        )

    @property
    def remember_me_duration(self) -> timedelta:
        return timedelta(days=self.remember_me_days)

    @property
    def session_timeout(self) -> timedelta:
        return timedelta(minutes=self.session_timeout_minutes)


settings = Settings()
