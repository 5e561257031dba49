"""Provider capability interfaces and the registry that dispatches to them.

Provider collaborators (identity backends, OTP gateways, OAuth clients) live
outside authhub and are injected through these protocols.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

from authhub.errors import MethodUnavailableError
from authhub.models import AuthMethod, EmailCredentials, Identity, PhoneCredentials

if TYPE_CHECKING:
    from authhub.config import Settings

log = structlog.get_logger()

# Federated providers that complete sign-in through a redirect + code exchange
# and therefore need a complete client configuration to be usable.
REDIRECT_METHODS = frozenset({AuthMethod.SLACK, AuthMethod.TEAMS})

CodeSentCallback = Callable[[str], None]
FailedCallback = Callable[[BaseException], None]


@runtime_checkable
class AuthProviderCapability(Protocol):
    """Primary identity backend (email/password and session source of truth)."""

    async def sign_in(self, credentials: EmailCredentials) -> Identity: ...

    async def sign_up(self, credentials: EmailCredentials) -> Identity: ...

    async def sign_out(self) -> None: ...

    async def send_password_reset(self, email: str) -> None: ...

    @property
    def current_identity(self) -> Identity | None: ...

    def identity_changes(self) -> AsyncIterator[Identity | None]: ...


@runtime_checkable
class PhoneVerificationCapability(Protocol):
    """OTP delivery and code sign-in."""

    async def verify(
        self,
        phone_number: str,
        on_code_sent: CodeSentCallback,
        on_failed: FailedCallback,
    ) -> None: ...

    async def sign_in_with_code(self, credentials: PhoneCredentials) -> Identity: ...


@runtime_checkable
class InteractiveAuthCapability(Protocol):
    """A method that signs in without caller-supplied credentials (SDK popup, biometrics)."""

    async def sign_in(self) -> Identity: ...


@runtime_checkable
class FederatedAuthCapability(InteractiveAuthCapability, Protocol):
    """A federated provider. ``sign_in_with_code`` completes a redirect flow."""

    async def sign_in_with_code(self, code: str) -> Identity: ...


class AuthProviderRegistry:
    """One capability per supported method, gated by configuration.

    A method is available when a capability is registered for it and, if
    settings are supplied, it is enabled there. Redirect-flow providers also
    need a complete client configuration; an incomplete one makes the method
    unavailable rather than raising.
    """

    def __init__(
        self,
        primary: AuthProviderCapability,
        *,
        phone: PhoneVerificationCapability | None = None,
        federated: Mapping[AuthMethod, FederatedAuthCapability] | None = None,
        biometric: InteractiveAuthCapability | None = None,
        settings: Settings | None = None,
    ) -> None:
        federated = dict(federated or {})
        for method in federated:
            if not AuthMethod(method).is_federated:
                raise ValueError(f"{method} is not a federated method")

        self._primary = primary
        self._phone = phone
        self._federated = {AuthMethod(m): cap for m, cap in federated.items()}
        self._biometric = biometric
        self._settings = settings

    @property
    def primary(self) -> AuthProviderCapability:
        """The session source of truth, regardless of which methods are enabled."""
        return self._primary

    def _registered(self, method: AuthMethod) -> bool:
        match method:
            case AuthMethod.EMAIL:
                return True
            case AuthMethod.PHONE:
                return self._phone is not None
            case AuthMethod.BIOMETRIC:
                return self._biometric is not None
            case _:
                return method in self._federated

    def is_available(self, method: AuthMethod) -> bool:
        if not self._registered(method):
            return False
        if self._settings is None:
            return True
        if not self._settings.is_auth_method_enabled(method):
            return False
        if method in REDIRECT_METHODS and self._settings.oauth_client(method) is None:
            log.debug("auth_method_unconfigured", method=str(method))
            return False
        return True

    def available_methods(self) -> list[AuthMethod]:
        return [m for m in AuthMethod if self.is_available(m)]

    def _require(self, method: AuthMethod) -> None:
        if not self.is_available(method):
            raise MethodUnavailableError(method)

    def get_email(self) -> AuthProviderCapability:
        self._require(AuthMethod.EMAIL)
        return self._primary

    def get_phone(self) -> PhoneVerificationCapability:
        self._require(AuthMethod.PHONE)
        if self._phone is None:
            raise MethodUnavailableError(AuthMethod.PHONE)
        return self._phone

    def get_federated(self, method: AuthMethod) -> FederatedAuthCapability:
        if not method.is_federated:
            raise MethodUnavailableError(method)
        self._require(method)
        return self._federated[method]

    def get_interactive(self, method: AuthMethod) -> InteractiveAuthCapability:
        """Capability for credential-less sign-in (federated or biometric)."""
        if method is AuthMethod.BIOMETRIC:
            self._require(method)
            if self._biometric is None:
                raise MethodUnavailableError(method)
            return self._biometric
        return self.get_federated(method)
