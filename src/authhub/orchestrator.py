"""Single entry point for authentication flows.

Every operation publishes a Started event, calls exactly one provider
capability, then publishes one terminal event (Succeeded or Failed) before
returning or re-raising. The event bus is an observability side channel:
errors always reach the caller unchanged.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime

import structlog

from authhub.errors import (
    MissingCodeError,
    OAuthCallbackError,
    OAuthError,
    ValidationError,
)
from authhub.event_bus import EventBus
from authhub.events import AuthEvent
from authhub.models import (
    AuthMethod,
    AuthState,
    Credentials,
    EmailCredentials,
    Identity,
    OAuthCodeCredentials,
    PhoneCredentials,
)
from authhub.oauth import parse_callback, route_state
from authhub.providers import AuthProviderRegistry, CodeSentCallback, FailedCallback
from authhub.remember_me import RememberMeStore
from authhub.security.screening import mask_sensitive_data

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _describe(error: BaseException) -> str:
    return str(error) or type(error).__name__


class AuthOrchestrator:
    """Dispatch auth operations to provider capabilities and mirror them as events.

    Distinct operations are never serialized against each other; concurrent
    attempts for the same or different methods run in parallel. There are no
    retries and no timeouts here.

    Args:
        registry: Provider capabilities, keyed by method
        bus: Event bus to publish on (a private one is created if omitted)
        remember_me: Optional remember-me store, cleared on sign-out
        clock: Timestamp source for emitted events
    """

    def __init__(
        self,
        registry: AuthProviderRegistry,
        *,
        bus: EventBus | None = None,
        remember_me: RememberMeStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry
        self._bus = bus if bus is not None else EventBus()
        self._remember_me = remember_me
        self._clock = clock or _utcnow

    # -- observables -------------------------------------------------------------

    @property
    def events(self) -> EventBus:
        return self._bus

    @property
    def current_identity(self) -> Identity | None:
        """The primary provider's signed-in identity. Never cached here."""
        return self._registry.primary.current_identity

    @property
    def is_authenticated(self) -> bool:
        return self.current_identity is not None

    @property
    def auth_state(self) -> AuthState:
        return AuthState.AUTHENTICATED if self.is_authenticated else AuthState.UNAUTHENTICATED

    def identity_changes(self) -> AsyncIterator[Identity | None]:
        """Session notifications straight from the primary provider."""
        return self._registry.primary.identity_changes()

    def is_auth_method_available(self, method: AuthMethod) -> bool:
        return self._registry.is_available(method)

    # -- sign in / sign up -------------------------------------------------------

    async def sign_in(
        self,
        method: AuthMethod,
        credentials: Credentials | None = None,
        *,
        remember: bool = False,
    ) -> Identity:
        """Sign in with any supported method.

        Email needs ``EmailCredentials`` and phone needs ``PhoneCredentials``.
        Federated methods take ``OAuthCodeCredentials`` to complete a redirect
        flow, or nothing for interactive sign-in. Biometric takes nothing.

        With ``remember=True`` and a remember-me store attached, a credential
        is issued for the signed-in identity. Failing to store it is logged and
        does not fail the sign-in.

        Raises:
            MethodUnavailableError: If the method is disabled or not registered
            ValidationError: If the credentials do not fit the method
            Exception: Whatever the provider raised, unchanged
        """
        identity = await self._run_sign_in(method, lambda: self._dispatch(method, credentials))
        if remember and self._remember_me is not None:
            await self._remember(self._remember_me, identity)
        return identity

    async def sign_in_with_email(
        self, email: str, password: str, *, remember: bool = False
    ) -> Identity:
        return await self.sign_in(
            AuthMethod.EMAIL,
            EmailCredentials(email=email, password=password),
            remember=remember,
        )

    async def sign_in_with_phone_code(self, phone_number: str, code: str) -> Identity:
        return await self.sign_in(
            AuthMethod.PHONE, PhoneCredentials(phone=phone_number, code=code)
        )

    async def sign_in_with_federated(self, method: AuthMethod) -> Identity:
        """Interactive federated sign-in (SDK or popup driven)."""
        return await self.sign_in(method)

    async def sign_in_with_oauth_code(self, method: AuthMethod, code: str) -> Identity:
        """Complete a redirect flow with the authorization code."""
        return await self.sign_in(method, OAuthCodeCredentials(code=code))

    async def sign_up(self, email: str, password: str) -> Identity:
        credentials = EmailCredentials(email=email, password=password)
        method = AuthMethod.EMAIL

        self._bus.publish(AuthEvent.sign_up_started(method, at=self._clock()))
        log.info("sign_up_started", email=mask_sensitive_data(email))
        try:
            identity = await self._registry.get_email().sign_up(credentials)
        except (Exception, asyncio.CancelledError) as e:
            self._bus.publish(AuthEvent.sign_up_failed(method, _describe(e), at=self._clock()))
            log.warning("sign_up_failed", email=mask_sensitive_data(email), error=_describe(e))
            raise

        self._bus.publish(AuthEvent.sign_up_succeeded(method, identity, at=self._clock()))
        log.info("sign_up_succeeded", user_id=identity.id)
        return identity

    # -- phone verification ------------------------------------------------------

    async def verify_phone_number(
        self,
        phone_number: str,
        on_code_sent: CodeSentCallback,
        on_failed: FailedCallback,
    ) -> None:
        """Start OTP delivery.

        The matching event is published before each caller callback runs. If
        ``verify`` itself raises, a Failed event is published (unless the
        provider already reported the failure) and the error is re-raised.
        """
        masked = mask_sensitive_data(phone_number)
        resolved = False

        def code_sent(verification_id: str) -> None:
            nonlocal resolved
            resolved = True
            self._bus.publish(
                AuthEvent.phone_verification_code_sent(
                    phone_number, verification_id, at=self._clock()
                )
            )
            log.info("phone_verification_code_sent", phone=masked)
            on_code_sent(verification_id)

        def failed(error: BaseException) -> None:
            nonlocal resolved
            resolved = True
            self._bus.publish(
                AuthEvent.phone_verification_failed(
                    phone_number, _describe(error), at=self._clock()
                )
            )
            log.warning("phone_verification_failed", phone=masked, error=_describe(error))
            on_failed(error)

        self._bus.publish(AuthEvent.phone_verification_started(phone_number, at=self._clock()))
        log.info("phone_verification_started", phone=masked)
        try:
            await self._registry.get_phone().verify(phone_number, code_sent, failed)
        except (Exception, asyncio.CancelledError) as e:
            if not resolved:
                self._bus.publish(
                    AuthEvent.phone_verification_failed(
                        phone_number, _describe(e), at=self._clock()
                    )
                )
                log.warning("phone_verification_failed", phone=masked, error=_describe(e))
            raise

    # -- password reset ----------------------------------------------------------

    async def send_password_reset(self, email: str) -> None:
        masked = mask_sensitive_data(email)
        self._bus.publish(AuthEvent.password_reset_started(email, at=self._clock()))
        log.info("password_reset_started", email=masked)
        try:
            await self._registry.get_email().send_password_reset(email)
        except (Exception, asyncio.CancelledError) as e:
            self._bus.publish(AuthEvent.password_reset_failed(email, _describe(e), at=self._clock()))
            log.warning("password_reset_failed", email=masked, error=_describe(e))
            raise

        self._bus.publish(AuthEvent.password_reset_sent(email, at=self._clock()))
        log.info("password_reset_sent", email=masked)

    # -- sign out ----------------------------------------------------------------

    async def sign_out(self) -> None:
        """Sign out of the primary provider.

        The remember-me slot is cleared first; clearing never raises, so a
        provider failure still leaves the device forgotten.
        """
        current = self.current_identity
        user_id = current.id if current is not None else None

        self._bus.publish(AuthEvent.sign_out_started(user_id, at=self._clock()))
        log.info("sign_out_started", user_id=user_id)
        try:
            if self._remember_me is not None:
                await self._remember_me.clear()
            await self._registry.primary.sign_out()
        except (Exception, asyncio.CancelledError) as e:
            self._bus.publish(
                AuthEvent.sign_out_failed(_describe(e), user_id=user_id, at=self._clock())
            )
            log.warning("sign_out_failed", user_id=user_id, error=_describe(e))
            raise

        self._bus.publish(AuthEvent.sign_out_succeeded(user_id, at=self._clock()))
        log.info("sign_out_succeeded", user_id=user_id)

    # -- oauth callback ----------------------------------------------------------

    async def handle_oauth_callback(self, uri: str) -> Identity:
        """Route an authorization redirect to its provider and sign in.

        Checks run in order: ``error`` parameter, missing ``code``, then state
        routing. Every failure, including a failed delegated sign-in, publishes
        an OAuthCallbackFailed event before being re-raised.

        Raises:
            OAuthError: The provider returned an error parameter
            MissingCodeError: No authorization code in the callback
            UnknownProviderError: The state prefix does not name a provider
        """
        try:
            try:
                callback = parse_callback(uri)
            except ValueError as e:
                raise OAuthCallbackError("Malformed callback URI", uri=uri) from e
            if callback.error:
                raise OAuthError(callback.error, uri=uri)
            if not callback.code:
                raise MissingCodeError(uri=uri)
            method = route_state(callback.state, uri=uri)
        except OAuthCallbackError as e:
            self._bus.publish(AuthEvent.oauth_callback_failed(uri, _describe(e), at=self._clock()))
            log.warning("oauth_callback_failed", error=_describe(e))
            raise

        try:
            return await self.sign_in_with_oauth_code(method, callback.code)
        except (Exception, asyncio.CancelledError) as e:
            self._bus.publish(
                AuthEvent.oauth_callback_failed(uri, _describe(e), method=method, at=self._clock())
            )
            log.warning("oauth_callback_failed", method=str(method), error=_describe(e))
            raise

    # -- lifecycle ---------------------------------------------------------------

    def close(self) -> None:
        """Close the event bus, ending every subscriber stream. Idempotent."""
        self._bus.close()

    # -- internals ---------------------------------------------------------------

    async def _run_sign_in(
        self, method: AuthMethod, call: Callable[[], Awaitable[Identity]]
    ) -> Identity:
        self._bus.publish(AuthEvent.sign_in_started(method, at=self._clock()))
        log.info("sign_in_started", method=str(method))
        try:
            identity = await call()
        except (Exception, asyncio.CancelledError) as e:
            self._bus.publish(AuthEvent.sign_in_failed(method, _describe(e), at=self._clock()))
            log.warning("sign_in_failed", method=str(method), error=_describe(e))
            raise

        self._bus.publish(AuthEvent.sign_in_succeeded(method, identity, at=self._clock()))
        log.info("sign_in_succeeded", method=str(method), user_id=identity.id)
        return identity

    async def _dispatch(self, method: AuthMethod, credentials: Credentials | None) -> Identity:
        match method:
            case AuthMethod.EMAIL:
                if not isinstance(credentials, EmailCredentials):
                    raise ValidationError("Email sign-in requires email and password")
                return await self._registry.get_email().sign_in(credentials)
            case AuthMethod.PHONE:
                if not isinstance(credentials, PhoneCredentials):
                    raise ValidationError("Phone sign-in requires a phone number and code")
                return await self._registry.get_phone().sign_in_with_code(credentials)
            case AuthMethod.BIOMETRIC:
                if credentials is not None:
                    raise ValidationError("Biometric sign-in takes no credentials")
                return await self._registry.get_interactive(method).sign_in()

        if credentials is None:
            return await self._registry.get_federated(method).sign_in()
        if isinstance(credentials, OAuthCodeCredentials):
            return await self._registry.get_federated(method).sign_in_with_code(credentials.code)
        raise ValidationError(f"{method} sign-in takes an authorization code or nothing")

    async def _remember(self, store: RememberMeStore, identity: Identity) -> None:
        try:
            await store.issue(identity.id)
        except Exception as e:  # noqa: BLE001 - sign-in already succeeded
            log.warning("remember_me_issue_failed", user_id=identity.id, error=str(e))
