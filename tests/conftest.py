"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime, timedelta

import pytest

from authhub.errors import AuthErrorCode, ProviderError
from authhub.event_bus import EventBus
from authhub.models import AuthMethod, EmailCredentials, Identity, PhoneCredentials
from authhub.orchestrator import AuthOrchestrator
from authhub.providers import AuthProviderRegistry
from authhub.remember_me import RememberMeStore
from authhub.storage import InMemorySecretStorage

VALID_CODE = "123456"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakePrimaryProvider:
    """Email/password backend that records calls."""

    def __init__(self) -> None:
        self.identity: Identity | None = None
        self.changes: list[Identity | None] = []
        self.calls: list[str] = []
        self.sign_in_error: Exception | None = None
        self.sign_up_error: Exception | None = None
        self.sign_out_error: Exception | None = None
        self.reset_error: Exception | None = None

    @property
    def current_identity(self) -> Identity | None:
        return self.identity

    async def identity_changes(self) -> AsyncIterator[Identity | None]:
        for value in list(self.changes):
            yield value

    def _become(self, identity: Identity | None) -> None:
        self.identity = identity
        self.changes.append(identity)

    async def sign_in(self, credentials: EmailCredentials) -> Identity:
        self.calls.append("sign_in")
        if self.sign_in_error is not None:
            raise self.sign_in_error
        identity = Identity(id="user-1", email=credentials.email, provider=AuthMethod.EMAIL)
        self._become(identity)
        return identity

    async def sign_up(self, credentials: EmailCredentials) -> Identity:
        self.calls.append("sign_up")
        if self.sign_up_error is not None:
            raise self.sign_up_error
        identity = Identity(id="user-new", email=credentials.email, provider=AuthMethod.EMAIL)
        self._become(identity)
        return identity

    async def sign_out(self) -> None:
        self.calls.append("sign_out")
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self._become(None)

    async def send_password_reset(self, email: str) -> None:
        self.calls.append("send_password_reset")
        if self.reset_error is not None:
            raise self.reset_error


class FakePhoneProvider:
    """OTP gateway; ``outcome`` is one of sent, failed, raise, failed_then_raise."""

    def __init__(self) -> None:
        self.outcome = "sent"
        self.verification_id = "verification-1"

    async def verify(
        self,
        phone_number: str,
        on_code_sent: Callable[[str], None],
        on_failed: Callable[[BaseException], None],
    ) -> None:
        if self.outcome == "sent":
            on_code_sent(self.verification_id)
        elif self.outcome == "failed":
            on_failed(ProviderError("Invalid phone number"))
        elif self.outcome == "raise":
            raise ProviderError("Quota exceeded", code=AuthErrorCode.TOO_MANY_REQUESTS)
        else:
            on_failed(ProviderError("Invalid phone number"))
            raise ProviderError("Invalid phone number")

    async def sign_in_with_code(self, credentials: PhoneCredentials) -> Identity:
        if credentials.code != VALID_CODE:
            raise ProviderError("Invalid verification code", code=AuthErrorCode.INVALID_CREDENTIALS)
        return Identity(id="phone-user", phone=credentials.phone, provider=AuthMethod.PHONE)


class FakeFederatedProvider:
    """Federated (or biometric) provider with interactive and code-based sign-in."""

    def __init__(self, method: AuthMethod) -> None:
        self.method = method
        self.codes: list[str] = []
        self.error: Exception | None = None

    async def sign_in(self) -> Identity:
        if self.error is not None:
            raise self.error
        return Identity(id=f"{self.method}-user", provider=self.method)

    async def sign_in_with_code(self, code: str) -> Identity:
        self.codes.append(code)
        if self.error is not None:
            raise self.error
        return Identity(id=f"{self.method}-user", provider=self.method)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def primary() -> FakePrimaryProvider:
    return FakePrimaryProvider()


@pytest.fixture
def phone() -> FakePhoneProvider:
    return FakePhoneProvider()


@pytest.fixture
def federated() -> dict[AuthMethod, FakeFederatedProvider]:
    return {
        method: FakeFederatedProvider(method)
        for method in (AuthMethod.GOOGLE, AuthMethod.SLACK, AuthMethod.TEAMS)
    }


@pytest.fixture
def biometric() -> FakeFederatedProvider:
    return FakeFederatedProvider(AuthMethod.BIOMETRIC)


@pytest.fixture
def registry(
    primary: FakePrimaryProvider,
    phone: FakePhoneProvider,
    federated: dict[AuthMethod, FakeFederatedProvider],
    biometric: FakeFederatedProvider,
) -> AuthProviderRegistry:
    return AuthProviderRegistry(primary, phone=phone, federated=federated, biometric=biometric)


@pytest.fixture
def storage() -> InMemorySecretStorage:
    return InMemorySecretStorage()


@pytest.fixture
def remember_me(storage: InMemorySecretStorage, clock: FakeClock) -> RememberMeStore:
    return RememberMeStore(storage, duration=timedelta(days=30), clock=clock)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def orchestrator(
    registry: AuthProviderRegistry,
    bus: EventBus,
    remember_me: RememberMeStore,
    clock: FakeClock,
) -> AuthOrchestrator:
    return AuthOrchestrator(registry, bus=bus, remember_me=remember_me, clock=clock)
