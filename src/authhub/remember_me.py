"""Remember-me credential lifecycle.

One long-lived, device-scoped credential lives in a single storage slot.
Issuing replaces whatever was there. Expired or unreadable credentials are
evicted lazily, on the next read.
"""

from __future__ import annotations

import asyncio
import hmac
import platform
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from authhub.errors import StorageError
from authhub.security.tokens import generate_secure_token
from authhub.storage import SecretStorage

log = structlog.get_logger()

TOKEN_KEY = "remember_me_token"
TOKEN_LENGTH = 64
DEFAULT_DURATION = timedelta(days=30)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RememberMeCredential(BaseModel):
    """A persisted remember-me credential."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1, repr=False)
    owner_id: str = Field(..., min_length=1)
    created_at: datetime
    expires_at: datetime
    device_fingerprint: str
    active: bool = True

    @model_validator(mode="after")
    def _check_window(self) -> RememberMeCredential:
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        return self

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_valid(self, now: datetime) -> bool:
        return self.active and not self.is_expired(now)


def device_fingerprint(now: datetime | None = None) -> str:
    """Best-effort ``platform-version-timestamp`` identifier.

    Audit aid only; it does not bind the credential to the device.
    """
    millis = int((now or _utcnow()).timestamp() * 1000)
    try:
        return f"{platform.system().lower() or 'unknown'}-{platform.release()}-{millis}"
    except Exception:  # noqa: BLE001 - platform probing is best effort
        return f"unknown-device-{millis}"


class RememberMeStore:
    """Issue, read, refresh and revoke the remember-me credential.

    ``issue``, ``refresh`` and ``clear`` are serialized with an asyncio lock so
    a refresh never races a concurrent clear within one process. Across
    processes the storage backend decides (last writer wins).
    """

    def __init__(
        self,
        storage: SecretStorage,
        *,
        duration: timedelta = DEFAULT_DURATION,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if duration <= timedelta(0):
            raise ValueError("Remember-me duration must be positive")
        self._storage = storage
        self._duration = duration
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def duration(self) -> timedelta:
        return self._duration

    async def issue(self, owner_id: str) -> RememberMeCredential:
        """Create and persist a fresh credential, superseding any previous one.

        Raises:
            StorageError: If the credential could not be written.
        """
        now = self._clock()
        credential = RememberMeCredential(
            token=generate_secure_token(TOKEN_LENGTH),
            owner_id=owner_id,
            created_at=now,
            expires_at=now + self._duration,
            device_fingerprint=device_fingerprint(now),
            active=True,
        )
        async with self._lock:
            try:
                await self._storage.write(TOKEN_KEY, credential.model_dump_json())
            except StorageError:
                raise
            except Exception as e:
                raise StorageError(f"Failed to store persistent token: {e}") from e

        log.info("remember_me_issued", owner_id=owner_id, expires_at=credential.expires_at)
        return credential

    async def fetch(self) -> RememberMeCredential | None:
        """Return the stored credential if valid, evicting it otherwise."""
        async with self._lock:
            return await self._fetch_unlocked()

    async def validate(self, token: str) -> bool:
        """Check a presented token against the stored credential. Never raises."""
        try:
            credential = await self.fetch()
        except Exception as e:  # noqa: BLE001 - validation fails closed
            log.warning("remember_me_validate_failed", error=str(e))
            return False
        if credential is None or not token:
            return False
        return _same_token(credential.token, token) and credential.is_valid(self._clock())

    async def refresh(self) -> RememberMeCredential | None:
        """Extend a valid credential to ``now + duration``.

        No-op when nothing valid is stored. A failure to persist the extended
        credential revokes it.
        """
        async with self._lock:
            current = await self._fetch_unlocked()
            if current is None:
                return None

            refreshed = current.model_copy(update={"expires_at": self._clock() + self._duration})
            try:
                await self._storage.write(TOKEN_KEY, refreshed.model_dump_json())
            except Exception as e:  # noqa: BLE001 - refresh failure means revocation
                log.warning("remember_me_refresh_failed", error=str(e))
                await self._clear_unlocked()
                return None
            return refreshed

    async def is_enabled(self) -> bool:
        return await self.fetch() is not None

    async def clear(self) -> None:
        """Delete the credential. Idempotent; storage failures are logged only."""
        async with self._lock:
            await self._clear_unlocked()

    async def clear_all(self) -> None:
        """Wipe every key in the backing store (full sign-out)."""
        async with self._lock:
            try:
                await self._storage.delete_all()
            except Exception as e:  # noqa: BLE001 - deletion is best effort
                log.warning("secret_store_clear_all_failed", error=str(e))

    async def _fetch_unlocked(self) -> RememberMeCredential | None:
        try:
            raw = await self._storage.read(TOKEN_KEY)
            if raw is None:
                return None
            credential = RememberMeCredential.model_validate_json(raw)
        except Exception as e:  # noqa: BLE001 - unreadable reads as absent
            log.warning("remember_me_unreadable", error=str(e))
            await self._clear_unlocked()
            return None

        if not credential.is_valid(self._clock()):
            log.info("remember_me_evicted", owner_id=credential.owner_id)
            await self._clear_unlocked()
            return None
        return credential

    async def _clear_unlocked(self) -> None:
        try:
            await self._storage.delete(TOKEN_KEY)
        except Exception as e:  # noqa: BLE001 - deletion is best effort
            log.warning("remember_me_clear_failed", error=str(e))


def _same_token(stored: str, presented: str) -> bool:
    return hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))
