"""Tests for the remember-me credential store."""

import asyncio
import json
from datetime import timedelta

import pytest

from authhub.errors import StorageError
from authhub.remember_me import TOKEN_KEY, TOKEN_LENGTH, RememberMeCredential, RememberMeStore
from authhub.storage import InMemorySecretStorage


class FlakyStorage(InMemorySecretStorage):
    """In-memory storage with switchable failures."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False

    async def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("write failed")
        await super().write(key, value)

    async def read(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError("read failed")
        return await super().read(key)


class TestIssue:
    """Tests for issuing credentials."""

    @pytest.mark.asyncio
    async def test_issue_then_fetch(self, remember_me: RememberMeStore, clock) -> None:
        """An issued credential is fetched back valid for its owner."""
        issued = await remember_me.issue("user-1")
        fetched = await remember_me.fetch()

        assert fetched == issued
        assert fetched.owner_id == "user-1"
        assert fetched.is_valid(clock())
        assert fetched.expires_at - fetched.created_at == timedelta(days=30)
        assert len(fetched.token) == TOKEN_LENGTH

    @pytest.mark.asyncio
    async def test_issue_replaces_previous(self, remember_me: RememberMeStore) -> None:
        """Only one credential exists; issuing again supersedes it."""
        first = await remember_me.issue("user-1")
        second = await remember_me.issue("user-2")

        assert first.token != second.token
        assert await remember_me.validate(first.token) is False
        assert await remember_me.validate(second.token) is True

    @pytest.mark.asyncio
    async def test_issue_storage_failure_raises(self, clock) -> None:
        """Persisting a new credential surfaces storage failures."""
        storage = FlakyStorage()
        storage.fail_writes = True
        store = RememberMeStore(storage, clock=clock)

        with pytest.raises(StorageError):
            await store.issue("user-1")

    def test_non_positive_duration_rejected(self) -> None:
        with pytest.raises(ValueError):
            RememberMeStore(InMemorySecretStorage(), duration=timedelta(0))


class TestFetch:
    """Tests for lazy eviction on read."""

    @pytest.mark.asyncio
    async def test_absent(self, remember_me: RememberMeStore) -> None:
        assert await remember_me.fetch() is None
        assert await remember_me.is_enabled() is False

    @pytest.mark.asyncio
    async def test_expired_is_evicted(
        self, remember_me: RememberMeStore, storage: InMemorySecretStorage, clock
    ) -> None:
        """Past expiry the credential reads as absent and the slot is cleared."""
        await remember_me.issue("user-1")
        clock.advance(timedelta(days=30))

        assert await remember_me.fetch() is None
        assert TOKEN_KEY not in storage.snapshot()

    @pytest.mark.asyncio
    async def test_inactive_is_evicted(
        self, remember_me: RememberMeStore, storage: InMemorySecretStorage, clock
    ) -> None:
        issued = await remember_me.issue("user-1")
        inactive = issued.model_copy(update={"active": False})
        await storage.write(TOKEN_KEY, inactive.model_dump_json())

        assert await remember_me.fetch() is None
        assert storage.snapshot() == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            json.dumps({"token": "t"}),
            json.dumps(
                {
                    "token": "t",
                    "owner_id": "u",
                    "created_at": "2025-01-02T00:00:00Z",
                    "expires_at": "2025-01-01T00:00:00Z",
                    "device_fingerprint": "x",
                }
            ),
        ],
    )
    async def test_unreadable_is_evicted(
        self, remember_me: RememberMeStore, storage: InMemorySecretStorage, raw: str
    ) -> None:
        """Corrupt or inconsistent payloads read as absent and are removed."""
        await storage.write(TOKEN_KEY, raw)

        assert await remember_me.fetch() is None
        assert storage.snapshot() == {}

    @pytest.mark.asyncio
    async def test_storage_read_failure_reads_as_absent(self, clock) -> None:
        storage = FlakyStorage()
        store = RememberMeStore(storage, clock=clock)
        await store.issue("user-1")
        storage.fail_reads = True

        assert await store.fetch() is None


class TestValidate:
    """Tests for token validation."""

    @pytest.mark.asyncio
    async def test_matching_token(self, remember_me: RememberMeStore) -> None:
        credential = await remember_me.issue("user-1")
        assert await remember_me.validate(credential.token) is True

    @pytest.mark.asyncio
    async def test_wrong_or_empty_token(self, remember_me: RememberMeStore) -> None:
        await remember_me.issue("user-1")
        assert await remember_me.validate("nope") is False
        assert await remember_me.validate("") is False

    @pytest.mark.asyncio
    async def test_expired_token(self, remember_me: RememberMeStore, clock) -> None:
        credential = await remember_me.issue("user-1")
        clock.advance(timedelta(days=31))
        assert await remember_me.validate(credential.token) is False

    @pytest.mark.asyncio
    async def test_storage_failure_is_false(self, clock) -> None:
        """Validation never raises."""
        storage = FlakyStorage()
        store = RememberMeStore(storage, clock=clock)
        credential = await store.issue("user-1")
        storage.fail_reads = True

        assert await store.validate(credential.token) is False


class TestRefresh:
    """Tests for sliding the expiry window."""

    @pytest.mark.asyncio
    async def test_refresh_extends_from_now(self, remember_me: RememberMeStore, clock) -> None:
        """The new expiry is now + duration, not old expiry + duration."""
        issued = await remember_me.issue("user-1")
        clock.advance(timedelta(days=10))

        refreshed = await remember_me.refresh()

        assert refreshed is not None
        assert refreshed.token == issued.token
        assert refreshed.expires_at == clock() + timedelta(days=30)
        assert (await remember_me.fetch()).expires_at == refreshed.expires_at

    @pytest.mark.asyncio
    async def test_refresh_absent_is_noop(
        self, remember_me: RememberMeStore, storage: InMemorySecretStorage
    ) -> None:
        assert await remember_me.refresh() is None
        assert storage.snapshot() == {}

    @pytest.mark.asyncio
    async def test_refresh_expired_is_noop(self, remember_me: RememberMeStore, clock) -> None:
        await remember_me.issue("user-1")
        clock.advance(timedelta(days=45))

        assert await remember_me.refresh() is None
        assert await remember_me.fetch() is None

    @pytest.mark.asyncio
    async def test_refresh_write_failure_revokes(self, clock) -> None:
        """A credential that cannot be re-persisted is cleared."""
        storage = FlakyStorage()
        store = RememberMeStore(storage, clock=clock)
        await store.issue("user-1")
        storage.fail_writes = True

        assert await store.refresh() is None
        assert storage.snapshot() == {}


class TestClear:
    """Tests for revocation."""

    @pytest.mark.asyncio
    async def test_clear_is_idempotent(self, remember_me: RememberMeStore) -> None:
        await remember_me.issue("user-1")
        await remember_me.clear()
        await remember_me.clear()
        assert await remember_me.fetch() is None

    @pytest.mark.asyncio
    async def test_clear_all_wipes_everything(
        self, remember_me: RememberMeStore, storage: InMemorySecretStorage
    ) -> None:
        await storage.write("other", "value")
        await remember_me.issue("user-1")

        await remember_me.clear_all()

        assert storage.snapshot() == {}

    @pytest.mark.asyncio
    async def test_clear_swallows_storage_errors(self, clock) -> None:
        class Undeletable(InMemorySecretStorage):
            async def delete(self, key: str) -> None:
                raise StorageError("locked")

            async def delete_all(self) -> None:
                raise StorageError("locked")

        store = RememberMeStore(Undeletable(), clock=clock)
        await store.clear()
        await store.clear_all()


class TestCredential:
    """Tests for the credential model."""

    def test_expires_must_follow_created(self, clock) -> None:
        with pytest.raises(ValueError):
            RememberMeCredential(
                token="t",
                owner_id="u",
                created_at=clock(),
                expires_at=clock(),
                device_fingerprint="d",
            )

    def test_token_not_in_repr(self, clock) -> None:
        credential = RememberMeCredential(
            token="super-secret",
            owner_id="u",
            created_at=clock(),
            expires_at=clock() + timedelta(days=1),
            device_fingerprint="d",
        )
        assert "super-secret" not in repr(credential)


class GatedStorage(InMemorySecretStorage):
    """In-memory storage whose first read blocks until released."""

    def __init__(self) -> None:
        super().__init__()
        self.ops: list[str] = []
        self.reading = asyncio.Event()
        self.release = asyncio.Event()

    async def read(self, key: str) -> str | None:
        if not self.reading.is_set():
            self.reading.set()
            await self.release.wait()
        return await super().read(key)

    async def write(self, key: str, value: str) -> None:
        self.ops.append("write")
        await super().write(key, value)

    async def delete(self, key: str) -> None:
        self.ops.append("delete")
        await super().delete(key)


class TestSerialization:
    """Tests that mutations of the slot never interleave."""

    @pytest.mark.asyncio
    async def test_clear_waits_for_in_flight_refresh(self, clock) -> None:
        """A refresh suspended mid-read cannot write back after a clear."""
        storage = GatedStorage()
        store = RememberMeStore(storage, clock=clock)
        await store.issue("user-1")
        storage.ops.clear()

        refresh = asyncio.create_task(store.refresh())
        await storage.reading.wait()
        clear = asyncio.create_task(store.clear())
        for _ in range(5):
            await asyncio.sleep(0)
        assert storage.ops == []

        storage.release.set()
        refreshed, _ = await asyncio.gather(refresh, clear)

        assert refreshed is not None
        assert storage.ops == ["write", "delete"]
        assert await storage.read(TOKEN_KEY) is None
        assert await store.fetch() is None
