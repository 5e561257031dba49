"""Secret storage backends for remember-me credentials.

The orchestrator and token store only see the ``SecretStorage`` protocol.
Platform keychains or encrypted stores plug in by implementing it.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from authhub.errors import StorageError


@runtime_checkable
class SecretStorage(Protocol):
    """Durable key/value storage for secrets, ideally encrypted at rest."""

    async def write(self, key: str, value: str) -> None: ...

    async def read(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> None: ...

    async def delete_all(self) -> None: ...


class InMemorySecretStorage:
    """Process-local storage. Nothing survives a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def write(self, key: str, value: str) -> None:
        self._data[key] = value

    async def read(self, key: str) -> str | None:
        return self._data.get(key)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def delete_all(self) -> None:
        self._data.clear()

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class FileSecretStorage:
    """JSON file storage readable only by the owning user.

    A missing or corrupt file reads as empty. The file is removed once its last
    key is deleted.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read secret store: {e}") from e
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            if not data:
                self.path.unlink(missing_ok=True)
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            os.chmod(self.path, 0o600)
        except OSError as e:
            raise StorageError(f"Cannot write secret store: {e}") from e

    def _write_key(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _read_key(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def _delete_key(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    async def write(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_key, key, value)

    async def read(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read_key, key)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_key, key)

    async def delete_all(self) -> None:
        await asyncio.to_thread(self._write_all, {})
