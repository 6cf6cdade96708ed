"""
Credential persistence backends.

A store only loads and saves credentials; deciding whether a credential is
still usable is the cache's job.
"""

import asyncio
import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from wecom_client.exceptions import CacheIOError
from wecom_client.models.credential import DEFAULT_TTL_SECONDS, CacheKey, Credential

logger = structlog.get_logger(__name__)


@runtime_checkable
class CredentialStore(Protocol):
    """Interface for credential persistence."""

    async def load(self, key: CacheKey) -> Credential | None:
        """
        Load the credential of a bucket.

        Returns:
            The stored credential, expired or not, or None on a miss.

        Raises:
            CacheIOError: If the backing storage fails for a reason other
                than the entry being absent or unreadable.
        """
        ...

    async def save(self, key: CacheKey, credential: Credential) -> None:
        """
        Persist a credential, replacing the previous one.

        Raises:
            CacheIOError: If the credential cannot be written.
        """
        ...

    async def delete(self, key: CacheKey) -> None:
        """Drop a bucket. No-op if absent."""
        ...


class MemoryCredentialStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Credential] = {}

    async def load(self, key: CacheKey) -> Credential | None:
        return self._entries.get(key)

    async def save(self, key: CacheKey, credential: Credential) -> None:
        self._entries[key] = credential

    async def delete(self, key: CacheKey) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class FileCredentialStore:
    """
    One JSON file per bucket.

    File content is the upstream response fields plus ``expires_at`` in epoch
    milliseconds. Missing or unparsable files are cache misses.
    """

    def __init__(self, directory: Path | str) -> None:
        """
        Args:
            directory: Directory holding the credential files. Created on first write.
        """
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: CacheKey) -> Path:
        return self._directory / key.filename

    async def load(self, key: CacheKey) -> Credential | None:
        return await asyncio.to_thread(self._load_sync, key)

    async def save(self, key: CacheKey, credential: Credential) -> None:
        await asyncio.to_thread(self._save_sync, key, credential)

    async def delete(self, key: CacheKey) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            raise CacheIOError(f"Failed to delete credential file: {e}", path=str(path)) from e

    def _load_sync(self, key: CacheKey) -> Credential | None:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheIOError(f"Failed to read credential file: {e}", path=str(path)) from e

        try:
            return _decode(key, json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(
                "Ignoring unreadable credential file",
                path=str(path),
                error_type=type(e).__name__,
            )
            return None

    def _save_sync(self, key: CacheKey, credential: Credential) -> None:
        path = self.path_for(key)
        payload = json.dumps(_encode(credential), indent=2)
        tmp_path: str | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self._directory, suffix=".tmp", delete=False
            ) as f:
                tmp_path = f.name
                f.write(payload)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
            raise CacheIOError(f"Failed to write credential file: {e}", path=str(path)) from e

        logger.debug("Credential persisted", kind=key.kind.value, path=str(path))


def _encode(credential: Credential) -> dict[str, Any]:
    return {
        **credential.fields,
        credential.kind.value_field: credential.value,
        "expires_at": int(round(credential.expires_at * 1000)),
    }


def _decode(key: CacheKey, data: Any) -> Credential:
    if not isinstance(data, dict):
        msg = "credential file must hold a JSON object"
        raise TypeError(msg)

    expires_ms = data.get("expires_at", data.get("expires_time"))
    if expires_ms is None:
        msg = "credential file has no expiry"
        raise KeyError(msg)

    value = data[key.kind.value_field]
    if not isinstance(value, str) or not value:
        msg = "credential value must be a non-empty string"
        raise TypeError(msg)

    ttl = int(data.get("expires_in") or DEFAULT_TTL_SECONDS)
    fields = {k: v for k, v in data.items() if k not in ("expires_at", "expires_time")}

    return Credential(
        kind=key.kind,
        value=value,
        obtained_at=float(expires_ms) / 1000 - ttl,
        ttl_seconds=ttl,
        fields=fields,
    )
