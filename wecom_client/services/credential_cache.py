"""
Expiry-aware cache for bearer credentials.

Each bucket goes Missing -> Valid -> Expired -> Valid (after refresh). The
store is read on every get(), so a restart does not force a refetch while
the persisted credential is still within its TTL.

Without single-flight, concurrent callers that observe the same expired
bucket each fetch and persist a fresh credential; the last writer wins.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from wecom_client.exceptions import CredentialFetchError
from wecom_client.models.credential import DEFAULT_TTL_SECONDS, CacheKey, Credential
from wecom_client.services.credential_store import CredentialStore

logger = structlog.get_logger(__name__)

Fetcher = Callable[[], Awaitable[dict[str, Any]]]


class CredentialCache:
    """
    Serves valid credentials, refreshing them through a caller-supplied fetch.

    Fetch failures propagate to the caller and are never cached.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        clock: Callable[[], float] = time.time,
        single_flight: bool = False,
        default_ttl: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        """
        Args:
            store: Persistence backend.
            clock: Returns the current time in epoch seconds.
            single_flight: Serialize refreshes per bucket so concurrent callers
                share one fetch.
            default_ttl: TTL applied when a fetch response omits ``expires_in``.
        """
        self._store = store
        self._clock = clock
        self._single_flight = single_flight
        self._default_ttl = default_ttl
        self._locks: dict[CacheKey, asyncio.Lock] = {}

    @property
    def store(self) -> CredentialStore:
        return self._store

    async def get(self, key: CacheKey, fetch: Fetcher) -> Credential:
        """
        Get a valid credential for a bucket.

        Args:
            key: Bucket handle.
            fetch: Upstream call returning the raw credential response.

        Returns:
            A credential with ``now < expires_at``.

        Raises:
            CredentialFetchError: If the upstream fetch fails or returns an
                unusable credential.
            CacheIOError: If the store fails.
        """
        if (cached := await self._load_valid(key)) is not None:
            return cached

        if not self._single_flight:
            return await self._refresh(key, fetch)

        async with self._lock_for(key):
            if (cached := await self._load_valid(key)) is not None:
                logger.debug(
                    "Credential already refreshed by another coroutine", kind=key.kind.value
                )
                return cached
            return await self._refresh(key, fetch)

    async def invalidate(self, key: CacheKey) -> None:
        """Drop a bucket so the next get() refetches."""
        logger.debug("Invalidating credential", kind=key.kind.value, scope=key.scope.value)
        await self._store.delete(key)

    async def _load_valid(self, key: CacheKey) -> Credential | None:
        credential = await self._store.load(key)
        if credential is None:
            return None
        if credential.is_valid(self._clock()):
            return credential
        logger.debug("Credential expired", kind=key.kind.value, scope=key.scope.value)
        return None

    async def _refresh(self, key: CacheKey, fetch: Fetcher) -> Credential:
        logger.debug("Fetching credential", kind=key.kind.value, scope=key.scope.value)
        response = await fetch()

        now = self._clock()
        try:
            credential = Credential.from_response(
                key.kind, response, now=now, default_ttl=self._default_ttl
            )
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Unusable {key.kind.value} response"
            raise CredentialFetchError(msg, scope=key.scope.value) from e
        if not credential.is_valid(now):
            msg = f"Fetched {key.kind.value} is already expired (ttl={credential.ttl_seconds})"
            raise CredentialFetchError(msg, scope=key.scope.value)

        await self._store.save(key, credential)

        logger.info(
            "Credential refreshed",
            kind=key.kind.value,
            scope=key.scope.value,
            ttl=credential.ttl_seconds,
        )
        return credential

    def _lock_for(self, key: CacheKey) -> asyncio.Lock:
        if (lock := self._locks.get(key)) is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock
