import asyncio
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from wecom_client.exceptions import CredentialFetchError
from wecom_client.models.credential import CacheKey, Credential, CredentialKind, SecretScope
from wecom_client.services.credential_cache import CredentialCache
from wecom_client.services.credential_store import FileCredentialStore, MemoryCredentialStore

NOW = 1_700_000_000.0
KEY = CacheKey.for_secret(CredentialKind.ACCESS_TOKEN, SecretScope.AGENT, "corp", "secret")


class Clock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _token_response(value: str = "fresh-token", expires_in: int = 7200) -> dict[str, Any]:
    return {"errcode": 0, "errmsg": "ok", "access_token": value, "expires_in": expires_in}


def _stored(value: str, expires_at: float) -> Credential:
    return Credential(
        kind=CredentialKind.ACCESS_TOKEN,
        value=value,
        obtained_at=expires_at - 7200,
        ttl_seconds=7200,
    )


@pytest.mark.asyncio
async def test_missing_credential_is_fetched_and_stored() -> None:
    store = MemoryCredentialStore()
    cache = CredentialCache(store, clock=Clock())
    fetch = AsyncMock(return_value=_token_response())

    credential = await cache.get(KEY, fetch)

    assert credential.value == "fresh-token"
    assert credential.expires_at == NOW + 7200
    assert await store.load(KEY) == credential
    fetch.assert_awaited_once()


@pytest.mark.asyncio
async def test_valid_credential_is_served_without_fetch() -> None:
    store = MemoryCredentialStore()
    await store.save(KEY, _stored("cached", NOW + 1))
    cache = CredentialCache(store, clock=Clock())
    fetch = AsyncMock(return_value=_token_response())

    credential = await cache.get(KEY, fetch)

    assert credential.value == "cached"
    fetch.assert_not_awaited()


@pytest.mark.asyncio
async def test_credential_expiring_now_is_refreshed() -> None:
    store = MemoryCredentialStore()
    await store.save(KEY, _stored("stale", NOW))
    cache = CredentialCache(store, clock=Clock())
    fetch = AsyncMock(return_value=_token_response())

    credential = await cache.get(KEY, fetch)

    assert credential.value == "fresh-token"
    fetch.assert_awaited_once()


@pytest.mark.asyncio
async def test_expired_file_is_refreshed_and_rewritten(tmp_path: Path) -> None:
    store = FileCredentialStore(tmp_path)
    await store.save(KEY, _stored("stale", NOW - 1))
    cache = CredentialCache(store, clock=Clock())
    fetch = AsyncMock(return_value=_token_response())

    credential = await cache.get(KEY, fetch)

    data = json.loads(store.path_for(KEY).read_text(encoding="utf-8"))
    assert credential.value == "fresh-token"
    assert data["access_token"] == "fresh-token"
    assert data["expires_at"] == int((NOW + 7200) * 1000)
    fetch.assert_awaited_once()


@pytest.mark.asyncio
async def test_corrupt_file_causes_exactly_one_fetch(tmp_path: Path) -> None:
    store = FileCredentialStore(tmp_path)
    store.path_for(KEY).write_text("{corrupt", encoding="utf-8")
    cache = CredentialCache(store, clock=Clock())
    fetch = AsyncMock(return_value=_token_response())

    first = await cache.get(KEY, fetch)
    second = await cache.get(KEY, fetch)

    assert first.value == second.value == "fresh-token"
    fetch.assert_awaited_once()


@pytest.mark.asyncio
async def test_persisted_credential_survives_new_cache(tmp_path: Path) -> None:
    fetch = AsyncMock(return_value=_token_response())
    await CredentialCache(FileCredentialStore(tmp_path), clock=Clock()).get(KEY, fetch)

    restarted = CredentialCache(FileCredentialStore(tmp_path), clock=Clock(NOW + 60))
    credential = await restarted.get(KEY, fetch)

    assert credential.value == "fresh-token"
    fetch.assert_awaited_once()


@pytest.mark.asyncio
async def test_fetch_failure_propagates_and_is_not_cached() -> None:
    store = MemoryCredentialStore()
    cache = CredentialCache(store, clock=Clock())
    fetch = AsyncMock(side_effect=[CredentialFetchError("down"), _token_response()])

    with pytest.raises(CredentialFetchError):
        await cache.get(KEY, fetch)
    assert await store.load(KEY) is None

    credential = await cache.get(KEY, fetch)
    assert credential.value == "fresh-token"
    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_reported_ttl_is_used() -> None:
    cache = CredentialCache(MemoryCredentialStore(), clock=Clock())

    credential = await cache.get(KEY, AsyncMock(return_value=_token_response(expires_in=600)))

    assert credential.expires_at == NOW + 600


@pytest.mark.asyncio
async def test_default_ttl_applies_when_not_reported() -> None:
    cache = CredentialCache(MemoryCredentialStore(), clock=Clock(), default_ttl=300)

    credential = await cache.get(KEY, AsyncMock(return_value={"access_token": "t"}))

    assert credential.expires_at == NOW + 300


@pytest.mark.asyncio
async def test_invalidate_forces_refetch() -> None:
    cache = CredentialCache(MemoryCredentialStore(), clock=Clock())
    fetch = AsyncMock(side_effect=[_token_response("one"), _token_response("two")])

    await cache.get(KEY, fetch)
    await cache.invalidate(KEY)
    credential = await cache.get(KEY, fetch)

    assert credential.value == "two"


@pytest.mark.asyncio
async def test_clock_advance_past_ttl_refreshes() -> None:
    clock = Clock()
    cache = CredentialCache(MemoryCredentialStore(), clock=clock)
    fetch = AsyncMock(side_effect=[_token_response("one"), _token_response("two")])

    await cache.get(KEY, fetch)
    clock.now += 7199
    assert (await cache.get(KEY, fetch)).value == "one"
    clock.now += 1
    assert (await cache.get(KEY, fetch)).value == "two"


@pytest.mark.asyncio
async def test_buckets_are_independent() -> None:
    other = CacheKey.for_secret(CredentialKind.ACCESS_TOKEN, SecretScope.CORP, "corp", "other")
    cache = CredentialCache(MemoryCredentialStore(), clock=Clock())

    first = await cache.get(KEY, AsyncMock(return_value=_token_response("agent")))
    second = await cache.get(other, AsyncMock(return_value=_token_response("corp")))

    assert (first.value, second.value) == ("agent", "corp")


# Concurrency


def _slow_fetch(calls: list[int]) -> AsyncMock:
    async def fetch() -> dict[str, Any]:
        calls.append(1)
        for _ in range(5):
            await asyncio.sleep(0)
        return _token_response(f"token-{len(calls)}")

    return AsyncMock(side_effect=fetch)


@pytest.mark.asyncio
async def test_single_flight_fetches_at_most_once() -> None:
    calls: list[int] = []
    cache = CredentialCache(MemoryCredentialStore(), clock=Clock(), single_flight=True)
    fetch = _slow_fetch(calls)

    results = await asyncio.gather(*(cache.get(KEY, fetch) for _ in range(10)))

    assert len(calls) == 1
    assert {credential.value for credential in results} == {"token-1"}


@pytest.mark.asyncio
async def test_without_single_flight_concurrent_callers_each_fetch() -> None:
    calls: list[int] = []
    cache = CredentialCache(MemoryCredentialStore(), clock=Clock())
    fetch = _slow_fetch(calls)

    results = await asyncio.gather(*(cache.get(KEY, fetch) for _ in range(3)))

    assert len(calls) > 1
    assert all(credential.is_valid(NOW) for credential in results)


@pytest.mark.asyncio
@pytest.mark.parametrize("expires_in", [0, -5])
async def test_already_expired_response_is_rejected(expires_in: int) -> None:
    store = MemoryCredentialStore()
    cache = CredentialCache(store, clock=Clock())

    with pytest.raises(CredentialFetchError, match="expired"):
        await cache.get(KEY, AsyncMock(return_value=_token_response(expires_in=expires_in)))

    assert len(store) == 0


@pytest.mark.asyncio
async def test_non_numeric_ttl_raises_credential_fetch_error() -> None:
    cache = CredentialCache(MemoryCredentialStore(), clock=Clock())
    fetch = AsyncMock(return_value={"access_token": "t", "expires_in": "soon"})

    with pytest.raises(CredentialFetchError) as exc_info:
        await cache.get(KEY, fetch)

    assert isinstance(exc_info.value.__cause__, ValueError)
