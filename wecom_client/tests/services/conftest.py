from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from wecom_client.api.http_client import AsyncHttpClient
from wecom_client.config import CacheMode, WeComConfig
from wecom_client.services.credential_cache import CredentialCache
from wecom_client.services.credential_store import MemoryCredentialStore
from wecom_client.services.token_service import TokenService
from wecom_client.tests.constants import CORP_ID
from wecom_client.tests.utils.mock_transport import MockTransport


@pytest.fixture
def config() -> WeComConfig:
    return WeComConfig(
        corp_id=CORP_ID,
        agent_secret="agent-secret",
        contacts_secret="contacts-secret",
        corp_secret="corp-secret",
        cache_mode=CacheMode.MEMORY,
    )


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest_asyncio.fixture
async def token_service(
    config: WeComConfig, transport: MockTransport, store: MemoryCredentialStore
) -> AsyncIterator[TokenService]:
    async with AsyncHttpClient(config, transport=transport) as http:
        service = TokenService(http, CredentialCache(store), config)
        http.set_token_source(service)
        yield service
