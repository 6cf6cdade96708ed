from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from wecom_client.api.endpoints.auth import (
    get_agent_jsapi_ticket,
    get_corp_jsapi_ticket,
    get_token,
)
from wecom_client.api.endpoints.platform import get_api_domain_ip, get_callback_ip
from wecom_client.api.http_client import AsyncHttpClient
from wecom_client.config import WeComConfig
from wecom_client.models.credential import SecretScope
from wecom_client.tests.constants import CORP_ID
from wecom_client.tests.utils.mock_transport import MockTransport


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def token_source() -> AsyncMock:
    source = AsyncMock()
    source.get_access_token.return_value = "token-1"
    return source


@pytest_asyncio.fixture
async def http(
    mock_transport: MockTransport, token_source: AsyncMock
) -> AsyncIterator[AsyncHttpClient]:
    config = WeComConfig(corp_id=CORP_ID)
    async with AsyncHttpClient(config, transport=mock_transport) as client:
        client.set_token_source(token_source)
        yield client


@pytest.mark.asyncio
async def test_get_token(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_response(
        "/cgi-bin/gettoken", {"errcode": 0, "access_token": "tok", "expires_in": 7200}
    )

    response = await get_token(http, CORP_ID, "secret")

    [request] = mock_transport.requests
    assert response["access_token"] == "tok"
    assert dict(request.url.params) == {"corpid": CORP_ID, "corpsecret": "secret"}


@pytest.mark.asyncio
async def test_get_agent_jsapi_ticket(
    http: AsyncHttpClient, mock_transport: MockTransport, token_source: AsyncMock
) -> None:
    mock_transport.add_response("/cgi-bin/ticket/get", {"errcode": 0, "ticket": "tk"})

    response = await get_agent_jsapi_ticket(http)

    [request] = mock_transport.requests
    assert response["ticket"] == "tk"
    assert request.url.params["type"] == "agent_config"
    token_source.get_access_token.assert_awaited_once_with(SecretScope.AGENT)


@pytest.mark.asyncio
async def test_get_corp_jsapi_ticket(
    http: AsyncHttpClient, mock_transport: MockTransport, token_source: AsyncMock
) -> None:
    mock_transport.add_response("/cgi-bin/get_jsapi_ticket", {"errcode": 0, "ticket": "tk"})

    await get_corp_jsapi_ticket(http)

    token_source.get_access_token.assert_awaited_once_with(SecretScope.CORP)


@pytest.mark.asyncio
async def test_get_callback_ip(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_response(
        "/cgi-bin/getcallbackip", {"errcode": 0, "ip_list": ["1.2.3.4", "10.0.0.0/8"]}
    )

    assert await get_callback_ip(http) == ["1.2.3.4", "10.0.0.0/8"]


@pytest.mark.asyncio
async def test_get_api_domain_ip(http: AsyncHttpClient, mock_transport: MockTransport) -> None:
    mock_transport.add_response("/cgi-bin/get_api_domain_ip", {"errcode": 0, "ip_list": []})

    assert await get_api_domain_ip(http) == []
