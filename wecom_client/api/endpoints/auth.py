"""Credential-related API endpoints."""

from typing import Any

from wecom_client.api.http_client import AsyncHttpClient
from wecom_client.models.credential import SecretScope


async def get_token(http: AsyncHttpClient, corp_id: str, corp_secret: str) -> dict[str, Any]:
    """
    Get an access token.

    Args:
        http: Configured async HTTP client.
        corp_id: Corp id.
        corp_secret: Secret of the scope the token is for.

    Returns:
        Response with access_token and expires_in.
    """
    return await http.request(
        "GET",
        "/cgi-bin/gettoken",
        params={"corpid": corp_id, "corpsecret": corp_secret},
        authenticated=False,
    )


async def get_agent_jsapi_ticket(http: AsyncHttpClient) -> dict[str, Any]:
    """
    Get the application jsapi_ticket used by ``wx.agentConfig``.

    Returns:
        Response with ticket and expires_in.
    """
    return await http.request(
        "GET",
        "/cgi-bin/ticket/get",
        params={"type": "agent_config"},
        scope=SecretScope.AGENT,
    )


async def get_corp_jsapi_ticket(http: AsyncHttpClient) -> dict[str, Any]:
    """
    Get the corp jsapi_ticket used by ``wx.config``.

    Returns:
        Response with ticket and expires_in.
    """
    return await http.request("GET", "/cgi-bin/get_jsapi_ticket", scope=SecretScope.CORP)
