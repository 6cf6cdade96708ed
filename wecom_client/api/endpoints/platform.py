"""Platform introspection endpoints."""

from wecom_client.api.http_client import AsyncHttpClient
from wecom_client.models.credential import SecretScope


async def get_callback_ip(http: AsyncHttpClient) -> list[str]:
    """Get the IP ranges the platform sends callbacks from."""
    response = await http.request("GET", "/cgi-bin/getcallbackip", scope=SecretScope.CORP)
    return response.get("ip_list", [])


async def get_api_domain_ip(http: AsyncHttpClient) -> list[str]:
    """Get the IP ranges of the API domain."""
    response = await http.request("GET", "/cgi-bin/get_api_domain_ip", scope=SecretScope.CORP)
    return response.get("ip_list", [])
