"""
Async HTTP client for the WeCom API.

Provides a clean interface for making API requests with access-token
injection, error handling, and a single retry on a rejected token.
"""

import asyncio
from enum import IntEnum
from typing import Any, Protocol

import httpx
import structlog

from wecom_client.config import WeComConfig
from wecom_client.exceptions import (
    APIError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
)
from wecom_client.models.credential import SecretScope

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "corpsecret",
        "secret",
        "ticket",
        "token",
        "Encrypt",
        "encoding_aes_key",
        "EncodingAESKey",
    }
)


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive fields from a dict before logging.

    Recursively sanitizes nested dictionaries and lists.

    Args:
        data: Dictionary that may contain sensitive values.

    Returns:
        Copy with sensitive values replaced by "***".
    """
    result = {}
    for key, value in data.items():
        if key in SENSITIVE_KEYS:
            result[key] = "***"
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_for_log(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def drop_empty(data: dict[str, Any] | None) -> dict[str, Any]:
    """Drop top-level None and "" values; the API treats them as unset."""
    if not data:
        return {}
    return {key: value for key, value in data.items() if value is not None and value != ""}


class WeComAPICode(IntEnum):
    """WeCom API ``errcode`` values handled by the client."""

    SUCCESS = 0
    INVALID_CREDENTIAL = 40001
    INVALID_ACCESS_TOKEN = 40014
    ACCESS_TOKEN_EXPIRED = 42001
    API_FREQ_OUT_OF_LIMIT = 45009


_TOKEN_REJECTED = frozenset(
    {
        WeComAPICode.INVALID_CREDENTIAL,
        WeComAPICode.INVALID_ACCESS_TOKEN,
        WeComAPICode.ACCESS_TOKEN_EXPIRED,
    }
)


class AccessTokenSource(Protocol):
    """Supplies access tokens per secret scope."""

    async def get_access_token(self, scope: SecretScope) -> str: ...

    async def invalidate_access_token(self, scope: SecretScope) -> None: ...


class AsyncHttpClient:
    """Async HTTP client for the WeCom API."""

    def __init__(
        self,
        config: WeComConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._transport = transport

        self._client: httpx.AsyncClient | None = None
        self._token_source: AccessTokenSource | None = None

        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncHttpClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self._config.api_url,
                    timeout=self._config.timeout,
                    transport=self._transport,
                    headers={
                        "Accept": "*/*",
                        "User-Agent": self._config.user_agent,
                    },
                )
        return self._client

    async def _close(self) -> None:
        async with self._client_lock:
            if self._client is None:
                logger.debug("Client not open.")
                return
            await self._client.aclose()
            self._client = None

    def set_token_source(self, source: AccessTokenSource) -> None:
        """
        Set the provider of access tokens for authenticated requests.

        Note:
            Internal use only. Called by the client facade when wiring the
            TokenService.
        """
        self._token_source = source

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        scope: SecretScope = SecretScope.AGENT,
        authenticated: bool = True,
        auto_refresh: bool = True,
    ) -> dict[str, Any]:
        """
        Make an API request.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: API endpoint (e.g., "/cgi-bin/user/get").
            json: JSON body for POST requests. Empty values are dropped.
            params: Query parameters. Empty values are dropped.
            scope: Secret scope whose access token authorizes the call.
            authenticated: Whether to add the ``access_token`` query parameter.
            auto_refresh: Whether to refetch the token and retry once when the
                platform rejects it.

        Returns:
            Response JSON data.

        Raises:
            APIError: If the API returns a non-zero errcode.
            NetworkError: If the request fails at the transport level.
            RequestTimeoutError: If the request times out.
        """
        if self._client is None:
            msg = "HTTP client not initialized. Use 'async with' first."
            raise RuntimeError(msg)

        query = drop_empty(params)
        if authenticated:
            if self._token_source is None:
                msg = "No access token source configured"
                raise RuntimeError(msg)
            query["access_token"] = await self._token_source.get_access_token(scope)

        logger.debug(
            "API request",
            method=method,
            endpoint=endpoint,
            scope=scope.value,
            params=sanitize_for_log(query),
        )

        try:
            response = await self._client.request(
                method=method,
                url=endpoint,
                json=drop_empty(json) if json is not None else None,
                params=query,
            )
        except httpx.TimeoutException as e:
            msg = f"Request to {endpoint} timed out"
            raise RequestTimeoutError(msg, endpoint=endpoint) from e
        except httpx.HTTPError as e:
            msg = f"Request to {endpoint} failed: {type(e).__name__}"
            raise NetworkError(msg, endpoint=endpoint) from e

        try:
            data = response.json()
        except Exception as e:
            msg = "Invalid JSON response from API"
            raise APIError(msg, code=response.status_code, endpoint=endpoint) from e

        if not isinstance(data, dict):
            msg = "Invalid JSON response from API"
            raise APIError(msg, code=response.status_code, endpoint=endpoint)

        code = data.get("errcode", WeComAPICode.SUCCESS)

        if code in _TOKEN_REJECTED and authenticated and auto_refresh:
            logger.debug("Access token rejected, refreshing", code=code, scope=scope.value)
            await self._token_source.invalidate_access_token(scope)
            return await self.request(
                method,
                endpoint,
                json=json,
                params=params,
                scope=scope,
                authenticated=authenticated,
                auto_refresh=False,
            )

        if code != WeComAPICode.SUCCESS:
            self._raise_api_error(code, data, endpoint)

        return data

    @staticmethod
    def _raise_api_error(code: int, data: dict[str, Any], endpoint: str) -> None:
        error_msg = data.get("errmsg", "Unknown error")

        if code == WeComAPICode.API_FREQ_OUT_OF_LIMIT:
            raise RateLimitError(error_msg, endpoint=endpoint)

        msg = f"{error_msg} (errcode={code})"
        raise APIError(msg, code=code, endpoint=endpoint)
