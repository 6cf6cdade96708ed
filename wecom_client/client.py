"""
WeCom client facade.

This is the main entry point for users of the library. It wires the HTTP
client, the credential cache and the callback channel from one
configuration object.
"""

import asyncio
from typing import Any, Self

import httpx
import structlog

from wecom_client.api.endpoints.platform import get_api_domain_ip, get_callback_ip
from wecom_client.api.http_client import AsyncHttpClient
from wecom_client.callback.channel import CallbackChannel
from wecom_client.config import CacheMode, WeComConfig
from wecom_client.models.callback import CallbackEvent, JssdkConfig
from wecom_client.models.credential import Credential, SecretScope
from wecom_client.services.credential_cache import CredentialCache
from wecom_client.services.credential_store import (
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
)
from wecom_client.services.jssdk_service import JssdkService
from wecom_client.services.token_service import TokenService

logger = structlog.get_logger(__name__)


class WeComClient:
    """
    Async client for the WeCom platform.

    Example:
        ```python
        config = WeComConfig(
            corp_id="ww0123456789",
            agent_secret="...",
            token="...",
            encoding_aes_key="...",
        )
        async with WeComClient(config) as client:
            token = await client.get_access_token()
            ips = await client.get_callback_ip()

            # Inside a webhook handler
            event = client.receive_message(msg_signature, timestamp, nonce, body)
            reply = client.build_reply("<xml>...</xml>")
        ```

    Args:
        config: Client configuration.
        transport: Optional httpx transport for testing (mock transport).
        store: Optional credential store overriding ``config.cache_mode``.
    """

    def __init__(
        self,
        config: WeComConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        store: CredentialStore | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._store = store

        self._http: AsyncHttpClient | None = None
        self._token_service: TokenService | None = None
        self._jssdk_service: JssdkService | None = None
        self._channel: CallbackChannel | None = None
        if config.has_callback_keys:
            self._channel = CallbackChannel(
                config.token, config.encoding_aes_key, config.corp_id
            )

        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self._ensure_initialized()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    @property
    def config(self) -> WeComConfig:
        return self._config

    async def _ensure_initialized(self) -> None:
        """Ensure all components are initialized."""
        async with self._init_lock:
            if self._initialized:
                return

            self._http = AsyncHttpClient(self._config, transport=self._transport)
            await self._http.__aenter__()

            cache = CredentialCache(
                self._store or self._build_store(),
                single_flight=self._config.single_flight_refresh,
                default_ttl=self._config.default_token_ttl,
            )
            self._token_service = TokenService(self._http, cache, self._config)
            self._http.set_token_source(self._token_service)
            self._jssdk_service = JssdkService(self._token_service, self._config.corp_id)

            self._initialized = True
            logger.debug(
                "Client initialized",
                cache_mode=self._config.cache_mode.value,
                callbacks=self._channel is not None,
            )

    def _build_store(self) -> CredentialStore:
        if self._config.cache_mode == CacheMode.MEMORY:
            return MemoryCredentialStore()
        return FileCredentialStore(self._config.cache_dir)

    async def close(self) -> None:
        """Close the client and release resources."""
        async with self._init_lock:
            if self._http:
                await self._http.__aexit__(None, None, None)
                self._http = None

            self._token_service = None
            self._jssdk_service = None
            self._initialized = False
            logger.debug("Client closed")

    async def get_access_token(self, scope: SecretScope = SecretScope.AGENT) -> str:
        """
        Get a valid access token, fetching it when the cached one expired.

        Args:
            scope: Secret scope the token is issued for.

        Raises:
            CredentialFetchError: If the token cannot be fetched.
            ValueError: If no secret is configured for the scope.
        """
        return await (await self._tokens()).get_access_token(scope)

    async def get_agent_ticket(self) -> Credential:
        """Get the application jsapi_ticket."""
        return await (await self._tokens()).get_agent_ticket()

    async def get_corp_ticket(self) -> Credential:
        """Get the corp jsapi_ticket."""
        return await (await self._tokens()).get_corp_ticket()

    async def get_jssdk_config(self, url: str) -> JssdkConfig:
        """
        Get the ``wx.agentConfig`` parameters for a page.

        Args:
            url: Full URL of the page calling the JS-SDK.

        Returns:
            Signed JS-SDK configuration.
        """
        await self._ensure_initialized()
        if self._jssdk_service is None:
            msg = "Client not initialized"
            raise RuntimeError(msg)
        return await self._jssdk_service.get_agent_config(url)

    async def get_corp_jssdk_config(self, url: str) -> JssdkConfig:
        """
        Get the ``wx.config`` parameters for a page.

        Args:
            url: Full URL of the page calling the JS-SDK.

        Returns:
            Signed JS-SDK configuration.
        """
        await self._ensure_initialized()
        if self._jssdk_service is None:
            msg = "Client not initialized"
            raise RuntimeError(msg)
        return await self._jssdk_service.get_corp_config(url)

    async def get_callback_ip(self) -> list[str]:
        """Get the IP ranges the platform sends callbacks from."""
        return await get_callback_ip(await self._http_client())

    async def get_api_domain_ip(self) -> list[str]:
        """Get the IP ranges of the API domain."""
        return await get_api_domain_ip(await self._http_client())

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        scope: SecretScope = SecretScope.AGENT,
    ) -> dict[str, Any]:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method.
            endpoint: API endpoint (e.g., "/cgi-bin/user/get").
            json: JSON body.
            params: Query parameters.
            scope: Secret scope whose access token authorizes the call.

        Returns:
            Response JSON data.

        Raises:
            APIError: If the API returns a non-zero errcode.
            NetworkError: If the request fails.
        """
        http = await self._http_client()
        return await http.request(method, endpoint, json=json, params=params, scope=scope)

    def verify_url(self, msg_signature: str, timestamp: str, nonce: str, echostr: str) -> str:
        """
        Answer the callback URL verification handshake.

        Returns:
            The decrypted echo string.

        Raises:
            SignatureMismatchError: If the signature does not match.
            DecryptionError: If echostr cannot be decrypted.
        """
        return self._callbacks().verify_url(msg_signature, timestamp, nonce, echostr)

    def decrypt_callback(self, msg_signature: str, timestamp: str, nonce: str, body: str) -> str:
        """Verify and decrypt a POSTed callback, returning its XML."""
        return self._callbacks().decrypt_callback(msg_signature, timestamp, nonce, body)

    def receive_message(
        self, msg_signature: str, timestamp: str, nonce: str, body: str
    ) -> CallbackEvent:
        """
        Verify, decrypt and parse a POSTed callback.

        Raises:
            MalformedInputError: If the body or the decrypted XML is incomplete.
            SignatureMismatchError: If the signature does not match.
            DecryptionError: If the payload cannot be decrypted.
        """
        return self._callbacks().receive_message(msg_signature, timestamp, nonce, body)

    def build_reply(
        self,
        reply: str,
        *,
        timestamp: str | int | None = None,
        nonce: str | None = None,
    ) -> str:
        """Encrypt and sign a passive reply."""
        return self._callbacks().build_reply(reply, timestamp=timestamp, nonce=nonce)

    async def _http_client(self) -> AsyncHttpClient:
        await self._ensure_initialized()
        if self._http is None:
            msg = "Client not initialized"
            raise RuntimeError(msg)
        return self._http

    async def _tokens(self) -> TokenService:
        await self._ensure_initialized()
        if self._token_service is None:
            msg = "Client not initialized"
            raise RuntimeError(msg)
        return self._token_service

    def _callbacks(self) -> CallbackChannel:
        if self._channel is None:
            msg = "Callback handling requires token and encoding_aes_key"
            raise ValueError(msg)
        return self._channel
