"""
Access token and jsapi_ticket service.

Maps each credential bucket to its upstream fetch call and serves the
results through the CredentialCache.
"""

from typing import Any

import structlog

from wecom_client.api.endpoints.auth import (
    get_agent_jsapi_ticket,
    get_corp_jsapi_ticket,
    get_token,
)
from wecom_client.api.http_client import AsyncHttpClient
from wecom_client.config import WeComConfig
from wecom_client.exceptions import (
    APIError,
    CredentialFetchError,
    CredentialFetchTimeoutError,
    NetworkError,
    RequestTimeoutError,
)
from wecom_client.models.credential import CacheKey, Credential, CredentialKind, SecretScope
from wecom_client.services.credential_cache import CredentialCache, Fetcher

logger = structlog.get_logger(__name__)


class TokenService:
    """
    Serves access tokens per secret scope and the two jsapi tickets.

    Each scope uses its own secret and its own bucket; secrets are never
    substituted for one another. Implements AccessTokenSource for the HTTP
    client.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        cache: CredentialCache,
        config: WeComConfig,
    ) -> None:
        """
        Args:
            http_client: HTTP client for the fetch calls.
            cache: Credential cache.
            config: Client configuration holding corp id and secrets.
        """
        self._http = http_client
        self._cache = cache
        self._config = config

    def cache_key(self, kind: CredentialKind, scope: SecretScope) -> CacheKey:
        """
        Get the bucket handle for a credential.

        Raises:
            ValueError: If no secret is configured for the scope.
        """
        secret = self._config.secret_for(scope)
        return CacheKey.for_secret(kind, scope, self._config.corp_id, secret)

    async def get_access_token(self, scope: SecretScope = SecretScope.AGENT) -> str:
        """
        Get a valid access token for a scope.

        Raises:
            CredentialFetchError: If the token cannot be fetched.
            CredentialFetchTimeoutError: If the fetch timed out.
            CacheIOError: If the credential cache fails.
            ValueError: If no secret is configured for the scope.
        """
        credential = await self._get(CredentialKind.ACCESS_TOKEN, scope, self._fetch_token(scope))
        return credential.value

    async def invalidate_access_token(self, scope: SecretScope) -> None:
        """Drop the cached access token of a scope."""
        await self._cache.invalidate(self.cache_key(CredentialKind.ACCESS_TOKEN, scope))

    async def get_agent_ticket(self) -> Credential:
        """
        Get the application jsapi_ticket (AGENT scope).

        Raises:
            CredentialFetchError: If the ticket cannot be fetched.
        """
        return await self._get(
            CredentialKind.AGENT_TICKET,
            SecretScope.AGENT,
            lambda: get_agent_jsapi_ticket(self._http),
        )

    async def get_corp_ticket(self) -> Credential:
        """
        Get the corp jsapi_ticket (CORP scope).

        Raises:
            CredentialFetchError: If the ticket cannot be fetched.
        """
        return await self._get(
            CredentialKind.CORP_TICKET,
            SecretScope.CORP,
            lambda: get_corp_jsapi_ticket(self._http),
        )

    def _fetch_token(self, scope: SecretScope) -> Fetcher:
        async def fetch() -> dict[str, Any]:
            return await get_token(
                self._http, self._config.corp_id, self._config.secret_for(scope)
            )

        return fetch

    async def _get(self, kind: CredentialKind, scope: SecretScope, fetch: Fetcher) -> Credential:
        key = self.cache_key(kind, scope)
        return await self._cache.get(key, self._guarded(kind, scope, fetch))

    @staticmethod
    def _guarded(kind: CredentialKind, scope: SecretScope, fetch: Fetcher) -> Fetcher:
        """Translate fetch failures into credential errors."""

        async def fetch_checked() -> dict[str, Any]:
            try:
                response = await fetch()
            except CredentialFetchError:
                # A ticket fetch whose access token could not be obtained
                raise
            except RequestTimeoutError as e:
                msg = f"Timed out fetching {kind.value}"
                raise CredentialFetchTimeoutError(msg, scope=scope.value) from e
            except NetworkError as e:
                msg = f"Failed to fetch {kind.value}: {e.message}"
                raise CredentialFetchError(msg, scope=scope.value) from e
            except APIError as e:
                logger.warning(
                    "Credential fetch rejected", kind=kind.value, scope=scope.value, code=e.code
                )
                msg = f"Failed to fetch {kind.value}: {e.message}"
                raise CredentialFetchError(msg, code=e.code, scope=scope.value) from e

            if not response.get(kind.value_field):
                msg = f"Response has no {kind.value_field}"
                raise CredentialFetchError(msg, scope=scope.value)

            expires_in = response.get("expires_in")
            if expires_in is not None and not _is_positive_int(expires_in):
                logger.warning(
                    "Credential fetch returned invalid expires_in",
                    kind=kind.value,
                    scope=scope.value,
                    expires_in=expires_in,
                )
                msg = f"Invalid expires_in for {kind.value}: {expires_in!r}"
                raise CredentialFetchError(msg, scope=scope.value)
            return response

        return fetch_checked


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
