"""JS-SDK configuration signatures."""

import secrets
import time
from collections.abc import Callable

import structlog

from wecom_client.crypto.signature import sign_jsapi
from wecom_client.models.callback import JssdkConfig
from wecom_client.services.token_service import TokenService

logger = structlog.get_logger(__name__)


class JssdkService:
    """Builds signed ``wx.config`` / ``wx.agentConfig`` parameters."""

    def __init__(
        self,
        token_service: TokenService,
        corp_id: str,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tokens = token_service
        self._corp_id = corp_id
        self._clock = clock

    async def get_agent_config(self, url: str) -> JssdkConfig:
        """
        Sign a page URL with the application jsapi_ticket.

        Args:
            url: Full URL of the current page, without the fragment.
        """
        ticket = await self._tokens.get_agent_ticket()
        return self._build(ticket.value, url)

    async def get_corp_config(self, url: str) -> JssdkConfig:
        """
        Sign a page URL with the corp jsapi_ticket.

        Args:
            url: Full URL of the current page, without the fragment.
        """
        ticket = await self._tokens.get_corp_ticket()
        return self._build(ticket.value, url)

    def _build(self, ticket: str, url: str) -> JssdkConfig:
        timestamp = int(self._clock())
        nonce_str = secrets.token_urlsafe(12)
        signature = sign_jsapi(ticket, nonce_str, timestamp, url.split("#", 1)[0])
        logger.debug("JS-SDK config signed", timestamp=timestamp)
        return JssdkConfig(
            app_id=self._corp_id, timestamp=timestamp, nonce_str=nonce_str, signature=signature
        )
