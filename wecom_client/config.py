"""
WeCom client configuration.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from wecom_client.models.credential import DEFAULT_TTL_SECONDS, SecretScope


class CacheMode(StrEnum):
    """Where fetched credentials are kept."""

    FILE = "file"
    MEMORY = "memory"


@dataclass(frozen=True, kw_only=True)
class WeComConfig:
    """
    Attributes:
        corp_id: Corp id, also the receiver id of encrypted callbacks.
        agent_secret: Application secret (``agent`` scope).
        contacts_secret: Address-book secret (``concat`` scope).
        corp_secret: Corporate secret (``corp`` scope).
        token: Callback token, required for callback handling.
        encoding_aes_key: Callback EncodingAESKey, required for callback handling.
        api_url: Base URL for the WeCom API.
        timeout: Request timeout in seconds.
        user_agent: User-Agent header value.
        cache_mode: Persist credentials to files or keep them in memory.
        cache_dir: Directory holding credential files.
        single_flight_refresh: Deduplicate concurrent refreshes of one credential.
        default_token_ttl: TTL used when the platform omits ``expires_in``.
    """

    corp_id: str
    agent_secret: str | None = None
    contacts_secret: str | None = None
    corp_secret: str | None = None
    token: str | None = None
    encoding_aes_key: str | None = None
    api_url: str = "https://qyapi.weixin.qq.com"
    timeout: float = 30.0
    user_agent: str = "WeCom-Python/0.1"
    cache_mode: CacheMode = CacheMode.FILE
    cache_dir: Path = Path(".wecom")
    single_flight_refresh: bool = False
    default_token_ttl: int = DEFAULT_TTL_SECONDS

    def __post_init__(self) -> None:
        if not self.corp_id:
            msg = "corp_id is required"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        if self.default_token_ttl <= 0:
            msg = "default_token_ttl must be positive"
            raise ValueError(msg)
        if self.encoding_aes_key is not None and len(self.encoding_aes_key) != 43:
            msg = "encoding_aes_key must be 43 characters"
            raise ValueError(msg)
        # Accept plain strings for enum and path fields
        object.__setattr__(self, "cache_mode", CacheMode(self.cache_mode))
        object.__setattr__(self, "cache_dir", Path(self.cache_dir))

    def secret_for(self, scope: SecretScope) -> str:
        """
        Get the secret governing a scope.

        Secrets are never substituted for one another.

        Raises:
            ValueError: If no secret is configured for the scope.
        """
        secrets = {
            SecretScope.AGENT: self.agent_secret,
            SecretScope.CONTACTS: self.contacts_secret,
            SecretScope.CORP: self.corp_secret,
        }
        secret = secrets[SecretScope(scope)]
        if not secret:
            msg = f"No secret configured for scope {scope!r}"
            raise ValueError(msg)
        return secret

    @property
    def has_callback_keys(self) -> bool:
        return bool(self.token and self.encoding_aes_key)
