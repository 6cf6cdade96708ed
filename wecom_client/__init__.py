"""
WeCom Python Client.

An async Python client core for WeCom (企业微信): encrypted webhook
callbacks and cached access tokens / jsapi tickets.

Example:
    ```python
    from wecom_client import WeComClient, WeComConfig

    config = WeComConfig(corp_id="ww0123456789", agent_secret="...")
    async with WeComClient(config) as client:
        token = await client.get_access_token()
        jssdk = await client.get_jssdk_config("https://example.com/page")
    ```
"""

from wecom_client.client import WeComClient
from wecom_client.config import CacheMode, WeComConfig
from wecom_client.exceptions import (
    APIError,
    CacheIOError,
    CallbackError,
    CredentialError,
    CredentialFetchError,
    CredentialFetchTimeoutError,
    CryptoError,
    DecryptionError,
    InvalidEncodingKeyError,
    MalformedInputError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    SignatureMismatchError,
    WeComError,
)
from wecom_client.models.callback import CallbackEvent, JssdkConfig
from wecom_client.models.credential import Credential, CredentialKind, SecretScope

__version__ = "0.1.0"

__all__ = [
    # Main client
    "WeComClient",
    "WeComConfig",
    "CacheMode",
    # Models
    "CallbackEvent",
    "Credential",
    "CredentialKind",
    "JssdkConfig",
    "SecretScope",
    # Exceptions
    "WeComError",
    "CallbackError",
    "SignatureMismatchError",
    "CryptoError",
    "InvalidEncodingKeyError",
    "DecryptionError",
    "MalformedInputError",
    "CredentialError",
    "CredentialFetchError",
    "CredentialFetchTimeoutError",
    "CacheIOError",
    "APIError",
    "RateLimitError",
    "NetworkError",
    "RequestTimeoutError",
]
