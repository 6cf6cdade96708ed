"""
WeCom client exception hierarchy.

All exceptions inherit from WeComError for easy catching.
"""

from typing import Any


class WeComError(Exception):
    """Base exception for all wecom_client errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class CallbackError(WeComError):
    """Inbound callback could not be accepted."""


class SignatureMismatchError(CallbackError):
    """Computed callback signature does not match the supplied one."""


class CryptoError(CallbackError):
    """Cryptographic operation failed."""


class InvalidEncodingKeyError(CryptoError):
    """EncodingAESKey does not decode to a 32-byte AES key."""


class DecryptionError(CryptoError):
    """Payload was authenticated but could not be decrypted or unframed."""


class MalformedInputError(CallbackError):
    """Callback XML is structurally incomplete."""

    def __init__(self, message: str, *, tag: str | None = None) -> None:
        super().__init__(message, tag=tag)
        self.tag = tag


class CredentialError(WeComError):
    """Credential could not be obtained or cached."""


class CredentialFetchError(CredentialError):
    """Upstream credential fetch failed."""

    def __init__(
        self, message: str, *, code: int | None = None, scope: str | None = None
    ) -> None:
        super().__init__(message, code=code, scope=scope)
        self.code = code
        self.scope = scope


class CredentialFetchTimeoutError(CredentialFetchError):
    """Upstream credential fetch timed out."""


class CacheIOError(CredentialError):
    """Credential cache file could not be read or written."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path


class APIError(WeComError):
    """API request failed."""

    def __init__(self, message: str, *, code: int, endpoint: str | None = None) -> None:
        super().__init__(message, code=code, endpoint=endpoint)
        self.code = code
        self.endpoint = endpoint


class RateLimitError(APIError):
    """Rate limited by API."""

    def __init__(
        self, message: str = "API frequency limit exceeded", *, endpoint: str | None = None
    ) -> None:
        super().__init__(message, code=45009, endpoint=endpoint)


class NetworkError(WeComError):
    """Network-level error (connection failed, timeout)."""


class RequestTimeoutError(NetworkError):
    """Request did not complete within the configured timeout."""
