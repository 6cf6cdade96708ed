"""SHA-1 signatures for callbacks and JS-SDK configuration."""

import hashlib
import hmac


def sign(token: str, timestamp: str | int, nonce: str, body: str) -> str:
    """
    Compute the callback signature.

    The four values are sorted ascending and concatenated without a
    separator, so the result does not depend on argument order.

    Args:
        token: Callback token configured on the platform.
        timestamp: Timestamp query parameter.
        nonce: Nonce query parameter.
        body: Encrypted payload (``Encrypt`` or ``echostr``).

    Returns:
        Lowercase hex SHA-1 digest.
    """
    parts = sorted([token, str(timestamp), nonce, body])
    return hashlib.sha1("".join(parts).encode("utf-8")).hexdigest()


def verify(expected: str, token: str, timestamp: str | int, nonce: str, body: str) -> bool:
    """Check a callback signature in constant time."""
    computed = sign(token, timestamp, nonce, body)
    return hmac.compare_digest(computed.encode("utf-8"), expected.encode("utf-8"))


def sign_jsapi(ticket: str, nonce_str: str, timestamp: str | int, url: str) -> str:
    """
    Compute the JS-SDK configuration signature.

    Fields are joined in ASCII order of their names:
    ``jsapi_ticket``, ``noncestr``, ``timestamp``, ``url``.
    """
    raw = f"jsapi_ticket={ticket}&noncestr={nonce_str}&timestamp={timestamp}&url={url}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()
