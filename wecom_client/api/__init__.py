"""
WeCom API client layer.

Provides async HTTP communication with the WeCom API.
"""

from wecom_client.api.http_client import (
    AccessTokenSource,
    AsyncHttpClient,
    WeComAPICode,
    sanitize_for_log,
)

__all__ = ["AccessTokenSource", "AsyncHttpClient", "WeComAPICode", "sanitize_for_log"]
