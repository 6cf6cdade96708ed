"""
Business logic services for the WeCom client.
"""

from wecom_client.services.credential_cache import CredentialCache
from wecom_client.services.credential_store import (
    CredentialStore,
    FileCredentialStore,
    MemoryCredentialStore,
)
from wecom_client.services.jssdk_service import JssdkService
from wecom_client.services.token_service import TokenService

__all__ = [
    "CredentialCache",
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "JssdkService",
    "TokenService",
]
