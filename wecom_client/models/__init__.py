"""
Domain models for the WeCom client.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from wecom_client.models.callback import (
    BatchJob,
    BatchJobResultEvent,
    CallbackEvent,
    ChangeType,
    CipherEnvelope,
    ExtAttrItem,
    ExtAttrType,
    JssdkConfig,
    PartyChangeEvent,
    TagChangeEvent,
    UserChangeEvent,
    WebLink,
)
from wecom_client.models.credential import (
    CacheKey,
    Credential,
    CredentialKind,
    SecretScope,
)

__all__ = [
    # Credentials
    "SecretScope",
    "CredentialKind",
    "CacheKey",
    "Credential",
    # Callback
    "CipherEnvelope",
    "ExtAttrType",
    "ExtAttrItem",
    "WebLink",
    "ChangeType",
    "CallbackEvent",
    "UserChangeEvent",
    "PartyChangeEvent",
    "TagChangeEvent",
    "BatchJob",
    "BatchJobResultEvent",
    "JssdkConfig",
]
