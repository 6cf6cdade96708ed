"""
Credential-related domain models.
"""

import hashlib
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

DEFAULT_TTL_SECONDS = 7200


class SecretScope(StrEnum):
    """Which upstream secret governs a call and its credential bucket."""

    AGENT = "agent"
    CONTACTS = "concat"
    CORP = "corp"


class CredentialKind(StrEnum):
    """Credential buckets held by the cache."""

    ACCESS_TOKEN = "access_token"
    AGENT_TICKET = "jsapi_ticket"
    CORP_TICKET = "corp_jsapi_ticket"

    @property
    def value_field(self) -> str:
        """Name of the upstream response field carrying the credential."""
        if self is CredentialKind.ACCESS_TOKEN:
            return "access_token"
        return "ticket"


@dataclass(frozen=True, kw_only=True)
class CacheKey:
    """
    Handle identifying one credential bucket.

    Attributes:
        kind: Credential kind.
        scope: Secret scope the credential was obtained under.
        secret_digest: Truncated SHA-256 of corp id, scope and secret.
    """

    kind: CredentialKind
    scope: SecretScope
    secret_digest: str

    @classmethod
    def for_secret(
        cls, kind: CredentialKind, scope: SecretScope, corp_id: str, secret: str
    ) -> "CacheKey":
        raw = f"{corp_id}:{scope.value}:{secret}".encode()
        return cls(kind=kind, scope=scope, secret_digest=hashlib.sha256(raw).hexdigest()[:16])

    @property
    def filename(self) -> str:
        return f"{self.kind.value}_{self.secret_digest}.json"


@dataclass(frozen=True, kw_only=True)
class Credential:
    """
    A bearer credential with its validity window.

    Attributes:
        kind: Credential kind.
        value: The token or ticket string.
        obtained_at: Epoch seconds when the credential was fetched.
        ttl_seconds: Lifetime reported by the platform (``expires_in``).
        fields: Raw upstream response fields, persisted alongside.
    """

    kind: CredentialKind
    value: str
    obtained_at: float
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def expires_at(self) -> float:
        return self.obtained_at + self.ttl_seconds

    def is_valid(self, now: float) -> bool:
        """A credential is served only while ``now < expires_at``."""
        return now < self.expires_at

    @classmethod
    def from_response(
        cls,
        kind: CredentialKind,
        response: dict[str, Any],
        *,
        now: float,
        default_ttl: int = DEFAULT_TTL_SECONDS,
    ) -> "Credential":
        """
        Build a credential from an upstream fetch response.

        Args:
            kind: Credential kind being fetched.
            response: Upstream JSON body (``access_token``/``ticket``, ``expires_in``).
            now: Epoch seconds at fetch completion.
            default_ttl: TTL used when the response omits ``expires_in``.

        Raises:
            KeyError: If the response lacks the credential field.
        """
        expires_in = response.get("expires_in")
        return cls(
            kind=kind,
            value=response[kind.value_field],
            obtained_at=now,
            ttl_seconds=default_ttl if expires_in is None else int(expires_in),
            fields={k: v for k, v in response.items() if k not in ("errcode", "errmsg")},
        )
