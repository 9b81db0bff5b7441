"""Caller-supplied GitHub credentials."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Optional, Union


@dataclass(frozen=True)
class Credential:
    """An opaque bearer token with an optional expiry.

    The token is excluded from ``repr`` so it cannot leak through log lines or
    tracebacks that format the object.
    """

    token: str = field(repr=False)
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at <= current

    def is_usable(self, now: datetime | None = None) -> bool:
        return bool(self.token and self.token.strip()) and not self.is_expired(now)


CredentialLike = Union[Credential, str, None]


def coerce_credential(value: CredentialLike) -> Optional[Credential]:
    """Wrap raw token strings; pass Credential objects through unchanged."""
    if value is None:
        return None
    if isinstance(value, Credential):
        return value
    return Credential(token=value)


def redact(text: str, credential: Credential | None) -> str:
    """Replace every occurrence of the credential's token in ``text``."""
    if credential is None or not credential.token:
        return text
    return text.replace(credential.token, "***")


__all__ = ["Credential", "CredentialLike", "coerce_credential", "redact"]
