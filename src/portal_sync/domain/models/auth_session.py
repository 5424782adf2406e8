"""Identity provider session models."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class AuthEvent(StrEnum):
    """Session-change events pushed by the identity provider."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


@dataclass(frozen=True)
class AuthUser:
    """The user attached to an identity provider session."""

    id: str
    email: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthSession:
    """An authenticated session issued by the identity provider."""

    access_token: str
    user: AuthUser
    refresh_token: str | None = None
    expires_in: int | None = None
