"""Authentication context for request handling."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AuthStatus(Enum):
    """How the request presented itself."""

    ANONYMOUS = "anonymous"  # no credentials supplied
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"  # credentials supplied but not valid


@dataclass(frozen=True)
class Identity:
    """The caller, as asserted by a verified token."""

    user_id: int
    username: str
    email: str


@dataclass(frozen=True)
class AuthContext:
    """Runtime authentication context for a single request."""

    status: AuthStatus
    identity: Identity | None = None
    token: str | None = None
    reason: str | None = None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls(status=AuthStatus.ANONYMOUS)

    @classmethod
    def authenticated(cls, identity: Identity, token: str | None = None) -> AuthContext:
        return cls(status=AuthStatus.AUTHENTICATED, identity=identity, token=token)

    @classmethod
    def rejected(cls, reason: str) -> AuthContext:
        return cls(status=AuthStatus.REJECTED, reason=reason)

    @property
    def is_authenticated(self) -> bool:
        """Check if the request is authenticated."""
        return self.status is AuthStatus.AUTHENTICATED and self.identity is not None

    @property
    def is_rejected(self) -> bool:
        return self.status is AuthStatus.REJECTED

    @property
    def user_id(self) -> int | None:
        return self.identity.user_id if self.identity else None
