"""Signed session tokens (JWT) carrying user identity claims."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from jwt.exceptions import InvalidTokenError

from ..logging import get_logger

logger = get_logger(__name__)


class InvalidToken(Exception):
    """Raised when a token is malformed, badly signed, or expired."""

    pass


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims embedded in a session token."""

    user_id: int
    username: str
    email: str


class TokenService:
    """Issues and verifies HMAC-signed JWTs.

    There is no revocation list: a token stays valid until it expires.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "inkwell",
        audience: str = "inkwell-api",
        token_expiry: timedelta = timedelta(days=7),
    ):
        if not secret_key:
            raise ValueError("Token signing secret must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.token_expiry = token_expiry

    async def issue(self, claims: TokenClaims, ttl: timedelta | None = None) -> str:
        """Issue a new token for ``claims``, valid for ``ttl`` (default: configured expiry)."""
        now = datetime.now(UTC)

        payload = {
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "nbf": now,
            "exp": now + (ttl if ttl is not None else self.token_expiry),
            "sub": str(claims.user_id),
            "username": claims.username,
            "email": claims.email,
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    async def verify(self, token: str) -> TokenClaims:
        """Verify signature, expiry, issuer and audience, and return the claims."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={
                    "require": ["exp", "sub"],
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iat": True,
                },
            )
        except InvalidTokenError as e:
            logger.debug("JWT token validation failed", error=str(e))
            raise InvalidToken("Invalid token") from e

        try:
            return TokenClaims(
                user_id=int(payload["sub"]),
                username=payload["username"],
                email=payload["email"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidToken("Token is missing identity claims") from e
