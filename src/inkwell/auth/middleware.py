"""Build the per-request authentication context from transport headers."""

from __future__ import annotations

from ..logging import get_logger
from .context import AuthContext, Identity
from .tokens import InvalidToken, TokenService

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from a ``Bearer <token>`` header, or None if the format is wrong."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


async def build_auth_context(
    authorization: str | None, token_service: TokenService
) -> AuthContext:
    """
    Extract authentication context from the Authorization header.

    Never raises for bad credentials: public queries must keep working with a
    stale or malformed token. Instead the context is marked REJECTED so
    identity-requiring resolvers can report why authentication failed.

    Args:
        authorization: Raw Authorization header value (may be None)
        token_service: Service used to verify the bearer token

    Returns:
        AuthContext in ANONYMOUS, AUTHENTICATED or REJECTED state
    """
    if authorization is None or not authorization.strip():
        return AuthContext.anonymous()

    if not authorization.startswith(BEARER_PREFIX):
        logger.warning("Invalid authorization format received")
        return AuthContext.rejected("Invalid authorization format. Expected: Bearer <token>")

    token = extract_bearer_token(authorization)
    if token is None:
        logger.warning("Empty token provided")
        return AuthContext.rejected("Empty token")

    try:
        claims = await token_service.verify(token)
    except InvalidToken as e:
        logger.info("Authentication failed, continuing unauthenticated", error=str(e))
        return AuthContext.rejected(str(e))

    identity = Identity(user_id=claims.user_id, username=claims.username, email=claims.email)
    return AuthContext.authenticated(identity, token=token)
