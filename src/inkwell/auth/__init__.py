"""Authentication for Inkwell: passwords, tokens and request context."""

from .context import AuthContext, AuthStatus, Identity
from .middleware import build_auth_context, extract_bearer_token
from .passwords import PasswordHasher
from .tokens import InvalidToken, TokenClaims, TokenService

__all__ = [
    "AuthContext",
    "AuthStatus",
    "Identity",
    "InvalidToken",
    "PasswordHasher",
    "TokenClaims",
    "TokenService",
    "build_auth_context",
    "extract_bearer_token",
]
