"""
Shared access control logic for GraphQL resolvers
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ..auth.context import AuthContext, Identity
from ..errors import Forbidden, NotFound, Unauthenticated
from ..logging import get_logger

if TYPE_CHECKING:
    from ..services import Services
    from .loaders import Loaders

logger = get_logger(__name__)


def get_auth_context_from_info(info: strawberry.Info) -> AuthContext:
    """
    Extract auth context from GraphQL info object.

    Falls back to an anonymous context if none was attached.
    """
    auth_context = getattr(info.context, "auth", None)
    if auth_context is None:
        logger.error("Auth context not found in GraphQL context")
        return AuthContext.anonymous()
    return auth_context


def get_services_from_info(info: strawberry.Info) -> Services:
    return info.context.services


def get_loaders_from_info(info: strawberry.Info) -> Loaders:
    return info.context.loaders


def require_authenticated(auth_context: AuthContext | None) -> Identity:
    """
    Return the caller's identity or fail with Unauthenticated.

    A request whose token was rejected gets a distinct message so clients can
    tell a stale token apart from a missing one.
    """
    if auth_context is not None and auth_context.identity is not None:
        if auth_context.is_authenticated:
            return auth_context.identity

    if auth_context is not None and auth_context.is_rejected:
        logger.info("Rejected token used for protected operation", reason=auth_context.reason)
        raise Unauthenticated("Invalid or expired token")

    raise Unauthenticated()


def require_ownership(
    auth_context: AuthContext | None,
    owner_id: int,
    message: str = "Not authorized",
) -> Identity:
    """
    Require that the caller is authenticated and owns the resource.

    Ownership is strict equality between the caller's user id and the
    resource's owner id.
    """
    identity = require_authenticated(auth_context)
    if not is_owner(auth_context, owner_id):
        logger.info(
            "Ownership check failed",
            user_id=identity.user_id,
            owner_id=owner_id,
        )
        raise Forbidden(message)
    return identity


def is_owner(auth_context: AuthContext | None, owner_id: int) -> bool:
    """Non-raising ownership check."""
    if auth_context is None or not auth_context.is_authenticated:
        return False
    return auth_context.user_id == owner_id


def parse_id(value: strawberry.ID | str | int, not_found_message: str) -> int:
    """
    Convert a GraphQL ID into a primary key.

    An id that cannot name a row is reported the same way as a missing row.
    """
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise NotFound(not_found_message) from e
