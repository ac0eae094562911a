"""
User GraphQL type definitions
"""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from ...dbmodels import Users
    from .post import Post


@strawberry.type
class User:
    """User type for GraphQL API."""

    id: strawberry.ID
    username: str
    email: str
    created_at: datetime

    @strawberry.field
    async def posts(
        self, info: strawberry.Info
    ) -> list[Annotated["Post", strawberry.lazy(".post")]]:  # noqa: E501
        """Get posts written by this user."""
        from ..resolvers.user import resolve_user_posts

        return await resolve_user_posts(self, info)

    @classmethod
    def from_model(cls, user: "Users") -> "User":
        return cls(
            id=strawberry.ID(str(user.id)),
            username=user.username,
            email=user.email,
            created_at=user.created_at,
        )
