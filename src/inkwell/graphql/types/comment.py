"""
Comment GraphQL type definitions
"""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from ...dbmodels import Comments
    from .post import Post
    from .user import User


@strawberry.type
class Comment:
    """Comment type for GraphQL API."""

    id: strawberry.ID
    content: str
    created_at: datetime
    post_id: strawberry.Private[int]
    author_id: strawberry.Private[int]

    @strawberry.field
    async def author(self, info: strawberry.Info) -> Annotated["User", strawberry.lazy(".user")]:
        """Get the user who wrote this comment."""
        from ..resolvers.comment import resolve_comment_author

        return await resolve_comment_author(self, info)

    @strawberry.field
    async def post(self, info: strawberry.Info) -> Annotated["Post", strawberry.lazy(".post")]:
        """Get the post this comment belongs to."""
        from ..resolvers.comment import resolve_comment_post

        return await resolve_comment_post(self, info)

    @classmethod
    def from_model(cls, comment: "Comments") -> "Comment":
        return cls(
            id=strawberry.ID(str(comment.id)),
            content=comment.content,
            created_at=comment.created_at,
            post_id=comment.post_id,
            author_id=comment.author_id,
        )
