"""
Post GraphQL type definitions
"""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from ...dbmodels import Posts
    from .comment import Comment
    from .user import User


@strawberry.type
class Post:
    """Post type for GraphQL API."""

    id: strawberry.ID
    title: str
    content: str
    published: bool
    created_at: datetime
    updated_at: datetime
    author_id: strawberry.Private[int]

    @strawberry.field
    async def author(self, info: strawberry.Info) -> Annotated["User", strawberry.lazy(".user")]:
        """Get the author of this post."""
        from ..resolvers.post import resolve_post_author

        return await resolve_post_author(self, info)

    @strawberry.field
    async def comments(
        self, info: strawberry.Info
    ) -> list[Annotated["Comment", strawberry.lazy(".comment")]]:
        """Get comments on this post, newest first."""
        from ..resolvers.post import resolve_post_comments

        return await resolve_post_comments(self, info)

    @classmethod
    def from_model(cls, post: "Posts") -> "Post":
        return cls(
            id=strawberry.ID(str(post.id)),
            title=post.title,
            content=post.content,
            published=bool(post.published),
            created_at=post.created_at,
            updated_at=post.updated_at,
            author_id=post.author_id,
        )
