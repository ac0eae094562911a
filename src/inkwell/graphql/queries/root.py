"""
Root GraphQL query definitions
"""

import strawberry

from ..types.comment import Comment
from ..types.post import Post
from ..types.user import User


@strawberry.type
class Query:
    """Root GraphQL query type."""

    # User queries
    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current authenticated user."""
        from ..resolvers.auth import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def user(self, info: strawberry.Info, id: strawberry.ID) -> User | None:
        """Get a user by ID."""
        from ..resolvers.user import resolve_user_by_id

        return await resolve_user_by_id(info, id)

    @strawberry.field
    async def users(self, info: strawberry.Info) -> list[User]:
        """Get all users, newest first."""
        from ..resolvers.user import resolve_users

        return await resolve_users(info)

    # Post queries
    @strawberry.field
    async def post(self, info: strawberry.Info, id: strawberry.ID) -> Post | None:
        """Get a post by ID."""
        from ..resolvers.post import resolve_post_by_id

        return await resolve_post_by_id(info, id)

    @strawberry.field
    async def posts(self, info: strawberry.Info, published: bool | None = None) -> list[Post]:
        """Get all posts, optionally filtered by published status."""
        from ..resolvers.post import resolve_posts

        return await resolve_posts(info, published)

    @strawberry.field(name="myPosts")
    async def my_posts(self, info: strawberry.Info) -> list[Post]:
        """Get posts written by the current user."""
        from ..resolvers.post import resolve_my_posts

        return await resolve_my_posts(info)

    # Comment queries
    @strawberry.field
    async def comments(self, info: strawberry.Info, post_id: strawberry.ID) -> list[Comment]:
        """Get comments on a post, newest first."""
        from ..resolvers.comment import resolve_comments

        return await resolve_comments(info, post_id)
