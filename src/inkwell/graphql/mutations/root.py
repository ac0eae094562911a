"""
Root GraphQL mutation definitions
"""

from dataclasses import dataclass

import strawberry

from ..types.auth import AuthPayload
from ..types.comment import Comment
from ..types.post import Post


# Typed argument records, built from the validated GraphQL arguments before
# they reach the resolvers
@dataclass(frozen=True)
class RegisterInput:
    """Input for registering a new user."""

    username: str
    email: str
    password: str


@dataclass(frozen=True)
class LoginInput:
    """Input for logging in."""

    email: str
    password: str


@dataclass(frozen=True)
class CreatePostInput:
    """Input for creating a new post."""

    title: str
    content: str
    published: bool = False


@dataclass(frozen=True)
class UpdatePostInput:
    """Input for updating a post. None means leave unchanged."""

    id: strawberry.ID
    title: str | None = None
    content: str | None = None
    published: bool | None = None


@dataclass(frozen=True)
class CreateCommentInput:
    """Input for commenting on a post."""

    post_id: strawberry.ID
    content: str


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Authentication
    @strawberry.mutation
    async def register(
        self, info: strawberry.Info, username: str, email: str, password: str
    ) -> AuthPayload:
        """Create an account and return a session token."""
        from ..resolvers.auth import register

        return await register(
            info, RegisterInput(username=username, email=email, password=password)
        )

    @strawberry.mutation
    async def login(self, info: strawberry.Info, email: str, password: str) -> AuthPayload:
        """Exchange credentials for a session token."""
        from ..resolvers.auth import login

        return await login(info, LoginInput(email=email, password=password))

    # Post mutations
    @strawberry.mutation(name="createPost")
    async def create_post(
        self,
        info: strawberry.Info,
        title: str,
        content: str,
        published: bool | None = False,
    ) -> Post:
        """Create a new post."""
        from ..resolvers.post import create_post

        return await create_post(
            info, CreatePostInput(title=title, content=content, published=bool(published))
        )

    @strawberry.mutation(name="updatePost")
    async def update_post(
        self,
        info: strawberry.Info,
        id: strawberry.ID,
        title: str | None = None,
        content: str | None = None,
        published: bool | None = None,
    ) -> Post:
        """Update fields of an existing post."""
        from ..resolvers.post import update_post

        return await update_post(
            info, UpdatePostInput(id=id, title=title, content=content, published=published)
        )

    @strawberry.mutation(name="deletePost")
    async def delete_post(self, info: strawberry.Info, id: strawberry.ID) -> bool:
        """Delete a post and its comments."""
        from ..resolvers.post import delete_post

        return await delete_post(info, id)

    # Comment mutations
    @strawberry.mutation(name="createComment")
    async def create_comment(
        self, info: strawberry.Info, post_id: strawberry.ID, content: str
    ) -> Comment:
        """Comment on a post."""
        from ..resolvers.comment import create_comment

        return await create_comment(info, CreateCommentInput(post_id=post_id, content=content))

    @strawberry.mutation(name="deleteComment")
    async def delete_comment(self, info: strawberry.Info, id: strawberry.ID) -> bool:
        """Delete a comment."""
        from ..resolvers.comment import delete_comment

        return await delete_comment(info, id)
