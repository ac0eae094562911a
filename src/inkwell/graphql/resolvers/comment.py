from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import select

from ...dbmodels import Comments, Posts
from ...errors import InvalidInput, NotFound
from ...logging import get_logger
from ..access_control import (
    get_auth_context_from_info,
    get_loaders_from_info,
    get_services_from_info,
    parse_id,
    require_authenticated,
    require_ownership,
)

if TYPE_CHECKING:
    from ..mutations.root import CreateCommentInput
    from ..types.comment import Comment
    from ..types.post import Post
    from ..types.user import User

logger = get_logger(__name__)


async def resolve_comments(info: strawberry.Info, post_id: strawberry.ID) -> list[Comment]:
    """Resolve the comments on a post, newest first."""
    try:
        parent_id = int(post_id)
    except (TypeError, ValueError):
        return []

    services = get_services_from_info(info)

    async with services.database.session() as session:
        stmt = (
            select(Comments)
            .where(Comments.post_id == parent_id)
            .order_by(Comments.created_at.desc(), Comments.id.desc())
        )
        result = await session.execute(stmt)
        comments = result.scalars().all()

    from ..types.comment import Comment as CommentType

    return [CommentType.from_model(comment) for comment in comments]


# Comment field resolvers
async def resolve_comment_author(comment: Comment, info: strawberry.Info) -> User:
    loaders = get_loaders_from_info(info)
    author = await loaders.user_loader.load(comment.author_id)

    if author is None:
        raise NotFound("User not found")

    from ..types.user import User as UserType

    return UserType.from_model(author)


async def resolve_comment_post(comment: Comment, info: strawberry.Info) -> Post:
    loaders = get_loaders_from_info(info)
    post = await loaders.post_loader.load(comment.post_id)

    if post is None:
        raise NotFound("Post not found")

    from ..types.post import Post as PostType

    return PostType.from_model(post)


# Mutation resolvers
async def create_comment(info: strawberry.Info, input: CreateCommentInput) -> Comment:
    """
    Comment on a post.

    Any authenticated user may comment on any existing post.
    """
    identity = require_authenticated(get_auth_context_from_info(info))

    if not input.content.strip():
        raise InvalidInput("Content is required")

    post_id = parse_id(input.post_id, "Post not found")
    services = get_services_from_info(info)

    async with services.database.session() as session:
        result = await session.execute(select(Posts.id).where(Posts.id == post_id))
        if result.scalar_one_or_none() is None:
            raise NotFound("Post not found")

        new_comment = Comments(
            content=input.content,
            post_id=post_id,
            author_id=identity.user_id,
        )
        session.add(new_comment)
        await session.flush()
        await session.refresh(new_comment)

    get_loaders_from_info(info).clear_all()

    logger.info(
        "Comment created",
        comment_id=new_comment.id,
        post_id=post_id,
        user_id=identity.user_id,
    )

    from ..types.comment import Comment as CommentType

    return CommentType.from_model(new_comment)


async def delete_comment(info: strawberry.Info, id: strawberry.ID) -> bool:
    """
    Delete a comment.

    Only the comment's author can delete it; owning the post is not enough.
    """
    auth_context = get_auth_context_from_info(info)
    require_authenticated(auth_context)
    comment_id = parse_id(id, "Comment not found")
    services = get_services_from_info(info)

    async with services.database.session() as session:
        result = await session.execute(select(Comments).where(Comments.id == comment_id))
        comment = result.scalar_one_or_none()

        if comment is None:
            raise NotFound("Comment not found")

        identity = require_ownership(
            auth_context, comment.author_id, "Not authorized to delete this comment"
        )

        await session.delete(comment)

    get_loaders_from_info(info).clear_all()

    logger.info("Comment deleted", comment_id=comment_id, user_id=identity.user_id)

    return True
