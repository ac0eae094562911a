from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import select

from ...dbmodels import Posts, utcnow
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
    from ..mutations.root import CreatePostInput, UpdatePostInput
    from ..types.comment import Comment
    from ..types.post import Post
    from ..types.user import User

logger = get_logger(__name__)


# Query resolvers
async def resolve_post_by_id(info: strawberry.Info, id: strawberry.ID) -> Post:
    post_id = parse_id(id, "Post not found")
    services = get_services_from_info(info)

    async with services.database.session() as session:
        result = await session.execute(select(Posts).where(Posts.id == post_id))
        post = result.scalar_one_or_none()

    if post is None:
        logger.info("Post not found", post_id=post_id)
        raise NotFound("Post not found")

    from ..types.post import Post as PostType

    return PostType.from_model(post)


async def resolve_posts(info: strawberry.Info, published: bool | None = None) -> list[Post]:
    """
    Resolve all posts, newest first.

    Args:
        published: When given, only posts with this published flag
    """
    services = get_services_from_info(info)

    async with services.database.session() as session:
        stmt = select(Posts)
        if published is not None:
            stmt = stmt.where(Posts.published == published)
        stmt = stmt.order_by(Posts.created_at.desc(), Posts.id.desc())

        result = await session.execute(stmt)
        posts = result.scalars().all()

    from ..types.post import Post as PostType

    return [PostType.from_model(post) for post in posts]


async def resolve_my_posts(info: strawberry.Info) -> list[Post]:
    """Resolve the posts written by the authenticated user."""
    identity = require_authenticated(get_auth_context_from_info(info))
    services = get_services_from_info(info)

    async with services.database.session() as session:
        stmt = (
            select(Posts)
            .where(Posts.author_id == identity.user_id)
            .order_by(Posts.created_at.desc(), Posts.id.desc())
        )
        result = await session.execute(stmt)
        posts = result.scalars().all()

    from ..types.post import Post as PostType

    return [PostType.from_model(post) for post in posts]


# Post field resolvers
async def resolve_post_author(post: Post, info: strawberry.Info) -> User:
    loaders = get_loaders_from_info(info)
    author = await loaders.user_loader.load(post.author_id)

    if author is None:
        raise NotFound("User not found")

    from ..types.user import User as UserType

    return UserType.from_model(author)


async def resolve_post_comments(post: Post, info: strawberry.Info) -> list[Comment]:
    loaders = get_loaders_from_info(info)
    comments = await loaders.comments_by_post_loader.load(int(post.id))

    from ..types.comment import Comment as CommentType

    return [CommentType.from_model(comment) for comment in comments]


# Mutation resolvers
async def create_post(info: strawberry.Info, input: CreatePostInput) -> Post:
    """
    Create a new post.

    The authenticated user becomes the author.
    """
    identity = require_authenticated(get_auth_context_from_info(info))

    if not input.title.strip() or not input.content.strip():
        raise InvalidInput("Title and content are required")

    services = get_services_from_info(info)

    async with services.database.session() as session:
        new_post = Posts(
            title=input.title,
            content=input.content,
            published=input.published,
            author_id=identity.user_id,
        )
        session.add(new_post)
        await session.flush()
        await session.refresh(new_post)

    get_loaders_from_info(info).clear_all()

    logger.info(
        "Post created",
        post_id=new_post.id,
        user_id=identity.user_id,
        published=new_post.published,
    )

    from ..types.post import Post as PostType

    return PostType.from_model(new_post)


async def update_post(info: strawberry.Info, input: UpdatePostInput) -> Post:
    """
    Update an existing post.

    Only the author can update a post. Fields left as None keep their values;
    updated_at is always bumped.
    A title or content that is given but blank is rejected.
    """
    auth_context = get_auth_context_from_info(info)
    require_authenticated(auth_context)

    for value in (input.title, input.content):
        if value is not None and not value.strip():
            raise InvalidInput("Title and content are required")

    post_id = parse_id(input.id, "Post not found")
    services = get_services_from_info(info)

    async with services.database.session() as session:
        result = await session.execute(select(Posts).where(Posts.id == post_id))
        post = result.scalar_one_or_none()

        if post is None:
            raise NotFound("Post not found")

        identity = require_ownership(
            auth_context, post.author_id, "Not authorized to update this post"
        )

        if input.title is not None:
            post.title = input.title
        if input.content is not None:
            post.content = input.content
        if input.published is not None:
            post.published = input.published
        post.updated_at = utcnow()

        await session.flush()
        await session.refresh(post)

    get_loaders_from_info(info).clear_all()

    logger.info(
        "Post updated",
        post_id=post.id,
        user_id=identity.user_id,
        updated_fields=[
            k
            for k, v in {
                "title": input.title,
                "content": input.content,
                "published": input.published,
            }.items()
            if v is not None
        ],
    )

    from ..types.post import Post as PostType

    return PostType.from_model(post)


async def delete_post(info: strawberry.Info, id: strawberry.ID) -> bool:
    """
    Delete a post.

    Only the author can delete a post; its comments go with it via the
    foreign key cascade.
    """
    auth_context = get_auth_context_from_info(info)
    require_authenticated(auth_context)
    post_id = parse_id(id, "Post not found")
    services = get_services_from_info(info)

    async with services.database.session() as session:
        result = await session.execute(select(Posts).where(Posts.id == post_id))
        post = result.scalar_one_or_none()

        if post is None:
            raise NotFound("Post not found")

        identity = require_ownership(
            auth_context, post.author_id, "Not authorized to delete this post"
        )

        await session.delete(post)

    get_loaders_from_info(info).clear_all()

    logger.info("Post deleted", post_id=post_id, user_id=identity.user_id)

    return True
