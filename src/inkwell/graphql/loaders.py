"""Request-scoped batch loaders for relationship fields.

A fresh ``Loaders`` is created per request, so cached rows never outlive the
request that loaded them. Write resolvers clear them so later fields in the
same document read fresh rows.
"""

from collections import defaultdict

from sqlalchemy import select
from strawberry.dataloader import DataLoader

from ..database.connection import Database
from ..dbmodels import Comments, Posts, Users


async def load_users(database: Database, keys: list[int]) -> list[Users | None]:
    """Batch load users by ID."""
    async with database.session() as session:
        stmt = select(Users).where(Users.id.in_(keys))
        result = await session.execute(stmt)
        users_map = {user.id: user for user in result.scalars().all()}
        return [users_map.get(key) for key in keys]


async def load_posts(database: Database, keys: list[int]) -> list[Posts | None]:
    """Batch load posts by ID."""
    async with database.session() as session:
        stmt = select(Posts).where(Posts.id.in_(keys))
        result = await session.execute(stmt)
        posts_map = {post.id: post for post in result.scalars().all()}
        return [posts_map.get(key) for key in keys]


async def load_posts_by_author(database: Database, keys: list[int]) -> list[list[Posts]]:
    """Batch load each author's posts, newest first."""
    async with database.session() as session:
        stmt = (
            select(Posts)
            .where(Posts.author_id.in_(keys))
            .order_by(Posts.created_at.desc(), Posts.id.desc())
        )
        result = await session.execute(stmt)
        grouped: dict[int, list[Posts]] = defaultdict(list)
        for post in result.scalars().all():
            grouped[post.author_id].append(post)
        return [grouped.get(key, []) for key in keys]


async def load_comments_by_post(database: Database, keys: list[int]) -> list[list[Comments]]:
    """Batch load each post's comments, newest first."""
    async with database.session() as session:
        stmt = (
            select(Comments)
            .where(Comments.post_id.in_(keys))
            .order_by(Comments.created_at.desc(), Comments.id.desc())
        )
        result = await session.execute(stmt)
        grouped: dict[int, list[Comments]] = defaultdict(list)
        for comment in result.scalars().all():
            grouped[comment.post_id].append(comment)
        return [grouped.get(key, []) for key in keys]


class Loaders:
    def __init__(self, database: Database):
        self.user_loader = DataLoader(load_fn=lambda keys: load_users(database, keys))
        self.post_loader = DataLoader(load_fn=lambda keys: load_posts(database, keys))
        self.posts_by_author_loader = DataLoader(
            load_fn=lambda keys: load_posts_by_author(database, keys)
        )
        self.comments_by_post_loader = DataLoader(
            load_fn=lambda keys: load_comments_by_post(database, keys)
        )

    def clear_all(self) -> None:
        """Drop every cached row."""
        for loader in (
            self.user_loader,
            self.post_loader,
            self.posts_by_author_loader,
            self.comments_by_post_loader,
        ):
            loader.clear_all()
