from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import select

from ...dbmodels import Users
from ...errors import NotFound
from ..access_control import get_loaders_from_info, get_services_from_info, parse_id

if TYPE_CHECKING:
    from ..types.post import Post
    from ..types.user import User


async def resolve_user_by_id(info: strawberry.Info, id: strawberry.ID) -> User:
    user_id = parse_id(id, "User not found")
    services = get_services_from_info(info)

    async with services.database.session() as session:
        result = await session.execute(select(Users).where(Users.id == user_id))
        user = result.scalar_one_or_none()

    if user is None:
        raise NotFound("User not found")

    from ..types.user import User as UserType

    return UserType.from_model(user)


async def resolve_users(info: strawberry.Info) -> list[User]:
    services = get_services_from_info(info)

    async with services.database.session() as session:
        stmt = select(Users).order_by(Users.created_at.desc(), Users.id.desc())
        result = await session.execute(stmt)
        users = result.scalars().all()

    from ..types.user import User as UserType

    return [UserType.from_model(user) for user in users]


async def resolve_user_posts(user: User, info: strawberry.Info) -> list[Post]:
    loaders = get_loaders_from_info(info)
    posts = await loaders.posts_by_author_loader.load(int(user.id))

    from ..types.post import Post as PostType

    return [PostType.from_model(post) for post in posts]
