from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError

from ...auth.tokens import TokenClaims
from ...dbmodels import Users
from ...errors import Conflict, InvalidCredentials, InvalidInput, NotFound
from ...logging import get_logger
from ..access_control import (
    get_auth_context_from_info,
    get_loaders_from_info,
    get_services_from_info,
    require_authenticated,
)

if TYPE_CHECKING:
    from ..mutations.root import LoginInput, RegisterInput
    from ..types.auth import AuthPayload
    from ..types.user import User

logger = get_logger(__name__)


async def _auth_payload(info: strawberry.Info, user: Users) -> AuthPayload:
    services = get_services_from_info(info)
    token = await services.tokens.issue(
        TokenClaims(user_id=user.id, username=user.username, email=user.email)
    )

    from ..types.auth import AuthPayload as AuthPayloadType
    from ..types.user import User as UserType

    return AuthPayloadType(token=token, user=UserType.from_model(user))


async def register(info: strawberry.Info, input: RegisterInput) -> AuthPayload:
    """
    Register a new user and sign them in.

    Username and email are checked together, so the error does not say which
    one is taken.
    """
    if not input.username.strip() or not input.email.strip() or not input.password:
        raise InvalidInput("Username, email and password are required")

    services = get_services_from_info(info)

    async with services.database.session() as session:
        stmt = (
            select(Users.id)
            .where(or_(Users.email == input.email, Users.username == input.username))
            .limit(1)
        )
        result = await session.execute(stmt)
        existing = result.first()

    if existing is not None:
        logger.info("Registration rejected, user exists")
        raise Conflict()

    password_hash = await asyncio.to_thread(services.passwords.hash, input.password)

    try:
        async with services.database.session() as session:
            user = Users(
                username=input.username,
                email=input.email,
                password_hash=password_hash,
            )
            session.add(user)
            await session.flush()
            await session.refresh(user)
    except IntegrityError as e:
        # A concurrent registration won the race past the existence check
        logger.info("Registration rejected by unique constraint")
        raise Conflict() from e

    get_loaders_from_info(info).clear_all()

    logger.info("User registered", user_id=user.id, username=user.username)

    return await _auth_payload(info, user)


async def login(info: strawberry.Info, input: LoginInput) -> AuthPayload:
    """
    Exchange email and password for a token.

    Unknown email and wrong password fail identically.
    """
    services = get_services_from_info(info)

    async with services.database.session() as session:
        stmt = select(Users).where(Users.email == input.email)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

    if user is None:
        logger.info("Login failed")
        raise InvalidCredentials()

    is_valid = await asyncio.to_thread(
        services.passwords.verify, input.password, user.password_hash
    )
    if not is_valid:
        logger.info("Login failed")
        raise InvalidCredentials()

    if services.passwords.needs_rehash(user.password_hash):
        new_hash = await asyncio.to_thread(services.passwords.hash, input.password)
        async with services.database.session() as session:
            await session.execute(
                update(Users).where(Users.id == user.id).values({Users.password_hash: new_hash})
            )
        logger.info("Password hash upgraded", user_id=user.id)

    logger.info("User logged in", user_id=user.id)

    return await _auth_payload(info, user)


async def resolve_current_user(info: strawberry.Info) -> User:
    """Return the user the request's token was issued to."""
    identity = require_authenticated(get_auth_context_from_info(info))
    services = get_services_from_info(info)

    async with services.database.session() as session:
        stmt = select(Users).where(Users.id == identity.user_id)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

    if user is None:
        # Token outlived the account
        logger.info("Authenticated user no longer exists", user_id=identity.user_id)
        raise NotFound("User not found")

    from ..types.user import User as UserType

    return UserType.from_model(user)
