"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import AsyncGenerator, Generator
from datetime import timedelta
from typing import Any

import pytest
import pytest_asyncio

from inkwell.auth.middleware import build_auth_context
from inkwell.auth.passwords import PasswordHasher
from inkwell.auth.tokens import TokenService
from inkwell.config import Settings
from inkwell.database.connection import Database
from inkwell.graphql.context import GraphQLContext
from inkwell.graphql.loaders import Loaders
from inkwell.graphql.schema import schema
from inkwell.services import Services

TEST_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture
def secret_key() -> str:
    return TEST_SECRET


@pytest.fixture
def test_settings(secret_key: str) -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        jwt_secret=secret_key,
        password_time_cost=1,
        password_memory_cost=1024,
        password_parallelism=1,
    )


@pytest.fixture
def token_service(secret_key: str) -> TokenService:
    return TokenService(
        secret_key=secret_key,
        algorithm="HS256",
        issuer="test-inkwell",
        audience="test-api",
        token_expiry=timedelta(days=7),
    )


@pytest.fixture
def password_hasher() -> PasswordHasher:
    # Minimum argon2 cost keeps the suite fast
    return PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite database file with the schema created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'inkwell.db'}")
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def services(
    test_settings: Settings,
    database: Database,
    token_service: TokenService,
    password_hasher: PasswordHasher,
) -> Services:
    return Services(
        settings=test_settings,
        database=database,
        tokens=token_service,
        passwords=password_hasher,
    )


class GraphQLTestClient:
    """Executes operations against the real schema, one context per call."""

    def __init__(self, services: Services):
        self.services = services

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        token: str | None = None,
        authorization: str | None = None,
    ) -> Any:
        if authorization is None and token is not None:
            authorization = f"Bearer {token}"
        auth = await build_auth_context(authorization, self.services.tokens)
        context = GraphQLContext(
            auth=auth,
            services=self.services,
            loaders=Loaders(self.services.database),
        )
        return await schema.execute(query, variable_values=variables, context_value=context)


@pytest.fixture
def graphql_client(services: Services) -> GraphQLTestClient:
    return GraphQLTestClient(services)


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
