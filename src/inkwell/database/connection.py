"""
Database connection management
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ..dbmodels import Base
from ..logging import get_logger

logger = get_logger(__name__)


def to_async_url(database_url: str) -> str:
    """Map a plain database URL onto its asyncio driver."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless enforcement is switched on per connection
    _ = connection_record
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the process-wide connection pool and session factory.

    Constructed once at startup and handed to resolvers through the request
    context; each store call checks a connection out via ``session()`` and
    returns it on exit.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 0,
        echo: bool = False,
    ):
        self.url = to_async_url(database_url)
        url = make_url(self.url)

        if url.get_backend_name() == "sqlite":
            engine_kwargs: dict = {"echo": echo}
            if url.database in (None, "", ":memory:"):
                # In-memory databases exist per connection, so share a single one
                engine_kwargs["poolclass"] = StaticPool
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_async_engine(
                self.url,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                echo=echo,
            )

        self._session_local = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("Database initialized", backend=url.get_backend_name(), database=url.database)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session from the shared pool."""
        async with self._session_local() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def check_connection(self) -> tuple[bool, str | None]:
        """
        Test the database connection and return helpful error messages.

        Returns:
            tuple: (success: bool, error_message: str | None)
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                return True, None
        except Exception as e:
            error_str = str(e)
            error_type = type(e).__name__

            if "does not exist" in error_str:
                db_name = make_url(self.url).database
                return False, (
                    f"Cannot connect to database: {error_str}\n"
                    f"This usually means:\n"
                    f"  1. The database '{db_name}' doesn't exist\n"
                    f"  2. The database user/role doesn't exist\n"
                    f"Please check your database connection settings."
                )
            elif "Connection refused" in error_str or "could not connect" in error_str:
                return False, (
                    f"Cannot connect to database server: {error_str}\n"
                    f"The database server appears to be down or unreachable."
                )
            elif "password authentication failed" in error_str:
                return False, (
                    f"Database authentication failed: {error_str}\n"
                    f"Please check your database credentials."
                )
            else:
                return False, f"Database connection error ({error_type}): {error_str}"

    async def create_tables(self) -> None:
        """Create the users, posts and comments tables if they do not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        logger.info("Database tables initialized")

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
