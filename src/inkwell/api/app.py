"""
Main FastAPI application for Inkwell backend
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware
from ..services import Services, build_services

# Configure logging before creating logger
configure_logging(debug=settings.debug, level=settings.log_level)
logger = get_logger(__name__)


class StartupError(RuntimeError):
    """The store could not be reached at boot."""


def get_services(request: Request) -> Services:
    """Services for the running app, set once at startup."""
    return request.app.state.services


def create_app(services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Pre-built dependencies (tests). Built from settings at startup when None.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Inkwell API...")

        if getattr(app.state, "services", None) is None:
            app.state.services = build_services(settings)
        database = app.state.services.database

        # Fail fast: the API is useless without its store
        ok, error = await database.check_connection()
        if not ok:
            logger.error("Database connection failed", error=error)
            raise StartupError(error)
        logger.info("Database connected successfully")

        await database.create_tables()

        yield

        logger.info("Shutting down Inkwell API...")
        await database.dispose()

    app = FastAPI(
        title="Inkwell API",
        description="GraphQL API for posts, comments and users",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.services = services

    app.add_middleware(LoggingContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}

    @app.get("/")
    async def root():  # pyright: ignore [reportUnusedFunction]
        """Service banner."""
        return {
            "message": "Inkwell GraphQL API",
            "version": __version__,
            "endpoints": {
                "graphql": "/graphql",
                "health": "/health",
            },
        }

    try:
        from ..graphql.schema import create_graphql_router, validate_schema

        # Validate schema at startup to catch type resolution errors early
        logger.info("Validating GraphQL schema...")
        validate_schema()

        graphql_router = create_graphql_router(get_services, graphiql=settings.debug)
        app.include_router(graphql_router, prefix="")
        logger.info("GraphQL endpoint initialized successfully", endpoint="/graphql")
    except Exception as e:  # pragma: no cover
        logger.error("Failed to initialize GraphQL endpoint", error=str(e))
        # Server should not start with a broken schema
        raise

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "inkwell.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
