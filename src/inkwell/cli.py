#!/usr/bin/env python3
"""
Main CLI entry point for Inkwell backend server.
"""

import asyncio
import os
import sys

import click
import uvicorn

from inkwell import __version__
from inkwell.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="inkwell")
def cli() -> None:
    """Inkwell CLI - run the API server and prepare the database."""
    pass


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
@click.option("--port", default=4000, type=int, help="Port to bind to (default: 4000)")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes (default: 1)")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Start the Inkwell API server."""
    configure_logging(debug=(log_level == "debug"), level=log_level)

    logger.info(
        "Starting Inkwell API server",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )

    # Settings are read at import time in each worker, so pass them via the environment
    if log_level == "debug":
        os.environ["INKWELL_DEBUG"] = "true"
        os.environ["INKWELL_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("INKWELL_DEBUG", "false")
        os.environ.setdefault("INKWELL_LOG_LEVEL", log_level)

    try:
        uvicorn.run(
            "inkwell.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=reload,
            workers=(workers if not reload else 1),  # reload doesn't work with multiple workers
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


async def _init_db() -> tuple[bool, str | None]:
    from inkwell.config import settings
    from inkwell.database.connection import Database

    database = Database(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.sql_echo,
    )
    try:
        ok, error = await database.check_connection()
        if ok:
            await database.create_tables()
        return ok, error
    finally:
        await database.dispose()


@cli.command("init-db")
def init_db() -> None:
    """Create the users, posts and comments tables if they are missing."""
    configure_logging(debug=False)
    try:
        ok, error = asyncio.run(_init_db())
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        sys.exit(1)

    if not ok:
        logger.error("Database connection failed", error=error)
        sys.exit(1)

    click.echo("Database tables initialized")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
