"""
Structured logging for Inkwell, built on structlog.

Every log line carries the current request id and, once the caller's token
has been verified, their user id. Credentials never reach the output: values
under sensitive keys are masked before rendering.
"""

import logging
import secrets
import sys
from contextvars import ContextVar
from typing import Any

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[str | None] = ContextVar("user_id", default=None)

REDACTED_KEYS = frozenset({"password", "password_hash", "token", "authorization", "jwt_secret"})


def add_request_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor: attach request and user ids when known."""
    _ = logger, method_name

    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_ctx.get()
    if user_id:
        event_dict["user_id"] = user_id

    return event_dict


def redact_credentials(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor: mask passwords, hashes and tokens."""
    _ = logger, method_name

    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[REDACTED]"
    return event_dict


def configure_logging(debug: bool = False, level: str | None = None) -> None:
    """Route structlog through the stdlib root logger.

    Args:
        debug: Coloured console output when True, one JSON object per line otherwise.
        level: Explicit level name; defaults to DEBUG in debug mode, INFO otherwise.
    """
    if level is not None:
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    else:
        log_level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s", force=True)

    renderer = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_request_context,
            redact_credentials,
            structlog.processors.TimeStamper(fmt="ISO", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Random 16-character hex id for correlating a request's log lines."""
    return secrets.token_hex(8)


def set_request_context(request_id: str | None = None, user_id: str | None = None) -> None:
    """Bind ids for the current task. A request id is generated when omitted."""
    request_id_ctx.set(request_id or generate_request_id())
    if user_id is not None:
        user_id_ctx.set(user_id)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    user_id_ctx.set(None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def get_user_id() -> str | None:
    return user_id_ctx.get()
