"""
Request logging middleware.

Each HTTP request gets a request id bound into the logging context, a
"Request started" line and a "Request completed" line. For ``/graphql`` the
operation name is logged instead of the document or its variables, which
carry passwords and tokens.
"""

import json
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from graphql import GraphQLSyntaxError, OperationDefinitionNode, parse
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import clear_request_context, get_logger, set_request_context

logger = get_logger(__name__)

GRAPHQL_PATH = "/graphql"

SENSITIVE_KEYS = ("password", "token", "secret", "auth", "jwt", "cookie", "session")


def sanitize_query_params(params: dict[str, Any]) -> dict[str, Any]:
    """Mask query parameters whose name looks like a credential."""
    return {
        key: "[REDACTED]" if any(s in key.lower() for s in SENSITIVE_KEYS) else value
        for key, value in params.items()
    }


def operation_name_from_document(query: Any) -> str | None:
    """Name of the first operation in a GraphQL document.

    Mutations are prefixed with ``mutation:``; anonymous operations are
    reported as ``unnamed_operation`` and introspection as ``__introspection``.
    """
    if not isinstance(query, str) or not query:
        return None
    if "__schema" in query:
        return "__introspection"

    try:
        document = parse(query, no_location=True)
    except GraphQLSyntaxError:
        return "invalid_document"

    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            if definition.name is None:
                return "unnamed_operation"
            name = definition.name.value
            if definition.operation.value == "mutation":
                return f"mutation:{name}"
            return name
    return None


async def extract_graphql_operation_name(request: Request) -> str | None:
    if request.url.path != GRAPHQL_PATH:
        return None

    if request.method == "GET":
        params = request.query_params
        return params.get("operationName") or operation_name_from_document(params.get("query"))

    if request.method != "POST":
        return None

    body = await request.body()
    if not body:
        return None
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None

    operation_name = data.get("operationName")
    if isinstance(operation_name, str) and operation_name:
        return operation_name
    return operation_name_from_document(data.get("query"))


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the lifetime of each request and log its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        set_request_context()

        try:
            query_params = None
            if request.query_params and request.url.path != GRAPHQL_PATH:
                query_params = sanitize_query_params(dict(request.query_params))

            operation = await extract_graphql_operation_name(request)

            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                query_params=query_params,
                graphql_operation=operation,
                user_agent=request.headers.get("user-agent"),
                remote_addr=request.client.host if request.client else None,
            )

            response = await call_next(request)

            logger.info(
                "Request completed",
                status_code=response.status_code,
                method=request.method,
                path=request.url.path,
                graphql_operation=operation,
            )
            return response

        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise

        finally:
            clear_request_context()
