"""
Main GraphQL schema definition using Strawberry
"""

from collections.abc import Callable

import strawberry
from fastapi import Request
from graphql import GraphQLError
from graphql import validate_schema as gql_validate_schema
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext

from ..auth.middleware import build_auth_context
from ..errors import InkwellError
from ..logging import get_logger, get_request_id, set_request_context
from ..services import Services
from .context import GraphQLContext
from .loaders import Loaders
from .mutations.root import Mutation
from .queries.root import Query

logger = get_logger(__name__)


class InkwellSchema(strawberry.Schema):
    """Schema that logs expected client errors quietly and everything else loudly."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        for error in errors:
            original = getattr(error, "original_error", None)
            if isinstance(original, InkwellError):
                logger.info(
                    "GraphQL operation rejected",
                    error=str(original),
                    error_type=type(original).__name__,
                    path=error.path,
                )
            else:
                logger.error(
                    "GraphQL operation failed",
                    error=str(error),
                    path=error.path,
                    exc_info=original,
                )


# Create the GraphQL schema
schema = InkwellSchema(query=Query, mutation=Mutation)


def validate_schema() -> None:
    """Validate the GraphQL schema at startup.

    Raises:
        Exception: If the schema is invalid or has unresolved types
    """
    try:
        graphql_schema = schema._schema

        errors = gql_validate_schema(graphql_schema)
        if errors:
            error_messages = [str(e) for e in errors]
            raise Exception(f"GraphQL schema validation failed: {'; '.join(error_messages)}")

        # Introspection catches most lazy type resolution issues
        from graphql import get_introspection_query, graphql_sync

        result = graphql_sync(graphql_schema, get_introspection_query())
        if result.errors:
            error_messages = [str(e) for e in result.errors]
            raise Exception(f"GraphQL introspection failed: {'; '.join(error_messages)}")

        logger.info("GraphQL schema validation successful")

    except Exception as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise


async def build_context(request: Request | None, services: Services) -> GraphQLContext:
    """Build the per-request context: auth state, services and fresh loaders."""
    authorization = request.headers.get("authorization") if request is not None else None
    auth = await build_auth_context(authorization, services.tokens)

    if auth.is_authenticated:
        set_request_context(request_id=get_request_id(), user_id=str(auth.user_id))

    return GraphQLContext(
        auth=auth,
        services=services,
        loaders=Loaders(services.database),
        request=request,
    )


def create_graphql_router(
    get_services: Callable[[Request], Services], graphiql: bool = True
) -> GraphQLRouter[GraphQLContext, None]:
    """Create a GraphQL router for FastAPI."""

    async def get_context(request: Request) -> GraphQLContext:
        """Get the context for GraphQL resolvers."""
        return await build_context(request, get_services(request))

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if graphiql else None,
        context_getter=get_context,
    )
