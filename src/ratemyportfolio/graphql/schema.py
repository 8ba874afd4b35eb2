"""
Main GraphQL schema definition using Strawberry
"""

from typing import Any

import strawberry
from fastapi import Request
from graphql import get_introspection_query, graphql_sync
from graphql import validate_schema as gql_validate_schema
from strawberry.fastapi import GraphQLRouter

from ..auth.middleware import get_auth_context
from ..config import settings
from ..logging import get_logger
from .mutations.root import Mutation
from .queries.root import Query

logger = get_logger(__name__)

schema = strawberry.Schema(query=Query, mutation=Mutation)


def validate_schema() -> None:
    """Validate the GraphQL schema at startup.

    Catches unresolved type references early so the server fails fast
    instead of erroring at request time.

    Raises:
        RuntimeError: If the schema is invalid or introspection fails
    """
    graphql_schema = schema._schema

    errors = gql_validate_schema(graphql_schema)
    if errors:
        error_messages = "; ".join(str(e) for e in errors)
        logger.error("GraphQL schema validation failed", error=error_messages)
        raise RuntimeError(f"GraphQL schema validation failed: {error_messages}")

    result = graphql_sync(graphql_schema, get_introspection_query())
    if result.errors:
        error_messages = "; ".join(str(e) for e in result.errors)
        logger.error("GraphQL introspection failed", error=error_messages)
        raise RuntimeError(f"GraphQL introspection failed: {error_messages}")

    logger.info("GraphQL schema validation successful")


async def get_context(request: Request) -> dict[str, Any]:
    """Build the resolver context: the request and the caller's identity."""
    return {
        "request": request,
        "auth": await get_auth_context(request.headers.get("authorization")),
    }


def create_graphql_router() -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI."""
    return GraphQLRouter(
        schema,
        path="/graphql",
        graphiql=settings.graphiql,
        context_getter=get_context,
    )
