"""
Shared access control logic for GraphQL resolvers
"""

from enum import Enum
from typing import TYPE_CHECKING

import strawberry

from ..auth.context import AuthContext
from ..auth.middleware import get_auth_context
from ..logging import get_logger
from .errors import AuthenticationError, ForbiddenError

if TYPE_CHECKING:
    from ..dbmodels import Portfolios

logger = get_logger(__name__)


class RemovalOutcome(Enum):
    """What happened to an author-scoped removal."""

    REMOVED = "removed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


async def get_auth_context_from_info(info: strawberry.Info) -> AuthContext:
    """
    Extract the auth context from a GraphQL info object.

    The router resolves it once per request; when it is missing (e.g. the
    schema is executed directly) it is resolved from the request headers.
    """
    auth_context = info.context.get("auth")
    if auth_context is not None:
        return auth_context

    request = info.context.get("request")
    if not request:
        return AuthContext.anonymous()

    auth_context = await get_auth_context(request.headers.get("authorization"))
    info.context["auth"] = auth_context
    return auth_context


async def require_auth_context(info: strawberry.Info) -> AuthContext:
    """Return the caller's auth context or raise AuthenticationError."""
    auth_context = await get_auth_context_from_info(info)
    if not auth_context.is_authenticated:
        raise AuthenticationError("You need to be logged in")
    return auth_context


def is_portfolio_author(portfolio: "Portfolios", auth_context: AuthContext) -> bool:
    return auth_context.is_authenticated and portfolio.portfolio_author == auth_context.username


def ensure_portfolio_author(
    portfolio: "Portfolios", auth_context: AuthContext, message: str
) -> None:
    if not is_portfolio_author(portfolio, auth_context):
        logger.info(
            "Portfolio author check failed",
            portfolio_id=str(portfolio.id),
            username=auth_context.username,
        )
        raise ForbiddenError(message)
