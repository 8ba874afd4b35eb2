"""Resolution of the request identity from the Authorization header."""

from __future__ import annotations

from uuid import UUID

from fastapi import Header
from sqlalchemy import select

from ..database.connection import get_async_session
from ..dbmodels import Users
from ..logging import get_logger
from .context import AuthContext
from .tokens import TokenVerificationError, decode_token

logger = get_logger(__name__)


async def get_auth_context(authorization: str | None = Header(None)) -> AuthContext:
    """
    Extract the authentication context from a request's Authorization header.

    This function:
    1. Extracts the Bearer token from the header
    2. Verifies the token signature, audience and expiry
    3. Loads the user named by the token so renames and removals take effect

    A missing, malformed or invalid token never fails the request; it yields
    an unauthenticated context and the resolvers decide what that allows.
    """
    if not authorization:
        return AuthContext.anonymous()

    if not authorization.startswith("Bearer "):
        logger.warning("Invalid authorization format received")
        return AuthContext.anonymous()

    token = authorization[7:].strip()
    if not token:
        logger.warning("Empty token provided")
        return AuthContext.anonymous()

    try:
        claims = decode_token(token)
        user_id = UUID(claims["sub"])
    except (TokenVerificationError, ValueError) as e:
        logger.info("Ignoring invalid bearer token", error=str(e))
        return AuthContext.anonymous()

    async with get_async_session() as session:
        result = await session.execute(select(Users.username).where(Users.id == user_id))
        username = result.scalar_one_or_none()

    if username is None:
        logger.info("Token refers to a user that no longer exists", user_id=str(user_id))
        return AuthContext.anonymous()

    return AuthContext(user_id=user_id, username=username, token=token)
