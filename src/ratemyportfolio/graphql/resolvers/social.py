from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError

from ...database.connection import get_async_session
from ...dbmodels import Users, user_follows
from ...logging import get_logger
from ..access_control import require_auth_context
from ..errors import ForbiddenError, NotFoundError
from .user import ALL_RELATIONS, fetch_user, to_user_type

if TYPE_CHECKING:
    from ..types.user import User

logger = get_logger(__name__)

ALREADY_FOLLOWED_MESSAGE = "You have already followed this user"


async def follow_user(info: strawberry.Info, user_id: UUID) -> User | None:
    """
    Follow another user.

    One follow row is both the caller's following and the target's follower,
    so the two sides of the relationship change together.
    """
    auth_context = await require_auth_context(info)

    if user_id == auth_context.user_id:
        raise ForbiddenError("You can not follow yourself")

    async with get_async_session() as session:
        target = await session.execute(select(Users.id).where(Users.id == user_id))
        if target.first() is None:
            raise NotFoundError("User not found")

        existing = await session.execute(
            select(user_follows.c.follower_id).where(
                user_follows.c.follower_id == auth_context.user_id,
                user_follows.c.following_id == user_id,
            )
        )
        if existing.first() is not None:
            raise ForbiddenError(ALREADY_FOLLOWED_MESSAGE)

        try:
            await session.execute(
                insert(user_follows).values(
                    follower_id=auth_context.user_id, following_id=user_id
                )
            )
            await session.commit()
        except IntegrityError as e:
            # A concurrent request recorded the same edge first
            await session.rollback()
            raise ForbiddenError(ALREADY_FOLLOWED_MESSAGE) from e

        logger.info(
            "User followed",
            user_id=str(auth_context.user_id),
            following_id=str(user_id),
        )

        user = await fetch_user(session, auth_context.user_id)
        return to_user_type(user, ALL_RELATIONS) if user else None


async def unfollow_user(info: strawberry.Info, user_id: UUID) -> User | None:
    """Stop following a user; a no-op when the caller was not following them."""
    auth_context = await require_auth_context(info)

    async with get_async_session() as session:
        result = await session.execute(
            delete(user_follows).where(
                user_follows.c.follower_id == auth_context.user_id,
                user_follows.c.following_id == user_id,
            )
        )
        await session.commit()

        logger.info(
            "User unfollowed",
            user_id=str(auth_context.user_id),
            following_id=str(user_id),
            removed=result.rowcount,
        )

        user = await fetch_user(session, auth_context.user_id)
        return to_user_type(user, ALL_RELATIONS) if user else None
