from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ...database.connection import get_async_session
from ...dbmodels import Portfolios, Users, user_follows, user_portfolios
from ...logging import get_logger
from ..access_control import require_auth_context
from .portfolio import to_portfolio_type

if TYPE_CHECKING:
    from ..types.portfolio import Portfolio
    from ..types.user import User

logger = get_logger(__name__)

# Reference sets that can be expanded into full objects
ALL_RELATIONS = ("portfolios", "followers", "followings")


def user_load_options(relations: Iterable[str]) -> list:
    """Loader options that expand the given reference sets of a user."""
    return [selectinload(getattr(Users, relation)) for relation in relations]


def to_user_type(user: Users, expand: Iterable[str] = ()) -> User:
    """
    Convert a Users row to the GraphQL type.

    Relations named in ``expand`` must have been loaded with
    ``user_load_options``; they are carried as preloaded lists. Nested users
    are converted without expansion.
    """
    from ..types.user import User as UserType

    expand = set(expand)
    return UserType(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
        preloaded_portfolios=(
            [to_portfolio_type(p) for p in user.portfolios] if "portfolios" in expand else None
        ),
        preloaded_followers=(
            [to_user_type(u) for u in user.followers] if "followers" in expand else None
        ),
        preloaded_followings=(
            [to_user_type(u) for u in user.followings] if "followings" in expand else None
        ),
    )


async def fetch_user(
    session: AsyncSession, user_id: UUID, expand: Iterable[str] = ALL_RELATIONS
) -> Users | None:
    """Load a user by id with the requested relations expanded."""
    stmt = (
        select(Users)
        .where(Users.id == user_id)
        .options(*user_load_options(expand))
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _list_users(username: str | None, expand: tuple[str, ...]) -> list[User]:
    async with get_async_session() as session:
        stmt = (
            select(Users)
            .options(*user_load_options(expand))
            .order_by(Users.created_at.desc())
        )
        if username:
            stmt = stmt.where(Users.username == username)

        result = await session.execute(stmt)
        return [to_user_type(u, expand) for u in result.scalars().all()]


# Query resolvers
async def resolve_users(info: strawberry.Info) -> list[User]:
    """Resolve all users with their portfolios, followers and followings expanded."""
    return await _list_users(None, ALL_RELATIONS)


async def resolve_user_by_username(info: strawberry.Info, username: str) -> User | None:
    async with get_async_session() as session:
        stmt = (
            select(Users)
            .where(Users.username == username)
            .options(*user_load_options(ALL_RELATIONS))
        )
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            logger.info("User not found", username=username)
            return None

        return to_user_type(user, ALL_RELATIONS)


async def resolve_current_user(info: strawberry.Info) -> User | None:
    """Resolve the logged-in caller, fully expanded."""
    auth_context = await require_auth_context(info)

    async with get_async_session() as session:
        user = await fetch_user(session, auth_context.user_id)
        return to_user_type(user, ALL_RELATIONS) if user else None


async def resolve_followers(info: strawberry.Info, username: str | None) -> list[User]:
    """Resolve users (optionally one username) with only their followers expanded."""
    return await _list_users(username, ("followers",))


async def resolve_followings(info: strawberry.Info, username: str | None) -> list[User]:
    """Resolve users (optionally one username) with only their followings expanded."""
    return await _list_users(username, ("followings",))


# User field resolvers, used when a relation was not expanded by the query
async def resolve_user_portfolios(user: User, info: strawberry.Info) -> list[Portfolio]:
    async with get_async_session() as session:
        stmt = (
            select(Portfolios)
            .join(user_portfolios, user_portfolios.c.portfolio_id == Portfolios.id)
            .where(user_portfolios.c.user_id == user.id)
            .order_by(Portfolios.created_at.desc())
        )
        result = await session.execute(stmt)
        return [to_portfolio_type(p) for p in result.scalars().all()]


async def resolve_user_followers(user: User, info: strawberry.Info) -> list[User]:
    async with get_async_session() as session:
        stmt = (
            select(Users)
            .join(user_follows, user_follows.c.follower_id == Users.id)
            .where(user_follows.c.following_id == user.id)
            .order_by(user_follows.c.created_at.desc())
        )
        result = await session.execute(stmt)
        return [to_user_type(u) for u in result.scalars().all()]


async def resolve_user_followings(user: User, info: strawberry.Info) -> list[User]:
    async with get_async_session() as session:
        stmt = (
            select(Users)
            .join(user_follows, user_follows.c.following_id == Users.id)
            .where(user_follows.c.follower_id == user.id)
            .order_by(user_follows.c.created_at.desc())
        )
        result = await session.execute(stmt)
        return [to_user_type(u) for u in result.scalars().all()]


async def resolve_user_follower_count(user: User, info: strawberry.Info) -> int:
    async with get_async_session() as session:
        stmt = select(func.count()).select_from(user_follows).where(
            user_follows.c.following_id == user.id
        )
        return (await session.execute(stmt)).scalar() or 0


async def resolve_user_following_count(user: User, info: strawberry.Info) -> int:
    async with get_async_session() as session:
        stmt = select(func.count()).select_from(user_follows).where(
            user_follows.c.follower_id == user.id
        )
        return (await session.execute(stmt)).scalar() or 0
