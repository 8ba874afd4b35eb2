from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import delete, select

from ...database.connection import get_async_session
from ...dbmodels import Ratings
from ...logging import get_logger
from ..access_control import is_portfolio_author, require_auth_context
from ..errors import ForbiddenError, NotFoundError, ValidationError
from .portfolio import fetch_portfolio, to_portfolio_type

if TYPE_CHECKING:
    from ..types.portfolio import Portfolio

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5

SELF_RATING_MESSAGE = "You can not give rating to your portfolio"


def _check_rating_number(rating_number: int) -> None:
    if not MIN_RATING <= rating_number <= MAX_RATING:
        raise ValidationError(f"ratingNumber must be between {MIN_RATING} and {MAX_RATING}")


async def add_rating(info: strawberry.Info, portfolio_id: UUID, rating_number: int) -> Portfolio:
    """
    Rate someone else's portfolio.

    A rating identical to one the caller already gave is not added twice.
    """
    auth_context = await require_auth_context(info)
    _check_rating_number(rating_number)

    async with get_async_session() as session:
        portfolio = await fetch_portfolio(session, portfolio_id)
        if not portfolio:
            raise NotFoundError("Portfolio not found")

        if is_portfolio_author(portfolio, auth_context):
            raise ForbiddenError(SELF_RATING_MESSAGE)

        duplicate = any(
            r.rating_author == auth_context.username and r.rating_number == rating_number
            for r in portfolio.ratings
        )
        if not duplicate:
            session.add(
                Ratings(
                    portfolio_id=portfolio_id,
                    rating_number=rating_number,
                    rating_author=auth_context.username,
                )
            )
            await session.commit()

        portfolio = await fetch_portfolio(session, portfolio_id)

        logger.info(
            "Rating added",
            portfolio_id=str(portfolio_id),
            user_id=str(auth_context.user_id),
            duplicate=duplicate,
        )

        return to_portfolio_type(portfolio)


async def remove_rating(
    info: strawberry.Info, portfolio_id: UUID, rating_id: UUID
) -> Portfolio | None:
    """
    Remove one of the caller's ratings from a portfolio.

    Ratings by other authors are never removed; the portfolio is returned
    unchanged in that case.
    """
    auth_context = await require_auth_context(info)

    async with get_async_session() as session:
        result = await session.execute(
            delete(Ratings).where(
                Ratings.id == rating_id,
                Ratings.portfolio_id == portfolio_id,
                Ratings.rating_author == auth_context.username,
            )
        )
        await session.commit()

        logger.info(
            "Rating removal processed",
            portfolio_id=str(portfolio_id),
            rating_id=str(rating_id),
            user_id=str(auth_context.user_id),
            removed=result.rowcount,
        )

        portfolio = await fetch_portfolio(session, portfolio_id)
        return to_portfolio_type(portfolio) if portfolio else None


async def update_rating(
    info: strawberry.Info, portfolio_id: UUID, rating_number: int
) -> Portfolio | None:
    """
    Set the caller's rating of a portfolio.

    The caller ends up with exactly one rating carrying the new number;
    other users' ratings are left alone.
    """
    auth_context = await require_auth_context(info)
    _check_rating_number(rating_number)

    async with get_async_session() as session:
        portfolio = await fetch_portfolio(session, portfolio_id)
        if not portfolio:
            logger.info("Portfolio not found", portfolio_id=str(portfolio_id))
            return None

        if is_portfolio_author(portfolio, auth_context):
            raise ForbiddenError(SELF_RATING_MESSAGE)

        stmt = select(Ratings).where(
            Ratings.portfolio_id == portfolio_id,
            Ratings.rating_author == auth_context.username,
        )
        own_ratings = (await session.execute(stmt)).scalars().all()

        if own_ratings:
            own_ratings[0].rating_number = rating_number
            for extra in own_ratings[1:]:
                await session.delete(extra)
        else:
            session.add(
                Ratings(
                    portfolio_id=portfolio_id,
                    rating_number=rating_number,
                    rating_author=auth_context.username,
                )
            )
        await session.commit()

        portfolio = await fetch_portfolio(session, portfolio_id)

        logger.info(
            "Rating updated",
            portfolio_id=str(portfolio_id),
            user_id=str(auth_context.user_id),
            rating_number=rating_number,
        )

        return to_portfolio_type(portfolio)
