from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...database.connection import get_async_session
from ...dbmodels import Portfolios, user_portfolios
from ...logging import get_logger
from ..access_control import (
    RemovalOutcome,
    ensure_portfolio_author,
    is_portfolio_author,
    require_auth_context,
)
from ..errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from ..types.portfolio import Portfolio

logger = get_logger(__name__)


def to_portfolio_type(portfolio: Portfolios) -> Portfolio:
    """Convert a loaded Portfolios row (with its entries) to the GraphQL type."""
    from ..types.portfolio import Feedback, Portfolio, Rating

    return Portfolio(
        id=portfolio.id,
        portfolio_text=portfolio.portfolio_text,
        portfolio_image=portfolio.portfolio_image,
        portfolio_link=portfolio.portfolio_link,
        portfolio_author=portfolio.portfolio_author,
        created_at=portfolio.created_at,
        ratings=[
            Rating(
                id=rating.id,
                rating_number=rating.rating_number,
                rating_author=rating.rating_author,
                created_at=rating.created_at,
            )
            for rating in portfolio.ratings
        ],
        feedbacks=[
            Feedback(
                id=feedback.id,
                feedback_text=feedback.feedback_text,
                feedback_author=feedback.feedback_author,
                created_at=feedback.created_at,
            )
            for feedback in portfolio.feedbacks
        ],
    )


async def fetch_portfolio(session: AsyncSession, portfolio_id: UUID) -> Portfolios | None:
    """Load a portfolio with its ratings and feedbacks, bypassing stale session state."""
    stmt = (
        select(Portfolios)
        .where(Portfolios.id == portfolio_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def link_portfolio(session: AsyncSession, user_id: UUID, portfolio_id: UUID) -> None:
    """Add a portfolio id to a user's portfolios set, keeping it free of duplicates."""
    stmt = select(user_portfolios.c.user_id).where(
        user_portfolios.c.user_id == user_id,
        user_portfolios.c.portfolio_id == portfolio_id,
    )
    if (await session.execute(stmt)).first() is None:
        await session.execute(
            insert(user_portfolios).values(user_id=user_id, portfolio_id=portfolio_id)
        )


def _check_text(value: str | None, field: str, required: bool) -> None:
    if value is None:
        if required:
            raise ValidationError(f"{field} is required")
        return
    if not value.strip():
        raise ValidationError(f"{field} can not be empty")


# Query resolvers
async def resolve_portfolios(info: strawberry.Info, username: str | None) -> list[Portfolio]:
    """
    Resolve portfolios, newest first.

    When a username is given only portfolios authored by that user are returned.
    """
    async with get_async_session() as session:
        stmt = select(Portfolios).order_by(Portfolios.created_at.desc())
        if username:
            stmt = stmt.where(Portfolios.portfolio_author == username)

        result = await session.execute(stmt)
        return [to_portfolio_type(p) for p in result.scalars().all()]


async def resolve_portfolio_by_id(info: strawberry.Info, portfolio_id: UUID) -> Portfolio | None:
    async with get_async_session() as session:
        portfolio = await fetch_portfolio(session, portfolio_id)
        if not portfolio:
            logger.info("Portfolio not found", portfolio_id=str(portfolio_id))
            return None
        return to_portfolio_type(portfolio)


# Mutation resolvers
async def add_portfolio(
    info: strawberry.Info,
    portfolio_text: str,
    portfolio_image: str | None,
    portfolio_link: str | None,
) -> Portfolio:
    """
    Create a portfolio authored by the caller.

    The new portfolio is linked into the caller's portfolios set in the same
    transaction.
    """
    auth_context = await require_auth_context(info)
    _check_text(portfolio_text, "portfolioText", required=True)

    async with get_async_session() as session:
        new_portfolio = Portfolios(
            portfolio_text=portfolio_text,
            portfolio_image=portfolio_image,
            portfolio_link=portfolio_link,
            portfolio_author=auth_context.username,
        )
        session.add(new_portfolio)
        await session.flush()

        portfolio_id = new_portfolio.id
        await link_portfolio(session, auth_context.user_id, portfolio_id)
        await session.commit()

        portfolio = await fetch_portfolio(session, portfolio_id)

        logger.info(
            "Portfolio created",
            portfolio_id=str(portfolio_id),
            user_id=str(auth_context.user_id),
        )

        return to_portfolio_type(portfolio)


async def remove_portfolio(info: strawberry.Info, portfolio_id: UUID) -> Portfolio | None:
    """
    Delete one of the caller's portfolios.

    Returns the deleted portfolio, or None when the id is unknown or belongs
    to another author. The id is unlinked from the caller's portfolios set
    in every case.
    """
    auth_context = await require_auth_context(info)

    async with get_async_session() as session:
        portfolio = await fetch_portfolio(session, portfolio_id)
        removed = None

        if portfolio is None:
            outcome = RemovalOutcome.NOT_FOUND
        elif not is_portfolio_author(portfolio, auth_context):
            outcome = RemovalOutcome.FORBIDDEN
        else:
            outcome = RemovalOutcome.REMOVED
            removed = to_portfolio_type(portfolio)
            await session.execute(
                delete(user_portfolios).where(user_portfolios.c.portfolio_id == portfolio_id)
            )
            await session.delete(portfolio)

        await session.execute(
            delete(user_portfolios).where(
                user_portfolios.c.user_id == auth_context.user_id,
                user_portfolios.c.portfolio_id == portfolio_id,
            )
        )

        logger.info(
            "Portfolio removal processed",
            portfolio_id=str(portfolio_id),
            user_id=str(auth_context.user_id),
            outcome=outcome.value,
        )

        return removed


async def update_portfolio(
    info: strawberry.Info,
    portfolio_id: UUID,
    portfolio_text: str | None,
    portfolio_image: str | None,
    portfolio_link: str | None,
) -> Portfolio:
    """
    Update one of the caller's portfolios and return the updated document.

    Only the fields that were provided are changed.
    """
    auth_context = await require_auth_context(info)
    _check_text(portfolio_text, "portfolioText", required=False)

    async with get_async_session() as session:
        portfolio = await fetch_portfolio(session, portfolio_id)
        if not portfolio:
            raise NotFoundError("Portfolio not found")

        ensure_portfolio_author(portfolio, auth_context, "You can only update your portfolio")

        updated_fields = {
            k: v
            for k, v in {
                "portfolio_text": portfolio_text,
                "portfolio_image": portfolio_image,
                "portfolio_link": portfolio_link,
            }.items()
            if v is not None
        }
        for field, value in updated_fields.items():
            setattr(portfolio, field, value)

        await link_portfolio(session, auth_context.user_id, portfolio_id)
        await session.commit()

        portfolio = await fetch_portfolio(session, portfolio_id)

        logger.info(
            "Portfolio updated",
            portfolio_id=str(portfolio_id),
            user_id=str(auth_context.user_id),
            updated_fields=list(updated_fields),
        )

        return to_portfolio_type(portfolio)
