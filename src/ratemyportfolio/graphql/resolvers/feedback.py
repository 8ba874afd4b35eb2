from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import delete

from ...database.connection import get_async_session
from ...dbmodels import Feedbacks
from ...logging import get_logger
from ..access_control import require_auth_context
from ..errors import ForbiddenError, NotFoundError, ValidationError
from .portfolio import fetch_portfolio, to_portfolio_type

if TYPE_CHECKING:
    from ..types.portfolio import Portfolio

logger = get_logger(__name__)

MAX_FEEDBACK_LENGTH = 280


def _check_feedback_text(feedback_text: str) -> None:
    if not feedback_text or not feedback_text.strip():
        raise ValidationError("feedbackText can not be empty")
    if len(feedback_text) > MAX_FEEDBACK_LENGTH:
        raise ValidationError(f"feedbackText must be at most {MAX_FEEDBACK_LENGTH} characters")


async def add_feedback(
    info: strawberry.Info, portfolio_id: UUID, feedback_text: str
) -> Portfolio | None:
    """Leave feedback on a portfolio. Authors may comment on their own portfolios."""
    auth_context = await require_auth_context(info)
    _check_feedback_text(feedback_text)

    async with get_async_session() as session:
        portfolio = await fetch_portfolio(session, portfolio_id)
        if not portfolio:
            logger.info("Portfolio not found", portfolio_id=str(portfolio_id))
            return None

        duplicate = any(
            f.feedback_author == auth_context.username and f.feedback_text == feedback_text
            for f in portfolio.feedbacks
        )
        if not duplicate:
            session.add(
                Feedbacks(
                    portfolio_id=portfolio_id,
                    feedback_text=feedback_text,
                    feedback_author=auth_context.username,
                )
            )
            await session.commit()

        portfolio = await fetch_portfolio(session, portfolio_id)

        logger.info(
            "Feedback added",
            portfolio_id=str(portfolio_id),
            user_id=str(auth_context.user_id),
            duplicate=duplicate,
        )

        return to_portfolio_type(portfolio)


async def remove_feedback(
    info: strawberry.Info, portfolio_id: UUID, feedback_id: UUID
) -> Portfolio | None:
    auth_context = await require_auth_context(info)

    async with get_async_session() as session:
        result = await session.execute(
            delete(Feedbacks).where(
                Feedbacks.id == feedback_id,
                Feedbacks.portfolio_id == portfolio_id,
                Feedbacks.feedback_author == auth_context.username,
            )
        )
        await session.commit()

        logger.info(
            "Feedback removal processed",
            portfolio_id=str(portfolio_id),
            feedback_id=str(feedback_id),
            user_id=str(auth_context.user_id),
            removed=result.rowcount,
        )

        portfolio = await fetch_portfolio(session, portfolio_id)
        return to_portfolio_type(portfolio) if portfolio else None


async def update_feedback(
    info: strawberry.Info, portfolio_id: UUID, feedback_id: UUID, feedback_text: str
) -> Portfolio:
    """
    Replace the text of one of the caller's feedback entries.

    Only the author of an entry may edit it.
    """
    auth_context = await require_auth_context(info)
    _check_feedback_text(feedback_text)

    async with get_async_session() as session:
        portfolio = await fetch_portfolio(session, portfolio_id)
        if not portfolio:
            raise NotFoundError("Portfolio not found")

        feedback = next((f for f in portfolio.feedbacks if f.id == feedback_id), None)
        if not feedback:
            raise NotFoundError("Feedback not found")

        if feedback.feedback_author != auth_context.username:
            logger.info(
                "Feedback author check failed",
                feedback_id=str(feedback_id),
                user_id=str(auth_context.user_id),
            )
            raise ForbiddenError("You can only update your feedback")

        feedback.feedback_text = feedback_text
        await session.commit()

        portfolio = await fetch_portfolio(session, portfolio_id)

        logger.info(
            "Feedback updated",
            portfolio_id=str(portfolio_id),
            feedback_id=str(feedback_id),
            user_id=str(auth_context.user_id),
        )

        return to_portfolio_type(portfolio)
