"""
Every identity-scoped mutation refuses anonymous callers without touching the store
"""

import pytest
from sqlalchemy import func, select

from ratemyportfolio.database.connection import get_async_session
from ratemyportfolio.dbmodels import Base
from ratemyportfolio.graphql.errors import AuthenticationError
from ratemyportfolio.graphql.resolvers import account, feedback, portfolio, rating, social

pytestmark = pytest.mark.requires_db

# (operation, resolver, arguments built from the seeded ids)
ANONYMOUS_CALLS = [
    ("removeUser", account.remove_user, lambda ids: (ids["bob"],)),
    ("updateUser", account.update_user, lambda ids: ("mallory",)),
    ("addPortfolio", portfolio.add_portfolio, lambda ids: ("Text", None, None)),
    ("removePortfolio", portfolio.remove_portfolio, lambda ids: (ids["portfolio"],)),
    (
        "updatePortfolio",
        portfolio.update_portfolio,
        lambda ids: (ids["portfolio"], "Text", None, None),
    ),
    ("addRating", rating.add_rating, lambda ids: (ids["portfolio"], 3)),
    (
        "removeRating",
        rating.remove_rating,
        lambda ids: (ids["portfolio"], ids["rating"]),
    ),
    ("updateRating", rating.update_rating, lambda ids: (ids["portfolio"], 1)),
    ("addFeedback", feedback.add_feedback, lambda ids: (ids["portfolio"], "Hi")),
    (
        "removeFeedback",
        feedback.remove_feedback,
        lambda ids: (ids["portfolio"], ids["feedback"]),
    ),
    (
        "updateFeedback",
        feedback.update_feedback,
        lambda ids: (ids["portfolio"], ids["feedback"], "Edited"),
    ),
    ("followUser", social.follow_user, lambda ids: (ids["bob"],)),
    ("unfollowUser", social.unfollow_user, lambda ids: (ids["bob"],)),
]


async def snapshot():
    """Row count and content of every table."""
    state = {}
    async with get_async_session() as session:
        for table in Base.metadata.sorted_tables:
            count = (await session.execute(select(func.count()).select_from(table))).scalar()
            rows = (await session.execute(select(table))).all()
            state[table.name] = (count, sorted(tuple(map(str, row)) for row in rows))
    return state


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("operation", "resolver", "arguments"),
    ANONYMOUS_CALLS,
    ids=[call[0] for call in ANONYMOUS_CALLS],
)
async def test_anonymous_caller_rejected(register, make_info, operation, resolver, arguments):
    alice = await register("alice")
    bob = await register("bob")
    created = await portfolio.add_portfolio(make_info(alice), "Alice's work", None, None)
    rated = await rating.add_rating(make_info(bob), created.id, 4)
    commented = await feedback.add_feedback(make_info(bob), created.id, "Nice")
    await social.follow_user(make_info(alice), bob.user_id)

    ids = {
        "bob": bob.user_id,
        "portfolio": created.id,
        "rating": rated.ratings[0].id,
        "feedback": commented.feedbacks[0].id,
    }
    before = await snapshot()

    with pytest.raises(AuthenticationError, match="You need to be logged in"):
        await resolver(make_info(), *arguments(ids))

    assert await snapshot() == before
