"""
Tests for rating and feedback resolvers
"""

import uuid

import pytest
import pytest_asyncio

from ratemyportfolio.graphql.errors import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from ratemyportfolio.graphql.resolvers.feedback import (
    add_feedback,
    remove_feedback,
    update_feedback,
)
from ratemyportfolio.graphql.resolvers.portfolio import add_portfolio, resolve_portfolio_by_id
from ratemyportfolio.graphql.resolvers.rating import add_rating, remove_rating, update_rating

pytestmark = pytest.mark.requires_db


@pytest_asyncio.fixture
async def scene(register, make_info):
    """Alice owns a portfolio; bob and carol are other users."""
    alice = await register("alice")
    bob = await register("bob")
    carol = await register("carol")
    portfolio = await add_portfolio(make_info(alice), "Alice's work", None, None)
    return alice, bob, carol, portfolio


class TestRatings:
    @pytest.mark.asyncio
    async def test_self_rating_forbidden(self, scene, make_info):
        alice, _, _, portfolio = scene

        with pytest.raises(ForbiddenError, match="You can not give rating to your portfolio"):
            await add_rating(make_info(alice), portfolio.id, 5)

        fetched = await resolve_portfolio_by_id(make_info(), portfolio.id)
        assert fetched.ratings == []

    @pytest.mark.asyncio
    async def test_add_rating(self, scene, make_info):
        _, bob, carol, portfolio = scene

        await add_rating(make_info(bob), portfolio.id, 4)
        result = await add_rating(make_info(carol), portfolio.id, 2)

        assert sorted((r.rating_author, r.rating_number) for r in result.ratings) == [
            ("bob", 4),
            ("carol", 2),
        ]
        assert result.rating_count() == 2
        assert result.average_rating() == 3.0

    @pytest.mark.asyncio
    async def test_identical_rating_not_duplicated(self, scene, make_info):
        _, bob, _, portfolio = scene

        await add_rating(make_info(bob), portfolio.id, 4)
        result = await add_rating(make_info(bob), portfolio.id, 4)

        assert len(result.ratings) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating_number", [0, 6])
    async def test_out_of_range_rejected(self, scene, make_info, rating_number):
        _, bob, _, portfolio = scene

        with pytest.raises(ValidationError):
            await add_rating(make_info(bob), portfolio.id, rating_number)

    @pytest.mark.asyncio
    async def test_missing_portfolio_not_found(self, register, make_info):
        bob = await register("bob")

        with pytest.raises(NotFoundError):
            await add_rating(make_info(bob), uuid.uuid4(), 3)

    @pytest.mark.asyncio
    async def test_requires_login(self, scene, make_info):
        _, _, _, portfolio = scene

        with pytest.raises(AuthenticationError):
            await add_rating(make_info(), portfolio.id, 3)

    @pytest.mark.asyncio
    async def test_update_rating_keeps_other_authors(self, scene, make_info):
        _, bob, carol, portfolio = scene
        await add_rating(make_info(bob), portfolio.id, 4)
        await add_rating(make_info(carol), portfolio.id, 2)

        result = await update_rating(make_info(bob), portfolio.id, 1)

        assert sorted((r.rating_author, r.rating_number) for r in result.ratings) == [
            ("bob", 1),
            ("carol", 2),
        ]

    @pytest.mark.asyncio
    async def test_update_rating_collapses_to_one_entry(self, scene, make_info):
        _, bob, _, portfolio = scene
        await add_rating(make_info(bob), portfolio.id, 4)
        await add_rating(make_info(bob), portfolio.id, 3)

        result = await update_rating(make_info(bob), portfolio.id, 5)

        assert [(r.rating_author, r.rating_number) for r in result.ratings] == [("bob", 5)]

    @pytest.mark.asyncio
    async def test_update_rating_without_previous_adds_one(self, scene, make_info):
        _, bob, _, portfolio = scene

        result = await update_rating(make_info(bob), portfolio.id, 3)

        assert [(r.rating_author, r.rating_number) for r in result.ratings] == [("bob", 3)]

    @pytest.mark.asyncio
    async def test_update_rating_on_own_portfolio_forbidden(self, scene, make_info):
        alice, _, _, portfolio = scene

        with pytest.raises(ForbiddenError):
            await update_rating(make_info(alice), portfolio.id, 5)

    @pytest.mark.asyncio
    async def test_update_rating_missing_portfolio_is_none(self, register, make_info):
        bob = await register("bob")

        assert await update_rating(make_info(bob), uuid.uuid4(), 3) is None

    @pytest.mark.asyncio
    async def test_remove_own_rating_only(self, scene, make_info):
        _, bob, carol, portfolio = scene
        await add_rating(make_info(bob), portfolio.id, 4)
        rated = await add_rating(make_info(carol), portfolio.id, 2)
        carol_rating = next(r for r in rated.ratings if r.rating_author == "carol")
        bob_rating = next(r for r in rated.ratings if r.rating_author == "bob")

        untouched = await remove_rating(make_info(carol), portfolio.id, bob_rating.id)
        assert len(untouched.ratings) == 2

        result = await remove_rating(make_info(carol), portfolio.id, carol_rating.id)
        assert [r.rating_author for r in result.ratings] == ["bob"]


class TestFeedbacks:
    @pytest.mark.asyncio
    async def test_add_feedback_including_own_portfolio(self, scene, make_info):
        alice, bob, _, portfolio = scene

        await add_feedback(make_info(bob), portfolio.id, "Great layout")
        result = await add_feedback(make_info(alice), portfolio.id, "Thanks!")

        assert sorted(f.feedback_author for f in result.feedbacks) == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_identical_feedback_not_duplicated(self, scene, make_info):
        _, bob, _, portfolio = scene

        await add_feedback(make_info(bob), portfolio.id, "Great layout")
        result = await add_feedback(make_info(bob), portfolio.id, "Great layout")

        assert len(result.feedbacks) == 1

    @pytest.mark.asyncio
    async def test_feedback_length_limit(self, scene, make_info):
        _, bob, _, portfolio = scene

        with pytest.raises(ValidationError):
            await add_feedback(make_info(bob), portfolio.id, "x" * 281)

    @pytest.mark.asyncio
    async def test_add_feedback_missing_portfolio_is_none(self, register, make_info):
        bob = await register("bob")

        assert await add_feedback(make_info(bob), uuid.uuid4(), "Hello") is None

    @pytest.mark.asyncio
    async def test_update_feedback_by_author(self, scene, make_info):
        _, bob, _, portfolio = scene
        result = await add_feedback(make_info(bob), portfolio.id, "Great layout")
        feedback_id = result.feedbacks[0].id

        updated = await update_feedback(make_info(bob), portfolio.id, feedback_id, "Even better")

        assert [f.feedback_text for f in updated.feedbacks] == ["Even better"]

    @pytest.mark.asyncio
    async def test_update_feedback_by_other_user_forbidden(self, scene, make_info):
        alice, bob, _, portfolio = scene
        result = await add_feedback(make_info(bob), portfolio.id, "Great layout")
        feedback_id = result.feedbacks[0].id

        with pytest.raises(ForbiddenError, match="You can only update your feedback"):
            await update_feedback(make_info(alice), portfolio.id, feedback_id, "Edited")

    @pytest.mark.asyncio
    async def test_update_unknown_feedback_not_found(self, scene, make_info):
        _, bob, _, portfolio = scene

        with pytest.raises(NotFoundError, match="Feedback not found"):
            await update_feedback(make_info(bob), portfolio.id, uuid.uuid4(), "Edited")

    @pytest.mark.asyncio
    async def test_remove_feedback_only_own(self, scene, make_info):
        alice, bob, _, portfolio = scene
        result = await add_feedback(make_info(bob), portfolio.id, "Great layout")
        feedback_id = result.feedbacks[0].id

        untouched = await remove_feedback(make_info(alice), portfolio.id, feedback_id)
        assert len(untouched.feedbacks) == 1

        removed = await remove_feedback(make_info(bob), portfolio.id, feedback_id)
        assert removed.feedbacks == []
