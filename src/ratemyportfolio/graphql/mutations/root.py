"""
Root GraphQL mutation definitions
"""

from uuid import UUID

import strawberry

from ..types.auth import Auth
from ..types.portfolio import Portfolio
from ..types.user import User


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Account mutations
    @strawberry.mutation(name="addUser")
    async def add_user(
        self, info: strawberry.Info, username: str, email: str, password: str
    ) -> Auth:
        """Register a new user and return a token for it."""
        from ..resolvers.account import add_user

        return await add_user(info, username, email, password)

    @strawberry.mutation
    async def login(self, info: strawberry.Info, email: str, password: str) -> Auth:
        """Log in with e-mail and password."""
        from ..resolvers.account import login

        return await login(info, email, password)

    @strawberry.mutation(name="removeUser")
    async def remove_user(
        self, info: strawberry.Info, user_id: UUID | None = None
    ) -> User | None:
        """Delete the logged-in user's account."""
        from ..resolvers.account import remove_user

        return await remove_user(info, user_id)

    @strawberry.mutation(name="updateUser")
    async def update_user(
        self,
        info: strawberry.Info,
        username: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User | None:
        """Update the logged-in user's username, e-mail or password."""
        from ..resolvers.account import update_user

        return await update_user(info, username, email, password)

    # Portfolio mutations
    @strawberry.mutation(name="addPortfolio")
    async def add_portfolio(
        self,
        info: strawberry.Info,
        portfolio_text: str,
        portfolio_image: str | None = None,
        portfolio_link: str | None = None,
    ) -> Portfolio:
        """Publish a portfolio as the logged-in user."""
        from ..resolvers.portfolio import add_portfolio

        return await add_portfolio(info, portfolio_text, portfolio_image, portfolio_link)

    @strawberry.mutation(name="removePortfolio")
    async def remove_portfolio(
        self, info: strawberry.Info, portfolio_id: UUID
    ) -> Portfolio | None:
        """Delete one of the logged-in user's portfolios."""
        from ..resolvers.portfolio import remove_portfolio

        return await remove_portfolio(info, portfolio_id)

    @strawberry.mutation(name="updatePortfolio")
    async def update_portfolio(
        self,
        info: strawberry.Info,
        portfolio_id: UUID,
        portfolio_text: str | None = None,
        portfolio_image: str | None = None,
        portfolio_link: str | None = None,
    ) -> Portfolio:
        """Update one of the logged-in user's portfolios."""
        from ..resolvers.portfolio import update_portfolio

        return await update_portfolio(
            info, portfolio_id, portfolio_text, portfolio_image, portfolio_link
        )

    # Rating mutations
    @strawberry.mutation(name="addRating")
    async def add_rating(
        self, info: strawberry.Info, portfolio_id: UUID, rating_number: int
    ) -> Portfolio:
        from ..resolvers.rating import add_rating

        return await add_rating(info, portfolio_id, rating_number)

    @strawberry.mutation(name="removeRating")
    async def remove_rating(
        self, info: strawberry.Info, portfolio_id: UUID, rating_id: UUID
    ) -> Portfolio | None:
        from ..resolvers.rating import remove_rating

        return await remove_rating(info, portfolio_id, rating_id)

    @strawberry.mutation(name="updateRating")
    async def update_rating(
        self, info: strawberry.Info, portfolio_id: UUID, rating_number: int
    ) -> Portfolio | None:
        from ..resolvers.rating import update_rating

        return await update_rating(info, portfolio_id, rating_number)

    # Feedback mutations
    @strawberry.mutation(name="addFeedback")
    async def add_feedback(
        self, info: strawberry.Info, portfolio_id: UUID, feedback_text: str
    ) -> Portfolio | None:
        from ..resolvers.feedback import add_feedback

        return await add_feedback(info, portfolio_id, feedback_text)

    @strawberry.mutation(name="removeFeedback")
    async def remove_feedback(
        self, info: strawberry.Info, portfolio_id: UUID, feedback_id: UUID
    ) -> Portfolio | None:
        from ..resolvers.feedback import remove_feedback

        return await remove_feedback(info, portfolio_id, feedback_id)

    @strawberry.mutation(name="updateFeedback")
    async def update_feedback(
        self, info: strawberry.Info, portfolio_id: UUID, feedback_id: UUID, feedback_text: str
    ) -> Portfolio:
        from ..resolvers.feedback import update_feedback

        return await update_feedback(info, portfolio_id, feedback_id, feedback_text)

    # Social graph mutations
    @strawberry.mutation(name="followUser")
    async def follow_user(self, info: strawberry.Info, user_id: UUID) -> User | None:
        """Follow another user."""
        from ..resolvers.social import follow_user

        return await follow_user(info, user_id)

    @strawberry.mutation(name="unfollowUser")
    async def unfollow_user(self, info: strawberry.Info, user_id: UUID) -> User | None:
        """Stop following a user."""
        from ..resolvers.social import unfollow_user

        return await unfollow_user(info, user_id)
