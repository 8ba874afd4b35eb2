"""
Root GraphQL query definitions
"""

from uuid import UUID

import strawberry

from ..types.portfolio import Portfolio
from ..types.user import User


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def users(self, info: strawberry.Info) -> list[User]:
        """Get all users with their portfolios, followers and followings."""
        from ..resolvers.user import resolve_users

        return await resolve_users(info)

    @strawberry.field
    async def user(self, info: strawberry.Info, username: str) -> User | None:
        """Get a user by username."""
        from ..resolvers.user import resolve_user_by_username

        return await resolve_user_by_username(info, username)

    @strawberry.field
    async def portfolios(
        self, info: strawberry.Info, username: str | None = None
    ) -> list[Portfolio]:
        """Get portfolios, newest first, optionally only those by one author."""
        from ..resolvers.portfolio import resolve_portfolios

        return await resolve_portfolios(info, username)

    @strawberry.field
    async def portfolio(self, info: strawberry.Info, portfolio_id: UUID) -> Portfolio | None:
        """Get a portfolio by ID."""
        from ..resolvers.portfolio import resolve_portfolio_by_id

        return await resolve_portfolio_by_id(info, portfolio_id)

    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current authenticated user."""
        from ..resolvers.user import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def followers(self, info: strawberry.Info, username: str | None = None) -> list[User]:
        """Get users with their followers."""
        from ..resolvers.user import resolve_followers

        return await resolve_followers(info, username)

    @strawberry.field
    async def followings(self, info: strawberry.Info, username: str | None = None) -> list[User]:
        """Get users with the users they follow."""
        from ..resolvers.user import resolve_followings

        return await resolve_followings(info, username)
