"""
User GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry

from .portfolio import Portfolio


@strawberry.type
class User:
    """User type for GraphQL API.

    Reference sets that the query expanded up front are carried in the
    ``preloaded_*`` fields; anything else is fetched when requested.
    """

    id: UUID = strawberry.field(name="_id")
    username: str
    email: str
    created_at: datetime

    preloaded_portfolios: strawberry.Private[list | None] = None
    preloaded_followers: strawberry.Private[list | None] = None
    preloaded_followings: strawberry.Private[list | None] = None

    @strawberry.field
    async def portfolios(self, info: strawberry.Info) -> list[Portfolio]:
        """Portfolios linked to this user."""
        if self.preloaded_portfolios is not None:
            return self.preloaded_portfolios
        from ..resolvers.user import resolve_user_portfolios

        return await resolve_user_portfolios(self, info)

    @strawberry.field
    async def followers(self, info: strawberry.Info) -> list["User"]:
        """Users following this user."""
        if self.preloaded_followers is not None:
            return self.preloaded_followers
        from ..resolvers.user import resolve_user_followers

        return await resolve_user_followers(self, info)

    @strawberry.field
    async def followings(self, info: strawberry.Info) -> list["User"]:
        """Users this user follows."""
        if self.preloaded_followings is not None:
            return self.preloaded_followings
        from ..resolvers.user import resolve_user_followings

        return await resolve_user_followings(self, info)

    @strawberry.field
    async def follower_count(self, info: strawberry.Info) -> int:
        if self.preloaded_followers is not None:
            return len(self.preloaded_followers)
        from ..resolvers.user import resolve_user_follower_count

        return await resolve_user_follower_count(self, info)

    @strawberry.field
    async def following_count(self, info: strawberry.Info) -> int:
        if self.preloaded_followings is not None:
            return len(self.preloaded_followings)
        from ..resolvers.user import resolve_user_following_count

        return await resolve_user_following_count(self, info)
