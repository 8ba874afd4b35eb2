"""
Portfolio GraphQL type definitions
"""

from datetime import datetime
from uuid import UUID

import strawberry


@strawberry.type
class Rating:
    """A rating given to a portfolio by another user."""

    id: UUID = strawberry.field(name="_id")
    rating_number: int
    rating_author: str
    created_at: datetime


@strawberry.type
class Feedback:
    """A written feedback entry on a portfolio."""

    id: UUID = strawberry.field(name="_id")
    feedback_text: str
    feedback_author: str
    created_at: datetime


@strawberry.type
class Portfolio:
    """Portfolio type for GraphQL API."""

    id: UUID = strawberry.field(name="_id")
    portfolio_text: str
    portfolio_image: str | None
    portfolio_link: str | None
    portfolio_author: str
    created_at: datetime
    ratings: list[Rating]
    feedbacks: list[Feedback]

    @strawberry.field
    def rating_count(self) -> int:
        return len(self.ratings)

    @strawberry.field
    def average_rating(self) -> float | None:
        """Mean of all rating numbers, or null when unrated."""
        if not self.ratings:
            return None
        return sum(r.rating_number for r in self.ratings) / len(self.ratings)
