"""
Database models for Rate My Portfolio (authoritative ORM definitions).

This module defines the SQLAlchemy Base with a naming convention for stable
Alembic autogenerate diffs, and exposes `target_metadata` for Alembic.

Users and portfolios are the two aggregates. Ratings and feedbacks belong to
a portfolio and are loaded with it. The reference sets of a user
(`portfolios`, `followers`, `followings`) live in association tables; a single
`user_follows` row is both a following of one user and a follower of the other.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# Naming convention for deterministic constraint/index names in Alembic diffs
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all database models with type checking support."""

    metadata = MetaData(naming_convention=naming_convention)


user_portfolios = Table(
    "user_portfolios",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "portfolio_id", Uuid, ForeignKey("portfolios.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("created_at", DateTime(True), default=utcnow, nullable=False),
)

user_follows = Table(
    "user_follows",
    Base.metadata,
    Column("follower_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("following_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(True), default=utcnow, nullable=False),
    CheckConstraint("follower_id <> following_id", name="no_self_follow"),
    Index("idx_user_follows_following", "following_id"),
)


class Users(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Reference sets are written through the association tables directly
    portfolios: Mapped[list["Portfolios"]] = relationship(
        "Portfolios", secondary=user_portfolios, viewonly=True
    )
    followers: Mapped[list["Users"]] = relationship(
        "Users",
        secondary=user_follows,
        primaryjoin=lambda: Users.id == user_follows.c.following_id,
        secondaryjoin=lambda: Users.id == user_follows.c.follower_id,
        viewonly=True,
    )
    followings: Mapped[list["Users"]] = relationship(
        "Users",
        secondary=user_follows,
        primaryjoin=lambda: Users.id == user_follows.c.follower_id,
        secondaryjoin=lambda: Users.id == user_follows.c.following_id,
        viewonly=True,
    )


class Portfolios(Base):
    __tablename__ = "portfolios"
    __table_args__ = (Index("idx_portfolios_author", "portfolio_author"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    portfolio_text: Mapped[str] = mapped_column(Text, nullable=False)
    portfolio_image: Mapped[str | None] = mapped_column(Text)
    portfolio_link: Mapped[str | None] = mapped_column(Text)
    # Denormalized username of the author, not a foreign key
    portfolio_author: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True), default=utcnow, onupdate=utcnow, nullable=False
    )

    ratings: Mapped[list["Ratings"]] = relationship(
        "Ratings",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Ratings.created_at",
        lazy="selectin",
    )
    feedbacks: Mapped[list["Feedbacks"]] = relationship(
        "Feedbacks",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="Feedbacks.created_at",
        lazy="selectin",
    )


class Ratings(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("rating_number BETWEEN 1 AND 5", name="rating_number_range"),
        Index("idx_ratings_portfolio_author", "portfolio_id", "rating_author"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    portfolio_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False
    )
    rating_number: Mapped[int] = mapped_column(Integer, nullable=False)
    rating_author: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)

    portfolio: Mapped["Portfolios"] = relationship("Portfolios", back_populates="ratings")


class Feedbacks(Base):
    __tablename__ = "feedbacks"
    __table_args__ = (Index("idx_feedbacks_portfolio_author", "portfolio_id", "feedback_author"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    portfolio_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("portfolios.id", ondelete="CASCADE"), nullable=False
    )
    feedback_text: Mapped[str] = mapped_column(Text, nullable=False)
    feedback_author: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(True), default=utcnow, nullable=False)

    portfolio: Mapped["Portfolios"] = relationship("Portfolios", back_populates="feedbacks")


target_metadata = Base.metadata

__all__ = [
    "Base",
    "Users",
    "Portfolios",
    "Ratings",
    "Feedbacks",
    "user_portfolios",
    "user_follows",
    "target_metadata",
]
