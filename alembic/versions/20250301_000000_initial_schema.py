"""
Initial schema: users, portfolios with their ratings and feedbacks, and the
user reference sets.

Revision ID: 20250301_000000_initial_schema
Revises:
Create Date: 2025-03-01 00:00:00
"""

import sqlalchemy as sa

from alembic import op  # type: ignore[reportMissingImports]

# revision identifiers, used by Alembic.
revision = "20250301_000000_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "portfolios",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("portfolio_text", sa.Text(), nullable=False),
        sa.Column("portfolio_image", sa.Text(), nullable=True),
        sa.Column("portfolio_link", sa.Text(), nullable=True),
        sa.Column("portfolio_author", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_portfolios"),
    )
    op.create_index("idx_portfolios_author", "portfolios", ["portfolio_author"])

    op.create_table(
        "ratings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("portfolio_id", sa.Uuid(), nullable=False),
        sa.Column("rating_number", sa.Integer(), nullable=False),
        sa.Column("rating_author", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "rating_number BETWEEN 1 AND 5", name="ck_ratings_rating_number_range"
        ),
        sa.ForeignKeyConstraint(
            ["portfolio_id"],
            ["portfolios.id"],
            ondelete="CASCADE",
            name="fk_ratings_portfolio_id_portfolios",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_ratings"),
    )
    op.create_index(
        "idx_ratings_portfolio_author", "ratings", ["portfolio_id", "rating_author"]
    )

    op.create_table(
        "feedbacks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("portfolio_id", sa.Uuid(), nullable=False),
        sa.Column("feedback_text", sa.Text(), nullable=False),
        sa.Column("feedback_author", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["portfolio_id"],
            ["portfolios.id"],
            ondelete="CASCADE",
            name="fk_feedbacks_portfolio_id_portfolios",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_feedbacks"),
    )
    op.create_index(
        "idx_feedbacks_portfolio_author", "feedbacks", ["portfolio_id", "feedback_author"]
    )

    op.create_table(
        "user_portfolios",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("portfolio_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="fk_user_portfolios_user_id_users",
        ),
        sa.ForeignKeyConstraint(
            ["portfolio_id"],
            ["portfolios.id"],
            ondelete="CASCADE",
            name="fk_user_portfolios_portfolio_id_portfolios",
        ),
        sa.PrimaryKeyConstraint("user_id", "portfolio_id", name="pk_user_portfolios"),
    )

    op.create_table(
        "user_follows",
        sa.Column("follower_id", sa.Uuid(), nullable=False),
        sa.Column("following_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "follower_id <> following_id", name="ck_user_follows_no_self_follow"
        ),
        sa.ForeignKeyConstraint(
            ["follower_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="fk_user_follows_follower_id_users",
        ),
        sa.ForeignKeyConstraint(
            ["following_id"],
            ["users.id"],
            ondelete="CASCADE",
            name="fk_user_follows_following_id_users",
        ),
        sa.PrimaryKeyConstraint("follower_id", "following_id", name="pk_user_follows"),
    )
    op.create_index("idx_user_follows_following", "user_follows", ["following_id"])


def downgrade() -> None:
    op.drop_index("idx_user_follows_following", table_name="user_follows")
    op.drop_table("user_follows")
    op.drop_table("user_portfolios")
    op.drop_index("idx_feedbacks_portfolio_author", table_name="feedbacks")
    op.drop_table("feedbacks")
    op.drop_index("idx_ratings_portfolio_author", table_name="ratings")
    op.drop_table("ratings")
    op.drop_index("idx_portfolios_author", table_name="portfolios")
    op.drop_table("portfolios")
    op.drop_table("users")
