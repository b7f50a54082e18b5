"""Create churches, service_times and reviews tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  The directory schema: one row per place id in `churches`, with weekly
       `service_times` and visitor `reviews` keyed by church_id.
How:   churches.place_id carries the UNIQUE constraint that find-or-create
       relies on; reviews get a (church_id, created_at DESC) index for the
       newest-first listing.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "churches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "place_id",
            sa.Text(),
            nullable=False,
            comment="External place identifier assigned by the places provider",
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("vicinity", sa.Text(), nullable=False),
        # Coordinates and rating kept as the text the provider sent
        sa.Column("lat", sa.Text(), nullable=False),
        sa.Column("lng", sa.Text(), nullable=False),
        sa.Column("rating", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("denomination", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("place_id", name="churches_place_id_unique"),
    )

    op.create_table(
        "service_times",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("church_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False, comment="0 = Sunday .. 6 = Saturday"),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("service_type", sa.Text(), nullable=True),
        sa.Column("language", sa.Text(), nullable=False, server_default=sa.text("'English'")),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_service_times_day_of_week"),
    )
    op.create_index("ix_service_times_church_id", "service_times", ["church_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("church_id", sa.Integer(), nullable=False),
        sa.Column("user_name", sa.Text(), nullable=False),
        sa.Column("rating", sa.Numeric(2, 1), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_church_id", "reviews", ["church_id"])
    op.create_index(
        "idx_reviews_church_created_at",
        "reviews",
        ["church_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop all directory tables. Destructive."""
    op.drop_index("idx_reviews_church_created_at", table_name="reviews")
    op.drop_index("ix_reviews_church_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("ix_service_times_church_id", table_name="service_times")
    op.drop_table("service_times")
    op.drop_table("churches")
