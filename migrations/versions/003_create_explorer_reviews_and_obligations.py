"""Create explorer_reviews and explorer_review_obligations tables.

One review per connection is enforced by uq_explorer_reviews_connection.

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_SUB_RATINGS = (
    "service_quality_rating",
    "punctuality_rating",
    "communication_rating",
    "value_for_money_rating",
)


def upgrade() -> None:
    op.create_table(
        "explorer_reviews",
        sa.Column("review_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "connection_id",
            sa.Uuid(),
            sa.ForeignKey("service_connections.connection_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("explorer_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("as_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "request_id",
            sa.Uuid(),
            sa.ForeignKey("service_requests.request_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        *(sa.Column(field, sa.Integer(), nullable=True) for field in _SUB_RATINGS),
        sa.Column("would_hire_again", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("recommend_to_others", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("review_photos", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("is_verified_review", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_explorer_reviews_rating"),
        *(
            sa.CheckConstraint(
                f"{field} IS NULL OR ({field} >= 1 AND {field} <= 5)",
                name=f"ck_explorer_reviews_{field}",
            )
            for field in _SUB_RATINGS
        ),
        sa.UniqueConstraint("connection_id", name="uq_explorer_reviews_connection"),
    )
    op.create_index("ix_explorer_reviews_explorer_id", "explorer_reviews", ["explorer_id"])
    op.create_index("ix_explorer_reviews_as_id", "explorer_reviews", ["as_id"])

    op.create_table(
        "explorer_review_obligations",
        sa.Column("obligation_id", sa.Uuid(), primary_key=True),
        sa.Column("explorer_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "connection_id",
            sa.Uuid(),
            sa.ForeignKey("service_connections.connection_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("as_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("service_completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("review_due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_blocking_new_services", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "explorer_id", "connection_id", name="uq_review_obligations_explorer_connection"
        ),
    )
    op.create_index(
        "ix_explorer_review_obligations_explorer_id", "explorer_review_obligations", ["explorer_id"]
    )
    op.create_index(
        "ix_explorer_review_obligations_review_due_date",
        "explorer_review_obligations",
        ["review_due_date"],
    )


def downgrade() -> None:
    op.drop_table("explorer_review_obligations")
    op.drop_table("explorer_reviews")
