"""Create service_requests and service_connections tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "service_requests",
        sa.Column("request_id", sa.Uuid(), primary_key=True),
        sa.Column("explorer_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("locality", sa.String(100), nullable=True),
        sa.Column("budget", sa.Numeric(10, 2), nullable=True),
        sa.Column(
            "status",
            sa.Enum("active", "closed", name="servicerequeststatus"),
            nullable=False,
            server_default="active",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_service_requests_explorer_id", "service_requests", ["explorer_id"])

    op.create_table(
        "service_connections",
        sa.Column("connection_id", sa.Uuid(), primary_key=True),
        sa.Column("explorer_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("as_id", sa.Uuid(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "request_id",
            sa.Uuid(),
            sa.ForeignKey("service_requests.request_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("service_title", sa.String(200), nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "service_in_progress", "completed", "cancelled", name="connectionstatus"),
            nullable=False,
            server_default="active",
        ),
        sa.Column("explorer_confirmed_completion", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("as_confirmed_completion", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("service_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("final_agreed_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="ARS"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_service_connections_explorer_id", "service_connections", ["explorer_id"])
    op.create_index("ix_service_connections_as_id", "service_connections", ["as_id"])


def downgrade() -> None:
    op.drop_table("service_connections")
    op.drop_table("service_requests")
    op.execute("DROP TYPE IF EXISTS connectionstatus")
    op.execute("DROP TYPE IF EXISTS servicerequeststatus")
