"""Explorer review and review-obligation models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fixia.database import Base

SUB_RATING_FIELDS = (
    "service_quality_rating",
    "punctuality_rating",
    "communication_rating",
    "value_for_money_rating",
)


class ExplorerReview(Base):
    __tablename__ = "explorer_reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_explorer_reviews_rating"),
        *(
            CheckConstraint(
                f"{field} IS NULL OR ({field} >= 1 AND {field} <= 5)",
                name=f"ck_explorer_reviews_{field}",
            )
            for field in SUB_RATING_FIELDS
        ),
        UniqueConstraint("connection_id", name="uq_explorer_reviews_connection"),
    )

    review_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    connection_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("service_connections.connection_id", ondelete="CASCADE"), nullable=False
    )
    explorer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    as_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    request_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("service_requests.request_id", ondelete="SET NULL"), nullable=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    service_quality_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    punctuality_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    communication_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    value_for_money_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    would_hire_again: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    recommend_to_others: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    review_photos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_verified_review: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    explorer = relationship("User", foreign_keys=[explorer_id], lazy="selectin")
    connection = relationship("ServiceConnection", lazy="selectin")


class ReviewObligation(Base):
    """A mandatory review the Explorer owes for a completed connection.

    The row is deleted in the same transaction that inserts the review, so a
    row existing means the review is still pending.
    """

    __tablename__ = "explorer_review_obligations"
    __table_args__ = (
        UniqueConstraint("explorer_id", "connection_id", name="uq_review_obligations_explorer_connection"),
    )

    obligation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    explorer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    connection_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("service_connections.connection_id", ondelete="CASCADE"), nullable=False
    )
    as_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    service_completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    review_due_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    is_blocking_new_services: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    professional = relationship("User", foreign_keys=[as_id], lazy="selectin")
    connection = relationship("ServiceConnection", lazy="selectin")
