"""Service request and Explorer-AS connection models."""

import enum
import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fixia.database import Base


class ServiceRequestStatus(enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class ConnectionStatus(enum.Enum):
    ACTIVE = "active"
    SERVICE_IN_PROGRESS = "service_in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses from which a party may still confirm completion
CONFIRMABLE_STATUSES = {ConnectionStatus.ACTIVE, ConnectionStatus.SERVICE_IN_PROGRESS}


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    request_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    explorer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    locality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    budget: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    status: Mapped[ServiceRequestStatus] = mapped_column(
        Enum(ServiceRequestStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ServiceRequestStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )


class ServiceConnection(Base):
    __tablename__ = "service_connections"

    connection_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
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
    service_title: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[ConnectionStatus] = mapped_column(
        Enum(ConnectionStatus, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ConnectionStatus.ACTIVE,
    )
    explorer_confirmed_completion: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    as_confirmed_completion: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    service_completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    final_agreed_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="ARS")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    explorer = relationship("User", foreign_keys=[explorer_id], lazy="selectin")
    professional = relationship("User", foreign_keys=[as_id], lazy="selectin")

    @property
    def both_confirmed(self) -> bool:
        return self.explorer_confirmed_completion and self.as_confirmed_completion
