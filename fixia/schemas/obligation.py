"""Pydantic v2 schemas for review obligations and blocking status."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from fixia.models.review import ReviewObligation
from fixia.utils.dates import as_utc, days_until


class ReviewObligationResponse(BaseModel):
    id: uuid.UUID
    connection_id: uuid.UUID
    as_user_id: uuid.UUID
    as_name: str
    as_last_name: str
    as_profile_image: str | None = None
    verification_status: str
    service_title: str
    service_completed_at: datetime
    final_agreed_price: Decimal | None = None
    review_due_date: datetime
    is_blocking_new_services: bool
    days_remaining: int

    @classmethod
    def from_obligation(
        cls, obligation: ReviewObligation, now: datetime | None = None
    ) -> "ReviewObligationResponse":
        professional = obligation.professional
        connection = obligation.connection
        return cls(
            id=obligation.obligation_id,
            connection_id=obligation.connection_id,
            as_user_id=obligation.as_id,
            as_name=professional.first_name,
            as_last_name=professional.last_name,
            as_profile_image=professional.profile_image,
            verification_status=professional.verification_status.value,
            service_title=connection.service_title,
            service_completed_at=as_utc(obligation.service_completed_at),
            final_agreed_price=connection.final_agreed_price,
            review_due_date=as_utc(obligation.review_due_date),
            is_blocking_new_services=obligation.is_blocking_new_services,
            days_remaining=days_until(obligation.review_due_date, now),
        )


class BlockingStatusResponse(BaseModel):
    is_blocked: bool
    message: str
    obligation_count: int
    pending_as_names: list[str] = []
