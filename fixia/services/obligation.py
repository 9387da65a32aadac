"""Review-obligation tracking and blocking-status aggregation."""

import logging
import uuid
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.auth.middleware import AuthenticatedUser, require_explorer
from fixia.config import settings
from fixia.database import get_db
from fixia.models.connection import ServiceConnection
from fixia.models.review import ReviewObligation
from fixia.models.user import User
from fixia.schemas.obligation import BlockingStatusResponse, ReviewObligationResponse

logger = logging.getLogger(__name__)


def review_due_date(service_completed_at: datetime) -> datetime:
    return service_completed_at + timedelta(days=settings.review_grace_period_days)


def create_obligation(connection: ServiceConnection, completed_at: datetime) -> ReviewObligation:
    """Build the Explorer's obligation for a just-completed connection.

    The caller adds it to the session and commits alongside the status change.
    """
    return ReviewObligation(
        obligation_id=uuid.uuid4(),
        explorer_id=connection.explorer_id,
        connection_id=connection.connection_id,
        as_id=connection.as_id,
        service_completed_at=completed_at,
        review_due_date=review_due_date(completed_at),
        is_blocking_new_services=True,
    )


async def _pending_obligations(db: AsyncSession, explorer_id: uuid.UUID) -> list[ReviewObligation]:
    result = await db.execute(
        select(ReviewObligation)
        .where(ReviewObligation.explorer_id == explorer_id)
        .order_by(
            ReviewObligation.review_due_date.asc(),
            ReviewObligation.service_completed_at.asc(),
        )
    )
    return list(result.scalars().all())


async def list_obligations(
    db: AsyncSession, explorer_id: uuid.UUID, now: datetime | None = None
) -> list[ReviewObligationResponse]:
    """Pending obligations for an Explorer, soonest due first."""
    obligations = await _pending_obligations(db, explorer_id)
    return [ReviewObligationResponse.from_obligation(o, now) for o in obligations]


def _blocking_message(count: int) -> str:
    if count > 0:
        return f"You must review {count} professional(s) before requesting new services"
    return "You can request new services normally"


async def get_blocking_status(db: AsyncSession, explorer_id: uuid.UUID) -> BlockingStatusResponse:
    """Read-only aggregation: blocked iff any obligation is pending."""
    result = await db.execute(
        select(User.first_name, User.last_name)
        .join(ReviewObligation, ReviewObligation.as_id == User.user_id)
        .where(ReviewObligation.explorer_id == explorer_id)
        .order_by(ReviewObligation.review_due_date.asc())
    )
    names = [f"{first} {last}" for first, last in result.all()]
    count = len(names)
    return BlockingStatusResponse(
        is_blocked=count > 0,
        message=_blocking_message(count),
        obligation_count=count,
        pending_as_names=names,
    )


async def require_unblocked_explorer(
    auth: AuthenticatedUser = Depends(require_explorer),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """Guard for marketplace actions an Explorer with pending reviews may not take."""
    status = await get_blocking_status(db, auth.user_id)
    if status.is_blocked:
        logger.info(
            "Explorer %s blocked by %d pending review(s)", auth.user_id, status.obligation_count
        )
        raise HTTPException(status_code=403, detail=status.message)
    return auth
