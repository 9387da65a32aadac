"""Explorer review submission, history and professional review listings."""

import logging
import uuid
from datetime import timedelta

from fastapi import HTTPException
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.config import settings
from fixia.models.review import ExplorerReview, ReviewObligation
from fixia.models.user import User, UserType
from fixia.schemas.review import (
    Pagination,
    ProfessionalReviewsResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewSort,
    ReviewStatistics,
    ReviewUpdate,
)
from fixia.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "This service has already been reviewed"


async def submit_review(
    db: AsyncSession, explorer_id: uuid.UUID, data: ReviewCreate
) -> ExplorerReview:
    """Persist the review and clear its obligation in one transaction.

    The unique constraint on explorer_reviews.connection_id decides races:
    the second writer fails on commit and nothing it did is kept.
    """
    result = await db.execute(
        select(ReviewObligation).where(
            ReviewObligation.connection_id == data.connection_id,
            ReviewObligation.explorer_id == explorer_id,
        )
    )
    obligation = result.scalar_one_or_none()
    if obligation is None:
        existing = await db.execute(
            select(ExplorerReview.review_id).where(
                ExplorerReview.connection_id == data.connection_id,
                ExplorerReview.explorer_id == explorer_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(status_code=409, detail=ALREADY_REVIEWED)
        raise HTTPException(status_code=404, detail="Review obligation not found")

    connection = obligation.connection
    review = ExplorerReview(
        review_id=uuid.uuid4(),
        connection_id=obligation.connection_id,
        explorer_id=explorer_id,
        as_id=obligation.as_id,
        request_id=connection.request_id if connection is not None else None,
        rating=data.rating,
        comment=data.comment,
        service_quality_rating=data.service_quality_rating,
        punctuality_rating=data.punctuality_rating,
        communication_rating=data.communication_rating,
        value_for_money_rating=data.value_for_money_rating,
        would_hire_again=data.would_hire_again,
        recommend_to_others=data.recommend_to_others,
        review_photos=list(data.review_photos),
        is_verified_review=True,
    )
    db.add(review)
    await db.delete(obligation)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(
            "Concurrent review rejected for connection %s by explorer %s",
            data.connection_id, explorer_id,
        )
        raise HTTPException(status_code=409, detail=ALREADY_REVIEWED)

    await db.refresh(review)
    logger.info(
        "Explorer %s reviewed AS %s (connection %s, rating %d)",
        explorer_id, review.as_id, review.connection_id, review.rating,
    )
    return review


async def get_reviews_by_explorer(
    db: AsyncSession, explorer_id: uuid.UUID, limit: int = 20, offset: int = 0
) -> list[ExplorerReview]:
    """Reviews the Explorer has written, newest first."""
    result = await db.execute(
        select(ExplorerReview)
        .where(ExplorerReview.explorer_id == explorer_id)
        .order_by(ExplorerReview.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def update_review(
    db: AsyncSession, review_id: uuid.UUID, explorer_id: uuid.UUID, data: ReviewUpdate
) -> ExplorerReview:
    """Edit a review. Only the author may, and only inside the edit window."""
    changes = data.model_dump(exclude_unset=True)
    # Non-nullable columns: null means "leave as is"
    for required in ("rating", "comment", "would_hire_again", "recommend_to_others"):
        if required in changes and changes[required] is None:
            del changes[required]
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    result = await db.execute(
        select(ExplorerReview).where(
            ExplorerReview.review_id == review_id,
            ExplorerReview.explorer_id == explorer_id,
        )
    )
    review = result.scalar_one_or_none()
    window = timedelta(hours=settings.review_edit_window_hours)
    if review is None or as_utc(review.created_at) < utcnow() - window:
        raise HTTPException(
            status_code=404,
            detail=f"Review not found or no longer editable (only within {settings.review_edit_window_hours} hours)",
        )

    for field, value in changes.items():
        setattr(review, field, value)
    await db.commit()
    await db.refresh(review)
    return review


_ORDERINGS = {
    "recent": (ExplorerReview.created_at.desc(),),
    "rating_high": (ExplorerReview.rating.desc(), ExplorerReview.created_at.desc()),
    "rating_low": (ExplorerReview.rating.asc(), ExplorerReview.created_at.desc()),
}


def _avg(value: object) -> float | None:
    if value is None:
        return None
    return round(float(value), 2)


async def get_professional_reviews(
    db: AsyncSession,
    as_id: uuid.UUID,
    limit: int = 10,
    offset: int = 0,
    sort_by: ReviewSort = "recent",
) -> ProfessionalReviewsResponse:
    """Reviews received by an AS plus aggregate statistics."""
    result = await db.execute(
        select(User).where(User.user_id == as_id, User.user_type == UserType.PROVIDER)
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="Professional not found")

    reviews_result = await db.execute(
        select(ExplorerReview)
        .where(ExplorerReview.as_id == as_id)
        .order_by(*_ORDERINGS[sort_by])
        .limit(limit)
        .offset(offset)
    )
    reviews = list(reviews_result.scalars().all())

    stats_result = await db.execute(
        select(
            func.count(ExplorerReview.review_id),
            func.avg(ExplorerReview.rating),
            func.avg(ExplorerReview.service_quality_rating),
            func.avg(ExplorerReview.punctuality_rating),
            func.avg(ExplorerReview.communication_rating),
            func.avg(ExplorerReview.value_for_money_rating),
            func.sum(case((ExplorerReview.would_hire_again.is_(True), 1), else_=0)),
            func.sum(case((ExplorerReview.recommend_to_others.is_(True), 1), else_=0)),
        ).where(ExplorerReview.as_id == as_id)
    )
    total, avg_rating, avg_quality, avg_punct, avg_comm, avg_value, hire_again, recommend = (
        stats_result.one()
    )

    return ProfessionalReviewsResponse(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        statistics=ReviewStatistics(
            total_reviews=total or 0,
            avg_rating=_avg(avg_rating),
            avg_service_quality=_avg(avg_quality),
            avg_punctuality=_avg(avg_punct),
            avg_communication=_avg(avg_comm),
            avg_value_for_money=_avg(avg_value),
            would_hire_again_count=int(hire_again or 0),
            recommend_count=int(recommend or 0),
        ),
        pagination=Pagination(limit=limit, offset=offset, has_more=len(reviews) == limit),
    )
