"""Reviews received by AS professionals."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.auth.middleware import verify_request
from fixia.auth.rate_limit import check_rate_limit
from fixia.database import get_db
from fixia.schemas.review import ProfessionalReviewsResponse, ReviewSort
from fixia.services import review as review_service

router = APIRouter(prefix="/api/professionals", tags=["professionals"])


@router.get(
    "/{as_id}/reviews",
    response_model=ProfessionalReviewsResponse,
    dependencies=[Depends(check_rate_limit), Depends(verify_request)],
)
async def get_professional_reviews(
    as_id: uuid.UUID,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    sort_by: ReviewSort = Query("recent"),
    db: AsyncSession = Depends(get_db),
) -> ProfessionalReviewsResponse:
    return await review_service.get_professional_reviews(db, as_id, limit, offset, sort_by)
