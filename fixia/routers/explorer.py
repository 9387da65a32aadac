"""Explorer endpoints: review obligations, blocking status, reviews, service requests."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.auth.middleware import AuthenticatedUser, require_explorer
from fixia.auth.rate_limit import check_rate_limit
from fixia.database import get_db
from fixia.schemas.connection import ServiceRequestCreate, ServiceRequestResponse
from fixia.schemas.obligation import BlockingStatusResponse, ReviewObligationResponse
from fixia.schemas.review import ReviewCreate, ReviewResponse, ReviewSubmitResponse, ReviewUpdate
from fixia.services import obligation as obligation_service
from fixia.services import review as review_service
from fixia.services import service_request as service_request_service

router = APIRouter(
    prefix="/api/explorer",
    tags=["explorer"],
    dependencies=[Depends(check_rate_limit)],
)


@router.get("/review-obligations", response_model=list[ReviewObligationResponse])
async def get_review_obligations(
    auth: AuthenticatedUser = Depends(require_explorer),
    db: AsyncSession = Depends(get_db),
) -> list[ReviewObligationResponse]:
    """Pending mandatory reviews, soonest due first."""
    return await obligation_service.list_obligations(db, auth.user_id)


@router.get("/blocking-status", response_model=BlockingStatusResponse)
async def get_blocking_status(
    auth: AuthenticatedUser = Depends(require_explorer),
    db: AsyncSession = Depends(get_db),
) -> BlockingStatusResponse:
    return await obligation_service.get_blocking_status(db, auth.user_id)


@router.post("/reviews", response_model=ReviewSubmitResponse, status_code=201)
async def submit_review(
    data: ReviewCreate,
    auth: AuthenticatedUser = Depends(require_explorer),
    db: AsyncSession = Depends(get_db),
) -> ReviewSubmitResponse:
    """Submit the mandatory review for a completed connection."""
    review = await review_service.submit_review(db, auth.user_id, data)
    return ReviewSubmitResponse(review_id=review.review_id)


@router.get("/reviews", response_model=list[ReviewResponse])
async def get_my_reviews(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    auth: AuthenticatedUser = Depends(require_explorer),
    db: AsyncSession = Depends(get_db),
) -> list[ReviewResponse]:
    reviews = await review_service.get_reviews_by_explorer(db, auth.user_id, limit, offset)
    return [ReviewResponse.model_validate(r) for r in reviews]


@router.put("/reviews/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: uuid.UUID,
    data: ReviewUpdate,
    auth: AuthenticatedUser = Depends(require_explorer),
    db: AsyncSession = Depends(get_db),
) -> ReviewResponse:
    """Edit one of your reviews shortly after submitting it."""
    review = await review_service.update_review(db, review_id, auth.user_id, data)
    return ReviewResponse.model_validate(review)


@router.post("/service-requests", response_model=ServiceRequestResponse, status_code=201)
async def create_service_request(
    data: ServiceRequestCreate,
    auth: AuthenticatedUser = Depends(obligation_service.require_unblocked_explorer),
    db: AsyncSession = Depends(get_db),
) -> ServiceRequestResponse:
    """Open a new service request. Rejected while reviews are pending."""
    request = await service_request_service.create_service_request(db, auth.user_id, data)
    return ServiceRequestResponse.model_validate(request)


@router.get("/service-requests", response_model=list[ServiceRequestResponse])
async def get_my_service_requests(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    auth: AuthenticatedUser = Depends(require_explorer),
    db: AsyncSession = Depends(get_db),
) -> list[ServiceRequestResponse]:
    requests = await service_request_service.list_service_requests(db, auth.user_id, limit, offset)
    return [ServiceRequestResponse.model_validate(r) for r in requests]
