"""Explorer service requests (the marketplace action gated by pending reviews)."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.models.connection import ServiceRequest, ServiceRequestStatus
from fixia.schemas.connection import ServiceRequestCreate

logger = logging.getLogger(__name__)


async def create_service_request(
    db: AsyncSession, explorer_id: uuid.UUID, data: ServiceRequestCreate
) -> ServiceRequest:
    request = ServiceRequest(
        request_id=uuid.uuid4(),
        explorer_id=explorer_id,
        title=data.title,
        description=data.description,
        locality=data.locality,
        budget=data.budget,
        status=ServiceRequestStatus.ACTIVE,
    )
    db.add(request)
    await db.commit()
    await db.refresh(request)
    logger.info("Explorer %s opened service request %s", explorer_id, request.request_id)
    return request


async def list_service_requests(
    db: AsyncSession, explorer_id: uuid.UUID, limit: int = 20, offset: int = 0
) -> list[ServiceRequest]:
    result = await db.execute(
        select(ServiceRequest)
        .where(ServiceRequest.explorer_id == explorer_id)
        .order_by(ServiceRequest.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())
