"""Connection lifecycle endpoints."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.auth.middleware import AuthenticatedUser, verify_request
from fixia.auth.rate_limit import check_rate_limit
from fixia.database import get_db
from fixia.schemas.connection import ConnectionResponse
from fixia.services import connection as connection_service

router = APIRouter(prefix="/api/connections", tags=["connections"])


@router.post(
    "/{connection_id}/confirm-completion",
    response_model=ConnectionResponse,
    dependencies=[Depends(check_rate_limit)],
)
async def confirm_completion(
    connection_id: uuid.UUID,
    auth: AuthenticatedUser = Depends(verify_request),
    db: AsyncSession = Depends(get_db),
) -> ConnectionResponse:
    """Either party confirms the service finished."""
    connection = await connection_service.confirm_completion(db, connection_id, auth.user_id)
    return ConnectionResponse.model_validate(connection)
