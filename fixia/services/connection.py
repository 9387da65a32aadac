"""Mutual completion confirmation for Explorer-AS connections."""

import logging
import uuid

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.models.connection import CONFIRMABLE_STATUSES, ConnectionStatus, ServiceConnection
from fixia.services.obligation import create_obligation
from fixia.utils.dates import utcnow

logger = logging.getLogger(__name__)


async def get_connection(db: AsyncSession, connection_id: uuid.UUID) -> ServiceConnection:
    result = await db.execute(
        select(ServiceConnection).where(ServiceConnection.connection_id == connection_id)
    )
    connection = result.scalar_one_or_none()
    if connection is None:
        raise HTTPException(status_code=404, detail="Connection not found")
    return connection


async def confirm_completion(
    db: AsyncSession, connection_id: uuid.UUID, user_id: uuid.UUID
) -> ServiceConnection:
    """Record one party's confirmation that the service is finished.

    The second confirmation completes the connection and creates the
    Explorer's review obligation in the same commit.
    """
    connection = await get_connection(db, connection_id)

    if user_id == connection.explorer_id:
        if connection.explorer_confirmed_completion:
            raise HTTPException(status_code=409, detail="You already confirmed completion of this service")
        is_explorer = True
    elif user_id == connection.as_id:
        if connection.as_confirmed_completion:
            raise HTTPException(status_code=409, detail="You already confirmed completion of this service")
        is_explorer = False
    else:
        raise HTTPException(status_code=403, detail="Not a party to this connection")

    if connection.status not in CONFIRMABLE_STATUSES:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot confirm completion in status {connection.status.value}",
        )

    if is_explorer:
        connection.explorer_confirmed_completion = True
    else:
        connection.as_confirmed_completion = True

    if connection.explorer_confirmed_completion and connection.as_confirmed_completion:
        completed_at = utcnow()
        connection.status = ConnectionStatus.COMPLETED
        connection.service_completed_at = completed_at
        db.add(create_obligation(connection, completed_at))
        logger.info(
            "Connection %s completed; explorer %s owes a review of AS %s",
            connection.connection_id, connection.explorer_id, connection.as_id,
        )

    await db.commit()
    await db.refresh(connection)
    return connection
