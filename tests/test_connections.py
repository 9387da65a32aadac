"""Tests for mutual completion confirmation."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.models.connection import ConnectionStatus
from fixia.models.review import ReviewObligation
from tests.conftest import auth_headers, make_connection, make_explorer, make_professional


def _confirm_url(connection) -> str:
    return f"/api/connections/{connection.connection_id}/confirm-completion"


async def _obligations(db: AsyncSession, connection) -> list[ReviewObligation]:
    result = await db.execute(
        select(ReviewObligation).where(ReviewObligation.connection_id == connection.connection_id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_single_confirmation_keeps_connection_open(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    professional = await make_professional(db_session)
    connection = await make_connection(db_session, explorer, professional)

    resp = await client.post(_confirm_url(connection), headers=auth_headers(professional))
    assert resp.status_code == 200
    body = resp.json()
    assert body["as_confirmed_completion"] is True
    assert body["explorer_confirmed_completion"] is False
    assert body["status"] == "active"
    assert body["both_confirmed"] is False
    assert await _obligations(db_session, connection) == []


@pytest.mark.asyncio
async def test_both_confirmations_create_obligation(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    professional = await make_professional(db_session)
    connection = await make_connection(
        db_session, explorer, professional, status=ConnectionStatus.SERVICE_IN_PROGRESS
    )

    await client.post(_confirm_url(connection), headers=auth_headers(explorer))
    resp = await client.post(_confirm_url(connection), headers=auth_headers(professional))
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "completed"
    assert body["both_confirmed"] is True
    assert body["service_completed_at"] is not None

    [obligation] = await _obligations(db_session, connection)
    assert obligation.explorer_id == explorer.user_id
    assert obligation.as_id == professional.user_id
    assert obligation.is_blocking_new_services is True

    listed = await client.get("/api/explorer/review-obligations", headers=auth_headers(explorer))
    [item] = listed.json()
    assert item["connection_id"] == str(connection.connection_id)
    assert item["days_remaining"] == 7


@pytest.mark.asyncio
async def test_repeat_confirmation_conflicts(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    connection = await make_connection(db_session, explorer, await make_professional(db_session))

    headers = auth_headers(explorer)
    assert (await client.post(_confirm_url(connection), headers=headers)).status_code == 200
    resp = await client.post(_confirm_url(connection), headers=headers)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_outsider_cannot_confirm(client: AsyncClient, db_session: AsyncSession) -> None:
    explorer = await make_explorer(db_session)
    connection = await make_connection(db_session, explorer, await make_professional(db_session))
    outsider = await make_professional(db_session, first_name="Otro")

    resp = await client.post(_confirm_url(connection), headers=auth_headers(outsider))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_cancelled_connection_cannot_complete(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    connection = await make_connection(
        db_session, explorer, await make_professional(db_session), status=ConnectionStatus.CANCELLED
    )

    resp = await client.post(_confirm_url(connection), headers=auth_headers(explorer))
    assert resp.status_code == 409
    assert await _obligations(db_session, connection) == []


@pytest.mark.asyncio
async def test_unknown_connection(client: AsyncClient, db_session: AsyncSession) -> None:
    explorer = await make_explorer(db_session)
    resp = await client.post(
        "/api/connections/00000000-0000-0000-0000-000000000000/confirm-completion",
        headers=auth_headers(explorer),
    )
    assert resp.status_code == 404
