"""Tests for review-obligation listing and creation."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fixia.config import settings
from fixia.models.connection import ConnectionStatus
from fixia.services.obligation import create_obligation, list_obligations, review_due_date
from tests.conftest import (
    auth_headers,
    completed_days_ago,
    make_connection,
    make_explorer,
    make_obligation,
    make_professional,
)


@pytest.mark.asyncio
async def test_no_obligations_returns_empty_list(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    resp = await client.get("/api/explorer/review-obligations", headers=auth_headers(explorer))
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_obligation_shape(client: AsyncClient, db_session: AsyncSession) -> None:
    explorer = await make_explorer(db_session)
    professional = await make_professional(db_session, profile_image="https://cdn.fixia.app/mg.jpg")
    obligation = await make_obligation(db_session, explorer, professional, completed_days_ago(4))

    resp = await client.get("/api/explorer/review-obligations", headers=auth_headers(explorer))
    assert resp.status_code == 200
    [item] = resp.json()
    assert item["id"] == str(obligation.obligation_id)
    assert item["connection_id"] == str(obligation.connection_id)
    assert item["as_user_id"] == str(professional.user_id)
    assert item["as_name"] == "Martín"
    assert item["as_last_name"] == "Gómez"
    assert item["as_profile_image"] == "https://cdn.fixia.app/mg.jpg"
    assert item["verification_status"] == "verified"
    assert item["service_title"] == "Plomería en Rawson"
    assert Decimal(str(item["final_agreed_price"])) == Decimal("15000.00")
    assert item["is_blocking_new_services"] is True
    assert item["days_remaining"] == 3


@pytest.mark.asyncio
async def test_overdue_obligation_has_negative_days(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    professional = await make_professional(db_session)
    await make_obligation(db_session, explorer, professional, completed_days_ago(9))

    resp = await client.get("/api/explorer/review-obligations", headers=auth_headers(explorer))
    [item] = resp.json()
    assert item["days_remaining"] == -2
    assert item["is_blocking_new_services"] is True


@pytest.mark.asyncio
async def test_obligations_sorted_by_due_date(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    first = await make_professional(db_session, first_name="Ana", last_name="Ruiz")
    second = await make_professional(db_session, first_name="Bruno", last_name="Díaz")
    third = await make_professional(db_session, first_name="Carla", last_name="Sosa")
    await make_obligation(db_session, explorer, first, completed_days_ago(1))
    await make_obligation(db_session, explorer, second, completed_days_ago(6))
    await make_obligation(db_session, explorer, third, completed_days_ago(3))

    resp = await client.get("/api/explorer/review-obligations", headers=auth_headers(explorer))
    names = [item["as_name"] for item in resp.json()]
    assert names == ["Bruno", "Carla", "Ana"]


@pytest.mark.asyncio
async def test_obligations_scoped_to_caller(
    client: AsyncClient, db_session: AsyncSession
) -> None:
    explorer = await make_explorer(db_session)
    other = await make_explorer(db_session)
    professional = await make_professional(db_session)
    await make_obligation(db_session, other, professional)

    resp = await client.get("/api/explorer/review-obligations", headers=auth_headers(explorer))
    assert resp.json() == []


@pytest.mark.asyncio
async def test_list_obligations_uses_given_clock(db_session: AsyncSession) -> None:
    explorer = await make_explorer(db_session)
    professional = await make_professional(db_session)
    completed = datetime(2026, 3, 2, 18, 30, tzinfo=UTC)
    await make_obligation(db_session, explorer, professional, completed)

    [on_time] = await list_obligations(db_session, explorer.user_id, now=datetime(2026, 3, 8, 23, 0, tzinfo=UTC))
    assert on_time.days_remaining == 1
    [due_today] = await list_obligations(db_session, explorer.user_id, now=datetime(2026, 3, 9, 1, 0, tzinfo=UTC))
    assert due_today.days_remaining == 0


@pytest.mark.asyncio
async def test_create_obligation_from_connection(db_session: AsyncSession) -> None:
    explorer = await make_explorer(db_session)
    professional = await make_professional(db_session)
    connection = await make_connection(
        db_session, explorer, professional, status=ConnectionStatus.COMPLETED
    )
    completed = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)

    obligation = create_obligation(connection, completed)
    assert obligation.explorer_id == explorer.user_id
    assert obligation.as_id == professional.user_id
    assert obligation.connection_id == connection.connection_id
    assert obligation.review_due_date == completed + timedelta(days=7)
    assert obligation.is_blocking_new_services is True


def test_due_date_follows_grace_period_setting() -> None:
    settings.review_grace_period_days = 3
    completed = datetime(2026, 5, 1, tzinfo=UTC)
    assert review_due_date(completed) == datetime(2026, 5, 4, tzinfo=UTC)
