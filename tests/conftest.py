"""Test configuration and fixtures.

Each test gets a fresh database: a throwaway SQLite file (aiosqlite) unless
TEST_DATABASE_URL points somewhere else. Tables come straight from
Base.metadata. Redis is replaced by an AsyncMock whose eval() answers the
rate-limit script.
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fixia.auth.tokens import create_access_token
from fixia.config import settings
from fixia.database import Base, get_db
from fixia.main import app
from fixia.models.connection import ConnectionStatus, ServiceConnection
from fixia.models.review import ReviewObligation
from fixia.models.user import User, UserType, VerificationStatus
from fixia.redis import get_redis
from fixia.services.obligation import create_obligation
from fixia.utils.dates import utcnow


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def database_url(tmp_path: Path) -> str:
    if settings.test_database_url:
        return settings.test_database_url
    return f"sqlite+aiosqlite:///{tmp_path / 'fixia_test.db'}"


@pytest_asyncio.fixture
async def engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting data. Requests use their own sessions."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_settings() -> None:
    """Snapshot settings before each test and restore after to prevent mutation bleed."""
    original = settings.model_dump()
    yield  # type: ignore[misc]
    for key, value in original.items():
        object.__setattr__(settings, key, value)


@pytest.fixture
def redis_stub() -> AsyncMock:
    """Stands in for Redis; every rate-limit check is allowed unless a test says otherwise."""
    stub = AsyncMock()
    stub.eval.return_value = [1, 99, 0]
    return stub


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    redis_stub: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with overridden DB and Redis dependencies."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    async def override_get_redis() -> AsyncGenerator[AsyncMock, None]:
        yield redis_stub

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def make_user(
    db: AsyncSession,
    user_type: UserType = UserType.CUSTOMER,
    first_name: str = "Lucía",
    last_name: str = "Pérez",
    **overrides: object,
) -> User:
    user = User(
        user_id=uuid.uuid4(),
        email=f"{uuid.uuid4().hex[:12]}@example.com",
        first_name=first_name,
        last_name=last_name,
        user_type=user_type,
        verification_status=VerificationStatus.VERIFIED,
        **overrides,
    )
    db.add(user)
    await db.commit()
    return user


async def make_explorer(db: AsyncSession, **overrides: object) -> User:
    return await make_user(db, UserType.CUSTOMER, **overrides)


async def make_professional(
    db: AsyncSession, first_name: str = "Martín", last_name: str = "Gómez", **overrides: object
) -> User:
    return await make_user(db, UserType.PROVIDER, first_name=first_name, last_name=last_name, **overrides)


def auth_headers(user: User, **token_kwargs: object) -> dict[str, str]:
    token = create_access_token(
        user.user_id, user.email, user.user_type.value, **token_kwargs  # type: ignore[arg-type]
    )
    return {"Authorization": f"Bearer {token}"}


async def make_connection(
    db: AsyncSession,
    explorer: User,
    professional: User,
    service_title: str = "Plomería en Rawson",
    final_agreed_price: Decimal | None = Decimal("15000.00"),
    **overrides: object,
) -> ServiceConnection:
    connection = ServiceConnection(
        connection_id=uuid.uuid4(),
        explorer_id=explorer.user_id,
        as_id=professional.user_id,
        service_title=service_title,
        final_agreed_price=final_agreed_price,
        **overrides,
    )
    db.add(connection)
    await db.commit()
    return connection


async def make_obligation(
    db: AsyncSession,
    explorer: User,
    professional: User,
    completed_at: datetime | None = None,
    **connection_kwargs: object,
) -> ReviewObligation:
    """A completed connection plus the obligation completion creates."""
    completed_at = completed_at or utcnow()
    connection = await make_connection(
        db,
        explorer,
        professional,
        status=ConnectionStatus.COMPLETED,
        explorer_confirmed_completion=True,
        as_confirmed_completion=True,
        service_completed_at=completed_at,
        **connection_kwargs,
    )
    obligation = create_obligation(connection, completed_at)
    db.add(obligation)
    await db.commit()
    return obligation


def completed_days_ago(days: float) -> datetime:
    return utcnow() - timedelta(days=days)


def review_payload(connection_id: uuid.UUID | str, /, **overrides: object) -> dict:
    payload = {
        "connection_id": str(connection_id),
        "rating": 5,
        "comment": "Excelente trabajo, muy prolijo",
        "service_quality_rating": 5,
        "punctuality_rating": 4,
        "communication_rating": 5,
        "value_for_money_rating": 4,
        "would_hire_again": True,
        "recommend_to_others": True,
        "review_photos": [],
    }
    payload.update(overrides)
    return payload
