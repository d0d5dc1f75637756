"""Integration test fixtures with an in-memory database."""

from collections.abc import AsyncGenerator
from dataclasses import replace
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from kaamtrack.api.app import create_app
from kaamtrack.api.dependencies import get_app_settings, get_clock, get_db_session
from kaamtrack.config import QRWindowPolicy, Settings, get_settings
from kaamtrack.database import create_engine_for, create_schema, make_session_factory
from kaamtrack.services import FixedClock

from tests.conftest import MORNING, OWNER_ID

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

OWNER_HEADERS = {"X-Owner-ID": str(OWNER_ID)}


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh schema per test."""
    engine = create_engine_for(TEST_DATABASE_URL)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(test_engine)


@pytest.fixture
def api_clock() -> FixedClock:
    return FixedClock(MORNING)


@pytest.fixture
def test_settings() -> Settings:
    return replace(get_settings(), qr_window=QRWindowPolicy(timezone="UTC"))


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    api_clock: FixedClock,
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app()

    async def test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = test_db_session
    app.dependency_overrides[get_clock] = lambda: api_clock
    app.dependency_overrides[get_app_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def created_worker(client: AsyncClient) -> dict[str, Any]:
    """A worker registered through the API."""
    response = await client.post(
        "/api/v1/workers",
        headers=OWNER_HEADERS,
        json={"name": "Ramesh Kumar", "work_type": "construction", "daily_rate": "500"},
    )
    assert response.status_code == 201, response.text
    return response.json()
