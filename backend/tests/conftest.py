"""
ChurchFinder Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite +
       StaticPool, so all sessions share one connection) and a fake Google
       upstream built on httpx.MockTransport. No network, no PostgreSQL.

Fixture Hierarchy:
    settings ─────────┬──▶ engine ──▶ db_session
                      │          └──▶ app ──▶ test_client
    fake_google ──▶ http_client ─────┘
"""

from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from churchfinder.config import Settings, load_settings
from churchfinder.database import Base, build_session_factory
from churchfinder.main import create_app
from churchfinder.models import Church

TEST_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
CHURCH_IMAGE_URL = "https://images.example.org/st-marys.jpg"


# ══════════════════════════════════════════════════════════════════════════
# Configuration
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings() -> Settings:
    """Explicit settings; the environment and any .env file are ignored."""
    return load_settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        google_maps_api_key="test-maps-key",
        google_search_api_key="test-search-key",
        google_search_engine_id="test-cx",
        log_level="WARNING",
    )


# ══════════════════════════════════════════════════════════════════════════
# Fake Google upstream
# ══════════════════════════════════════════════════════════════════════════

class FakeGoogle:
    """
    Answers the Places photo and Custom Search endpoints.

    Tests replace `photo` / `search` with their own handlers to simulate
    empty results, upstream errors or transport failures. Every request
    seen is kept in `requests`.
    """

    def __init__(self):
        self.requests = []
        self.photo: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, content=TEST_PNG, headers={"content-type": "image/png"}
        )
        self.search: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"items": [{"link": CHURCH_IMAGE_URL}]}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/place/photo"):
            return self.photo(request)
        if request.url.path.endswith("/customsearch/v1"):
            return self.search(request)
        return httpx.Response(404, text="unexpected upstream call")


@pytest.fixture
def fake_google() -> FakeGoogle:
    return FakeGoogle()


@pytest_asyncio.fixture
async def http_client(fake_google) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_google.handler)) as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """A session outside any request, for repository tests and assertions."""
    async with build_session_factory(engine)() as session:
        yield session


@pytest_asyncio.fixture
async def church(db_session) -> Church:
    """A committed church with no service times or reviews."""
    church = Church(
        place_id="ChIJ-st-marys",
        name="St. Mary's",
        vicinity="12 Main St",
        lat="40.7128",
        lng="-74.0060",
        rating="4.6",
    )
    db_session.add(church)
    await db_session.commit()
    return church


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(settings, engine, http_client):
    return create_app(settings, engine=engine, http_client=http_client)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
