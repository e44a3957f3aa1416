import sys
import os
import itertools
from datetime import datetime, timedelta, timezone

import pytest

# Add the backend directory to the Python path
# This is necessary for pytest to find the 'main' module and other packages
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# Tests decide per case whether mock data is served
os.environ["USE_MOCK_DATA"] = "false"

import httpx
from httpx import AsyncClient, ASGITransport

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.constants import ReviewSource
from core.database import get_db, Base
from core.dependencies import get_google_places_client, get_hostaway_client, get_place_id_registry
from schemas.review import ReviewCreate, ReviewCategoryCreate
from services.google_places import GooglePlacesClient, PlaceIdRegistry
from services.hostaway import HostawayClient
from services.review import ReviewService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
BASE_SUBMITTED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def async_engine():
    """In-memory SQLite engine with the schema created, one per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


def _offline_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"status": "unavailable"})


@pytest.fixture
async def offline_http():
    """HTTP client whose every request fails with 503."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(_offline_handler)) as client:
        yield client


@pytest.fixture
def place_id_registry():
    return PlaceIdRegistry()


@pytest.fixture
def hostaway_client(offline_http):
    """Unconfigured Hostaway client: real mode always fails."""
    return HostawayClient(offline_http, account_id="", api_key="")


@pytest.fixture
def google_client(offline_http, place_id_registry):
    """Unconfigured Google client: real mode always fails."""
    return GooglePlacesClient(offline_http, api_key="", registry=place_id_registry)


@pytest.fixture
async def async_client(session_factory, hostaway_client, google_client, place_id_registry):
    """API client running the app in-process against the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_hostaway_client] = lambda: hostaway_client
    app.dependency_overrides[get_google_places_client] = lambda: google_client
    app.dependency_overrides[get_place_id_registry] = lambda: place_id_registry

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


_sequence = itertools.count()


def make_review_data(**overrides) -> ReviewCreate:
    """A valid ReviewCreate with a unique natural key unless overridden."""
    n = next(_sequence)
    data = {
        "source": ReviewSource.HOSTAWAY,
        "rating": 8.0,
        "public_review": f"Review number {n}",
        "submitted_at": BASE_SUBMITTED_AT + timedelta(hours=n),
        "guest_name": f"Guest {n}",
        "property_id": "test-property",
        "property_name": "Test Property",
        "categories": [],
    }
    data.update(overrides)
    data["categories"] = [
        c if isinstance(c, ReviewCategoryCreate) else ReviewCategoryCreate(**c)
        for c in data["categories"]
    ]
    return ReviewCreate(**data)


@pytest.fixture
def review_factory(session_factory):
    """Store a review and return the persisted row."""

    async def _create(**overrides):
        async with session_factory() as session:
            review, _ = await ReviewService(session).upsert_review(make_review_data(**overrides))
            return review

    return _create


@pytest.fixture
def review_data():
    """Builder for unsaved ReviewCreate payloads."""
    return make_review_data
