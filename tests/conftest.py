"""Shared test fixtures for BarFlow API tests"""

import os
import tempfile
import uuid
from typing import AsyncGenerator, List
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

# Set test environment before importing the app
os.environ["TESTING"] = "true"
os.environ["DEBUG"] = "true"
os.environ["APP_NAME"] = "BarFlow"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["REDIS_URL"] = "redis://localhost:6379"
os.environ["DATABASE_PATH"] = os.path.join(
    tempfile.gettempdir(), f"test_barflow_{uuid.uuid4().hex[:8]}.json"
)

from tests.factories import create_member, create_user, create_venue  # noqa: E402


class RecordingNotifier:
    """Notification queue stand-in that keeps published events in memory"""

    def __init__(self):
        self.events: List = []

    async def publish(self, event):
        self.events.append(event)

    def of_type(self, event_type) -> list:
        return [e for e in self.events if e.type == event_type]


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db():
    """The database service, emptied before each test"""
    from barflow.services.database_service import db_service

    db_service.db.drop_tables()
    yield db_service
    db_service.db.drop_tables()


@pytest.fixture
def owner(db) -> dict:
    return db.create_user(create_user(name="Olive Owner", email="olive@example.com"))


@pytest.fixture
def second_owner(db) -> dict:
    return db.create_user(create_user(name="Otto Owner", email="otto@example.com"))


@pytest.fixture
def staff_user(db) -> dict:
    return db.create_user(create_user(name="Sam Staff", email="sam@example.com"))


@pytest.fixture
def site_admin(db) -> dict:
    return db.create_user(create_user(name="Ada Admin", email="ada@example.com", admin=True))


@pytest.fixture
def outsider(db) -> dict:
    return db.create_user(create_user(name="Nina Nobody", email="nina@example.com"))


@pytest.fixture
def venue(db, owner, staff_user) -> dict:
    """A venue with one owner and one member"""
    return db.create_venue(create_venue(members=[
        create_member(owner["id"], role="owner"),
        create_member(staff_user["id"], role="member"),
    ]))


@pytest.fixture
def two_owner_venue(db, owner, second_owner) -> dict:
    """A venue with exactly two owners"""
    return db.create_venue(create_venue(members=[
        create_member(owner["id"], role="owner"),
        create_member(second_owner["id"], role="owner"),
    ]))


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def mutator(db, notifier):
    """A membership mutator publishing into the recording notifier"""
    from barflow.services.membership import MembershipMutator
    from barflow.services.venue_service import VenueLocks

    return MembershipMutator(db=db, notifier=notifier, locks=VenueLocks())


@pytest.fixture
def venues(db, notifier):
    from barflow.services.venue_service import VenueLocks, VenueService

    return VenueService(db=db, notifier=notifier, locks=VenueLocks())


# =============================================================================
# Mock Redis Service
# =============================================================================

@pytest.fixture
def mock_redis():
    """Mock Redis service"""
    mock = MagicMock()
    mock.connect = AsyncMock()
    mock.disconnect = AsyncMock()
    mock.enqueue = AsyncMock()
    mock.dequeue = AsyncMock(return_value=None)

    with patch("barflow.services.notification_service.redis_service", mock), \
         patch("barflow.main.redis_service", mock), \
         patch("barflow.worker.redis_service", mock):
        yield mock


# =============================================================================
# Application and Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def app(mock_redis, db):
    """Get the FastAPI application with mocked Redis"""
    from barflow.main import app as fastapi_app
    return fastapi_app


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator:
    """Create async HTTP client for testing"""
    from httpx import AsyncClient, ASGITransport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
