"""
HomeStock Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Reusable test infrastructure: an in-memory database, a fake image
       service, and an HTTP client bound to the app.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── database: in-memory SQLite (aiosqlite) with all tables created
    ├── db_session: AsyncSession on that database
    ├── users: two owner rows (Alice, Bob)
    ├── mock_image_service: ImageService stand-in with AsyncMock methods
    ├── test_app: FastAPI app wired to the two fixtures above
    ├── test_client: HTTPX AsyncClient for API endpoint testing
    └── sample_image_bytes: minimal JPEG bytes for upload tests

httpx's ASGITransport does not run the lifespan, so the app's collaborators
are placed on `app.state` directly.
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from homestock.config import Settings
from homestock.database import Database
from homestock.models.user import User
from homestock.services.image_service import ImageService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
SAMPLE_IMAGE_URL = "https://res.cloudinary.com/test-cloud/image/upload/v1/homestock/abc123.jpg"


@pytest_asyncio.fixture
async def database():
    """
    In-memory SQLite database with every table created.

    StaticPool keeps a single connection, so all sessions in a test see the
    same in-memory database.
    """
    db = Database(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(database):
    """Two owners; stock items must reference one of them."""
    alice = User(name="Alice", email="alice@example.com")
    bob = User(name="Bob", email="bob@example.com")
    async with database.session_factory() as session:
        session.add_all([alice, bob])
        await session.commit()
    return [alice, bob]


@pytest.fixture
def mock_image_service():
    """
    ImageService stand-in: no uploads happen, calls are recorded.

    upload() returns None for a missing payload and SAMPLE_IMAGE_URL
    otherwise, like the real service. check_size() applies the real
    default limit.
    """
    service = MagicMock(spec=ImageService)

    async def fake_upload(payload):
        return None if payload is None else SAMPLE_IMAGE_URL

    service.upload = AsyncMock(side_effect=fake_upload)
    service.delete = AsyncMock(return_value=None)
    service.health_check = AsyncMock(return_value=True)
    service.check_size = MagicMock(side_effect=ImageService("c", "k", "s").check_size)
    return service


@pytest.fixture
def test_settings():
    return Settings(database_url=TEST_DATABASE_URL, log_level="WARNING")


@pytest.fixture
def test_app(test_settings, database, mock_image_service):
    from homestock.main import create_app

    app = create_app(test_settings)
    app.state.database = database
    app.state.image_service = mock_image_service
    return app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/v1/stock")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def apple_fields(users):
    return {
        "name": "Apples",
        "category": "Fruits",
        "quantity": "5",
        "unit": "kg",
        "user": users[0].id,
    }
