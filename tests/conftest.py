"""
Postboard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock session (service unit tests, no DB)
    ├── identity / other_identity: authenticated principals
    ├── make_user / make_post: ORM objects for mocked lookups
    ├── temp_public: temporary public root for file tests
    ├── sample_image_bytes: tiny JPEG for upload tests
    ├── database: fresh SQLite schema on the application engine
    └── test_client: HTTPX AsyncClient against the FastAPI app
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before any postboard import: settings, the engine and the file
# service singleton read these at import time
_TEST_ROOT = tempfile.mkdtemp(prefix="postboard_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["PUBLIC_ROOT"] = os.path.join(_TEST_ROOT, "public")
os.environ["LOG_LEVEL"] = "WARNING"

from postboard.models.post import Post  # noqa: E402
from postboard.models.user import DEFAULT_STATUS, User  # noqa: E402
from postboard.schemas.auth import Identity  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_post(mock_db_session, make_post):
            mock_db_session.get.return_value = make_post()
            post = await post_service.get_post(mock_db_session, str(post.id))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.delete = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_user():
    def _make(**overrides) -> User:
        fields = {
            "id": uuid4(),
            "email": "alice@postboard.io",
            "name": "Alice",
            "password": "$2b$04$notarealhashnotarealhashnotarealhashnotarealhashnot",
            "status": DEFAULT_STATUS,
            "post_ids": [],
            "created_at": datetime.now(timezone.utc),
            "updated_at": datetime.now(timezone.utc),
        }
        fields.update(overrides)
        return User(**fields)

    return _make


@pytest.fixture
def make_post(make_user):
    def _make(creator: User = None, **overrides) -> Post:
        creator = creator or make_user()
        fields = {
            "id": uuid4(),
            "title": "First post",
            "content": "Some content here",
            "image_url": "images/first.png",
            "creator_id": creator.id,
            "creator": creator,
            "created_at": datetime.now(timezone.utc),
            "updated_at": datetime.now(timezone.utc),
        }
        fields.update(overrides)
        return Post(**fields)

    return _make


@pytest.fixture
def identity():
    return Identity(user_id=str(uuid4()), email="alice@postboard.io")


@pytest.fixture
def other_identity():
    return Identity(user_id=str(uuid4()), email="mallory@postboard.io")


@pytest.fixture
def temp_public(tmp_path):
    """A fresh public root per test (automatically cleaned up)."""
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    return str(public_dir)


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# Integration Fixtures (SQLite + ASGI app)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """
    Recreates the schema on the application engine for each test.

    The engine is disposed afterwards so no pooled connection outlives the
    test's event loop.
    """
    from postboard.database import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed directly into the app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from postboard.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
