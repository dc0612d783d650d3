"""
Alpaca API — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── mock_collection: AsyncMock-backed stand-in for a pymongo AsyncCollection
    ├── mock_db: database mock whose every collection is `mock_collection`
    ├── sample_project_doc: a stored `projects` document (with `_id`)
    └── test_client: HTTPX AsyncClient against the app, database overridden
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any alpaca import so the settings singleton picks them up
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["MONGODB_DATABASE"] = "alpaca_test"
os.environ["API_PREFIX"] = "api"
os.environ["CORS_ORIGINS"] = "*"
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

def _cursor(docs):
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=list(docs))
    return cursor


@pytest.fixture
def make_cursor():
    """Factory for find() cursors whose to_list() resolves to the given documents."""
    return _cursor


@pytest.fixture
def mock_collection():
    """
    Provides a mock collection.

    Usage:
        mock_collection.find_one.return_value = sample_project_doc
        mock_collection.find.return_value = make_cursor([doc1, doc2])
    """
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.find = MagicMock(return_value=_cursor([]))
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.replace_one = AsyncMock(return_value=MagicMock(matched_count=1, modified_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    return collection


@pytest.fixture
def mock_db(mock_collection):
    """Provides a mock database; db["anything"] returns `mock_collection`."""
    db = MagicMock()
    db.__getitem__.return_value = mock_collection
    return db


@pytest.fixture
def sample_project_doc():
    """A `projects` document as the driver returns it."""
    return {
        "_id": ObjectId("65a1f0c2e4b0a1b2c3d4e5f6"),
        "name": "Alpaca",
        "category": "web",
        "description": "Project tracker backend",
    }


@pytest_asyncio.fixture
async def test_client(mock_db):
    """
    Provides an async HTTP test client for endpoint testing.

    Requests are routed straight into the app with ASGITransport; the
    `get_database` dependency is overridden with `mock_db`.

    Usage:
        async def test_version(test_client):
            response = await test_client.get("/api/version")
            assert response.status_code == 200
    """
    from alpaca.database import get_database
    from alpaca.main import app

    app.dependency_overrides[get_database] = lambda: mock_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
