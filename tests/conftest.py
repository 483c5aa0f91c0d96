"""Pytest configuration and fixtures."""
import os

# Settings are read at import time; give tests something to start with.
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret-key")

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from app.config import settings
from app.database import ensure_indexes
from app.main import app


@pytest_asyncio.fixture
async def app_client():
    """
    Create a test client with a clean test database.

    This fixture:
    - Skips the test when MongoDB can't be reached
    - Points the app at a throwaway database with indexes in place
    - Yields an async HTTP client for testing
    - Drops the test database afterwards
    """
    test_client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=2000)
    try:
        await test_client.admin.command("ping")
    except PyMongoError:
        test_client.close()
        pytest.skip("MongoDB is not available")

    test_db_name = f"{settings.mongodb_db_name}_test"
    test_db = test_client[test_db_name]
    await ensure_indexes(test_db)

    # Override the database dependency
    from app.database import database
    original_db = database.db
    database.db = test_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    # Cleanup: drop test database
    await test_client.drop_database(test_db_name)

    # Restore original database
    database.db = original_db
    app.dependency_overrides.clear()
    test_client.close()


@pytest_asyncio.fixture
async def auth_headers(app_client):
    """Register and log in a fresh user, returning bearer headers."""
    username = f"test_user_{uuid.uuid4().hex[:8]}"
    await app_client.post(
        "/auth/register",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "password": "Password123!",
            "name": "Test User",
        },
    )
    response = await app_client.post(
        "/auth/login",
        json={"username": username, "password": "Password123!"},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
