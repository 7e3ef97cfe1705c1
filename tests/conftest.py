"""
Shared pytest fixtures for SessionGrid tests.

This module provides common fixtures including:
- Redis mocks for session repository tests
- In-memory data grid for session manager and API tests
- FastAPI test client wired to the in-memory grid
"""

import fnmatch
import os
import sys
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a call-recording mock Redis client for async operations."""
    redis = AsyncMock()

    # Basic operations
    redis.setex = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.delete = AsyncMock(return_value=1)
    redis.exists = AsyncMock(return_value=0)
    redis.expire = AsyncMock()

    # Set operations
    redis.sadd = AsyncMock()
    redis.srem = AsyncMock()
    redis.smembers = AsyncMock(return_value=set())

    # List operations
    redis.lpush = AsyncMock()
    redis.ltrim = AsyncMock()

    # Pub/sub
    redis.publish = AsyncMock()

    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()

    return redis


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes, and lets
    several session managers share one grid like separate nodes would.
    """
    storage = {}
    sets = {}
    lists = {}

    redis = AsyncMock()

    async def mock_set(key, value, *args, **kwargs):
        storage[key] = value
        return True

    async def mock_setex(key, ttl, value):
        storage[key] = value
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                count += 1
        return count

    async def mock_exists(*keys):
        return sum(1 for k in keys if k in storage)

    async def mock_keys(pattern):
        return [k for k in storage.keys() if fnmatch.fnmatch(k, pattern)]

    async def mock_sadd(key, *members):
        members_set = sets.setdefault(key, set())
        added = len(set(members) - members_set)
        members_set.update(members)
        return added

    async def mock_srem(key, *members):
        members_set = sets.get(key, set())
        removed = len(members_set & set(members))
        members_set.difference_update(members)
        return removed

    async def mock_smembers(key):
        return set(sets.get(key, set()))

    async def mock_lpush(key, *values):
        items = lists.setdefault(key, [])
        for value in values:
            items.insert(0, value)
        return len(items)

    async def mock_ltrim(key, start, end):
        lists[key] = lists.get(key, [])[start:end + 1]
        return True

    redis.set = mock_set
    redis.setex = mock_setex
    redis.get = mock_get
    redis.delete = mock_delete
    redis.exists = mock_exists
    redis.keys = mock_keys
    redis.sadd = mock_sadd
    redis.srem = mock_srem
    redis.smembers = mock_smembers
    redis.lpush = mock_lpush
    redis.ltrim = mock_ltrim
    redis.publish = AsyncMock(return_value=0)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    redis._storage = storage  # Expose for test assertions
    redis._sets = sets
    redis._lists = lists

    return redis


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def client(mock_redis_with_data, monkeypatch):
    """FastAPI test client running the full app against the in-memory grid."""
    from fastapi.testclient import TestClient

    from sessiongrid import main

    async def fake_get_redis_client():
        return mock_redis_with_data

    monkeypatch.setattr(main, "get_redis_client", fake_get_redis_client)

    with TestClient(main.app) as test_client:
        yield test_client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )


@pytest.fixture(autouse=True)
def propagate_app_logs():
    """Let caplog see records from the app logger even after dictConfig ran."""
    import logging

    app_logger = logging.getLogger("sessiongrid")
    previous = app_logger.propagate
    app_logger.propagate = True
    yield
    app_logger.propagate = previous


@pytest.fixture(autouse=True)
def _restore_sessiongrid_logger():
    """Undo logging config leaked by importing sessiongrid.main in another test."""
    import logging

    app_logger = logging.getLogger("sessiongrid")
    saved = (app_logger.level, app_logger.propagate, list(app_logger.handlers))
    yield
    app_logger.setLevel(saved[0])
    app_logger.propagate = saved[1]
    app_logger.handlers[:] = saved[2]
