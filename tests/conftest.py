"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os
import tempfile

# Settings are read at import time (rate limiter, app instance); configure first
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'lexora-test.db')}",
)
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-with-at-least-32-chars")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret-key-at-least-32-chars")
os.environ.setdefault("API_BASE_URL", "http://test")
os.environ.pop("REDIS_URL", None)
os.environ.pop("RESEND_API_KEY", None)

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis

from src.lexora.core import cache
from src.lexora.core import redis as redis_core
from src.lexora.core.config import get_settings

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_replay_cache() -> None:
    """Each test starts with an empty in-process replay cache."""
    cache.reset_local_replay_cache()
    yield
    cache.reset_local_replay_cache()


# --- Redis Test Fixtures (shared) ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """Provides a fakeredis client for testing."""
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patches get_redis() to return fakeredis client.

    Patches both src.lexora.core.redis and src.lexora.core.cache so the fake
    is used everywhere.
    """
    redis_core.reset_redis_state()

    async def _get_fake_redis() -> Redis:
        return fake_redis

    monkeypatch.setattr("src.lexora.core.redis.get_redis", _get_fake_redis)
    monkeypatch.setattr("src.lexora.core.cache.get_redis", _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()


@pytest.fixture
async def mock_redis_unavailable(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Patches get_redis() to return None (simulates Redis unavailable)."""
    redis_core.reset_redis_state()

    async def _get_none() -> None:
        return None

    monkeypatch.setattr("src.lexora.core.redis.get_redis", _get_none)
    monkeypatch.setattr("src.lexora.core.cache.get_redis", _get_none)
    yield
    redis_core.reset_redis_state()
