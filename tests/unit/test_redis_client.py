"""Tests for the optional Redis client (src/lexora/core/redis.py)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.lexora.core import redis as redis_core

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _reset_client():
    redis_core.reset_redis_state()
    yield
    redis_core.reset_redis_state()


def settings_with(redis_url: str | None) -> MagicMock:
    settings = MagicMock()
    settings.redis_url = redis_url
    settings.redis_pool_size = 2
    return settings


async def test_not_configured():
    with patch("src.lexora.core.redis.get_settings", return_value=settings_with(None)):
        assert await redis_core.get_redis() is None
        assert await redis_core.redis_status() == "not_configured"


async def test_unreachable_server_waits_before_retrying():
    broken = AsyncMock()
    broken.ping.side_effect = ConnectionError("refused")
    redis_cls = MagicMock(return_value=broken)

    with (
        patch(
            "src.lexora.core.redis.get_settings",
            return_value=settings_with("redis://localhost:6390/0"),
        ),
        patch("src.lexora.core.redis.Redis", redis_cls),
    ):
        assert await redis_core.get_redis() is None
        assert await redis_core.get_redis() is None
        assert await redis_core.redis_status() == "unhealthy"

    # One connection attempt; the rest fell inside the retry window
    assert redis_cls.call_count == 1


async def test_connected_client_is_reused():
    client = AsyncMock()
    redis_cls = MagicMock(return_value=client)

    with (
        patch(
            "src.lexora.core.redis.get_settings",
            return_value=settings_with("redis://localhost:6379/0"),
        ),
        patch("src.lexora.core.redis.Redis", redis_cls),
    ):
        first = await redis_core.get_redis()
        second = await redis_core.get_redis()
        status = await redis_core.redis_status()

    assert first is client
    assert second is client
    assert status == "healthy"
    assert redis_cls.call_count == 1
