"""Optional shared Redis client.

Used for the magic-link replay window (so it holds across instances) and
probed by the health check. When ``REDIS_URL`` is unset or the server cannot
be reached, ``get_redis()`` returns None and callers use their in-process
path. A failed connection is retried after ``RECONNECT_AFTER_SECONDS``.
"""

import time

from redis.asyncio import ConnectionPool, Redis

from src.lexora.core.config import get_settings
from src.lexora.core.logging import get_logger

logger = get_logger(__name__)

RECONNECT_AFTER_SECONDS = 30.0

_pool: ConnectionPool | None = None
_client: Redis | None = None
_next_attempt_at: float = 0.0


async def _discard() -> None:
    global _pool, _client
    if _client is not None:
        await _client.aclose()
    if _pool is not None:
        await _pool.disconnect()
    _client = None
    _pool = None


async def get_redis() -> Redis | None:
    """Shared client, connected lazily; None when Redis is not usable."""
    global _pool, _client, _next_attempt_at

    if _client is not None:
        return _client

    redis_url = get_settings().redis_url
    if not redis_url:
        return None

    now = time.monotonic()
    if now < _next_attempt_at:
        return None

    _pool = ConnectionPool.from_url(
        redis_url,
        max_connections=get_settings().redis_pool_size,
        decode_responses=True,
    )
    _client = Redis(connection_pool=_pool)
    try:
        await _client.ping()  # type: ignore[misc]
    except Exception as e:
        _next_attempt_at = now + RECONNECT_AFTER_SECONDS
        logger.warning(
            "Redis unavailable, using in-process fallback",
            error=str(e),
            retry_in_seconds=RECONNECT_AFTER_SECONDS,
        )
        await _discard()
        return None

    logger.info("Redis connected")
    return _client


async def redis_status() -> str:
    """Health probe: ``not_configured``, ``healthy`` or ``unhealthy``."""
    if not get_settings().redis_url:
        return "not_configured"
    client = await get_redis()
    if client is None:
        return "unhealthy"
    try:
        await client.ping()  # type: ignore[misc]
    except Exception as e:
        logger.warning("Redis health check failed", error=str(e))
        return "unhealthy"
    return "healthy"


async def close_redis() -> None:
    """Release the pool (application shutdown)."""
    global _next_attempt_at
    if _client is not None:
        logger.info("Closing Redis connection")
    await _discard()
    _next_attempt_at = 0.0


def reset_redis_state() -> None:
    """Forget the client without closing it (tests switch event loops)."""
    global _pool, _client, _next_attempt_at
    _pool = None
    _client = None
    _next_attempt_at = 0.0
