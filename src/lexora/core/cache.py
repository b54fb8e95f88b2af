"""Replay cache for magic-link redemptions.

A redeemed magic link is deleted from the store, so a second hit on the same
link (link-preview crawlers, double navigation) would otherwise fail. The
redemption payload is kept for a short trailing window and served again.

Redis is used when available so the window holds across instances; otherwise
a per-process map bounded by capacity and per-entry expiry is used. The store
delete stays the source of truth for single use.
"""

import asyncio
import json
import time
from collections import OrderedDict
from typing import Any

from src.lexora.core.config import get_settings
from src.lexora.core.logging import get_logger
from src.lexora.core.redis import get_redis

logger = get_logger(__name__)

PREFIX_MAGIC_LINK_REPLAY = "magic_link_replay"


class LocalTTLCache:
    """In-process map with per-entry expiry and a capacity bound.

    Expired entries are dropped on access; the oldest entry is evicted when
    the map is full.
    """

    def __init__(self, maxsize: int, ttl: float):
        self.maxsize = maxsize
        self.ttl = ttl
        self._data: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._data)

    def _purge(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= time.monotonic():
                del self._data[key]
                return None
            return value

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            now = time.monotonic()
            self._purge(now)
            self._data.pop(key, None)
            while len(self._data) >= self.maxsize:
                self._data.popitem(last=False)
            self._data[key] = (now + self.ttl, value)

    async def clear(self) -> None:
        async with self._lock:
            self._data.clear()


_local_cache: LocalTTLCache | None = None


def get_local_replay_cache() -> LocalTTLCache:
    """Get the per-process fallback cache, created from settings on first use."""
    global _local_cache
    if _local_cache is None:
        settings = get_settings()
        _local_cache = LocalTTLCache(
            maxsize=settings.magic_link_replay_cache_size,
            ttl=settings.magic_link_replay_window_seconds,
        )
    return _local_cache


def reset_local_replay_cache() -> None:
    """Drop the per-process cache (testing)."""
    global _local_cache
    _local_cache = None


async def remember_redemption(token_hash: str, payload: dict[str, Any]) -> bool:
    """Store a redemption payload for the replay window.

    Best effort: failures are logged and reported as False.
    """
    settings = get_settings()
    try:
        redis = await get_redis()
        if redis:
            await redis.setex(
                f"{PREFIX_MAGIC_LINK_REPLAY}:{token_hash}",
                settings.magic_link_replay_window_seconds,
                json.dumps(payload),
            )
        else:
            await get_local_replay_cache().set(token_hash, payload)
        return True
    except Exception as e:
        logger.warning("Failed to cache magic link redemption", error=str(e))
        return False


async def recall_redemption(token_hash: str) -> dict[str, Any] | None:
    """Return the payload of a redemption made within the replay window."""
    try:
        redis = await get_redis()
        if redis:
            raw = await redis.get(f"{PREFIX_MAGIC_LINK_REPLAY}:{token_hash}")
            return json.loads(raw) if raw is not None else None
        return await get_local_replay_cache().get(token_hash)  # type: ignore[no-any-return]
    except Exception as e:
        logger.warning("Failed to read magic link replay cache", error=str(e))
        return None
