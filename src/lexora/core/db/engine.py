"""Process-wide async engine."""

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.lexora.core.config import Settings, get_settings

_engine: AsyncEngine | None = None


def engine_options(settings: Settings) -> dict[str, Any]:
    """Pool options for the configured backend.

    SQLite (local runs) gets the driver defaults; PostgreSQL gets a sized,
    pre-pinged pool.
    """
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        return {}
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.database_url, **engine_options(settings))
    return _engine


async def dispose_engine() -> None:
    """Close pooled connections (application shutdown)."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
