import secrets
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from src.lexora.api.middlewares import setup_middlewares
from src.lexora.api.v1.router import api_router
from src.lexora.auth.providers import get_provider_registry
from src.lexora.core.config import get_settings
from src.lexora.core.db import dispose_engine, get_session
from src.lexora.core.exceptions import AuthenticationError, setup_exception_handlers
from src.lexora.core.logging import get_logger, setup_logging
from src.lexora.core.rate_limit import limiter, rate_limit_exceeded_handler
from src.lexora.core.redis import close_redis, redis_status

logger = get_logger(__name__)

# Health check caching
_health_cache: dict[str, Any] | None = None
_health_cache_time: float = 0
HEALTH_CACHE_TTL = 10  # seconds


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}", environment=settings.app_env)

    # Register identity providers up front so misconfiguration shows in startup logs
    get_provider_registry()

    yield

    logger.info("Closing connections...")
    await close_redis()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "auth", "description": "Magic link, OAuth, tokens and sessions"},
    {"name": "organizations", "description": "Organizations, licenses and teams"},
]


async def check_health() -> tuple[dict[str, Any], int]:
    """Probe the database and Redis, caching the result briefly."""
    global _health_cache, _health_cache_time

    now = time.time()
    if _health_cache and (now - _health_cache_time) < HEALTH_CACHE_TTL:
        cached = {**_health_cache, "cached": True}
        return cached, 200 if cached["status"] == "healthy" else 503

    health_status: dict[str, Any] = {
        "status": "healthy",
        "database": "unknown",
        "redis": "not_configured",
        "cached": False,
        "timestamp": now,
    }

    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
        health_status["database"] = "healthy"
    except Exception as e:
        logger.warning("Database health check failed", error=str(e))
        health_status["database"] = "unhealthy"
        health_status["status"] = "unhealthy"

    # Redis is optional; losing it only degrades the service
    health_status["redis"] = await redis_status()
    if health_status["redis"] == "unhealthy" and health_status["status"] == "healthy":
        health_status["status"] = "degraded"

    _health_cache = health_status
    _health_cache_time = now
    return health_status, 200 if health_status["status"] == "healthy" else 503


def reset_health_cache() -> None:
    global _health_cache, _health_cache_time
    _health_cache = None
    _health_cache_time = 0


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Authentication and entitlement API for the Lexora standards catalog",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_openapi else None,
        redoc_url="/redoc" if settings.enable_openapi else None,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    setup_exception_handlers(app)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    setup_middlewares(app, settings)

    app.include_router(api_router)

    instrumentator = Instrumentator().instrument(app)

    # Protect /metrics endpoint if API key is configured
    if settings.metrics_api_key:
        api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

        async def verify_metrics_key(api_key: str | None = Depends(api_key_header)) -> None:
            if (
                api_key is None
                or settings.metrics_api_key is None
                or not secrets.compare_digest(api_key, settings.metrics_api_key)
            ):
                raise AuthenticationError("Invalid or missing metrics API key")

        instrumentator.expose(app, endpoint="/metrics", dependencies=[Depends(verify_metrics_key)])
    else:
        instrumentator.expose(app, endpoint="/metrics")

    @app.get("/health")
    async def health() -> JSONResponse:
        """Health check with dependency validation and caching."""
        content, status_code = await check_health()
        return JSONResponse(content=content, status_code=status_code)

    return app


app = create_app()
