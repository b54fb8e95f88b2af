"""Per-endpoint rate limiting with optional Redis backend.

Uses Redis for distributed limits when REDIS_URL is configured, otherwise
in-memory storage (per-process). Disabled in the testing environment.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from src.lexora.core.config import get_settings
from src.lexora.core.exceptions import ERROR_TYPE_STATUS, ServiceErrorType, error_body
from src.lexora.core.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key from client IP only.

    Never include user-controlled headers here: rotating them would create
    unlimited new buckets.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    """Create rate limiter with the appropriate storage backend."""
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    # slowapi talks to Redis synchronously, so the plain redis:// URI is used
    if settings.redis_url:
        logger.info("Rate limiter using Redis backend")
        return Limiter(key_func=get_rate_limit_key, storage_uri=settings.redis_url)

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Answer a tripped limit with the error envelope (status 429)."""
    logger.warning("Rate limit exceeded", path=request.url.path, limit=str(exc.detail))
    response: Response = JSONResponse(
        status_code=ERROR_TYPE_STATUS[ServiceErrorType.RATE_LIMITED],
        content=error_body(f"Rate limit exceeded: {exc.detail}", ServiceErrorType.RATE_LIMITED),
    )
    # Retry-After and X-RateLimit-* when the limiter has headers enabled
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if view_rate_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_rate_limit)
    return response


# Reads settings at import time; reconfiguration needs a restart
limiter = create_limiter()
