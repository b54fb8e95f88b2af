"""Application middlewares."""

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from src.lexora.core.config import Settings
from src.lexora.core.security import SecurityHeadersMiddleware
from src.lexora.core.security.headers import build_content_security_policy

from .logging_context import logging_context_middleware

__all__ = [
    "logging_context_middleware",
    "setup_middlewares",
]

# Cookie holding the OAuth handshake state (state, nonce, PKCE verifier)
OAUTH_STATE_COOKIE = "oauth_state"


def setup_middlewares(app: FastAPI, settings: Settings) -> None:
    """Configure all application middlewares.

    Starlette runs the last added middleware first, so the logging context
    is added first and the correlation id last.
    """

    @app.middleware("http")
    async def _logging_context(request, call_next):  # type: ignore[no-untyped-def]
        return await logging_context_middleware(request, call_next)

    # Short-lived signed cookie; only the OAuth redirects read it. Microsoft
    # returns with a cross-site form POST, which only carries SameSite=None
    # cookies, and browsers require Secure for those (localhost included).
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=OAUTH_STATE_COOKIE,
        max_age=600,
        same_site="none",
        https_only=True,
    )

    if not settings.enable_openapi and settings.csp_production:
        csp = settings.csp_production
    else:
        csp = build_content_security_policy(settings.app_url, allow_docs_assets=True)
    app.add_middleware(
        SecurityHeadersMiddleware,
        content_security_policy=csp,
        strict_transport_security=(
            "max-age=31536000; includeSubDomains" if settings.is_production else None
        ),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Access-Token", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # Generates/propagates X-Request-ID
    app.add_middleware(CorrelationIdMiddleware)
