"""Authentication endpoints - magic link, OAuth, token refresh, logout."""

from typing import Annotated

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Query, Response
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request
from starlette.responses import RedirectResponse

from src.lexora.api.dependencies import (
    CurrentUserId,
    IdentityServiceDep,
    MagicLinkServiceDep,
    ProviderRegistryDep,
    SessionServiceDep,
    SessionUserId,
    TokenServiceDep,
    UserServiceDep,
)
from src.lexora.core.config import get_settings
from src.lexora.core.exceptions import AppError, NotFoundError
from src.lexora.core.logging import get_logger
from src.lexora.core.rate_limit import limiter
from src.lexora.schemas import (
    AccessTokenResponse,
    CurrentUserProfile,
    Envelope,
    LogoutRequest,
    MagicLinkLogin,
    MagicLinkRequest,
    MessageEnvelope,
    RefreshRequest,
    success,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def set_session_cookie(response: Response, session_id: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def _frontend_url(path: str) -> str:
    """Resolve a redirect target; relative paths are taken on the frontend."""
    if path.startswith("/"):
        return f"{get_settings().app_url.rstrip('/')}{path}"
    return path


@router.post(
    "/magic-link",
    response_model=MessageEnvelope,
    responses={503: {"description": "Email delivery failed"}},
)
@limiter.limit("5/minute")
async def request_magic_link(
    request: Request, data: MagicLinkRequest, service: MagicLinkServiceDep
) -> MessageEnvelope:
    """Email a single-use sign-in link.

    The response is identical for new and existing addresses.
    """
    message = await service.request_link(str(data.email))
    return MessageEnvelope(message=message)


@router.get(
    "/verify-magic-link",
    response_model=Envelope[MagicLinkLogin],
    responses={
        400: {"description": "Token missing"},
        401: {"description": "Token invalid, already used or expired"},
    },
)
@limiter.limit("20/minute")
async def verify_magic_link(
    request: Request,
    response: Response,
    service: MagicLinkServiceDep,
    token: Annotated[str | None, Query(max_length=255)] = None,
) -> Envelope[MagicLinkLogin]:
    """Redeem a magic link for a token pair and a session cookie.

    Repeating the request within a few minutes returns the same result.
    """
    redemption = await service.verify_link(token)
    set_session_cookie(response, redemption.session_id)
    return success(redemption.login, "Login successful")


def _callback_uri(provider: str) -> str:
    return f"{get_settings().api_base_url.rstrip('/')}/api/auth/{provider}/callback"


async def _start_oauth(
    provider: str, request: Request, registry: ProviderRegistryDep
) -> Response:
    redirect_uri = _callback_uri(provider)
    return await registry.authorize_redirect(provider, request, redirect_uri)  # type: ignore[no-any-return]


async def _finish_oauth(
    provider: str,
    request: Request,
    registry: ProviderRegistryDep,
    identity_service: IdentityServiceDep,
    session_service: SessionServiceDep,
) -> RedirectResponse:
    settings = get_settings()
    if provider not in registry:
        raise NotFoundError(f"Identity provider '{provider}' is not available")

    try:
        profile = await registry.fetch_profile(provider, request)
        user = await identity_service.link(profile)
    except (OAuthError, AppError, IntegrityError) as e:
        logger.warning("External sign-in failed", provider=provider, error=str(e))
        return RedirectResponse(_frontend_url(settings.login_failure_redirect), status_code=302)

    session_id = await session_service.create(user.id)
    logger.info("External sign-in succeeded", provider=provider, user_id=str(user.id))
    response = RedirectResponse(_frontend_url(settings.post_login_redirect), status_code=302)
    set_session_cookie(response, session_id)
    return response


@router.get("/google", response_class=RedirectResponse)
async def google_login(request: Request, registry: ProviderRegistryDep) -> Response:
    return await _start_oauth("google", request, registry)


@router.get("/google/callback", response_class=RedirectResponse)
async def google_callback(
    request: Request,
    registry: ProviderRegistryDep,
    identity_service: IdentityServiceDep,
    session_service: SessionServiceDep,
) -> RedirectResponse:
    return await _finish_oauth("google", request, registry, identity_service, session_service)


@router.get("/microsoft", response_class=RedirectResponse)
async def microsoft_login(request: Request, registry: ProviderRegistryDep) -> Response:
    return await _start_oauth("microsoft", request, registry)


@router.post("/microsoft/callback", response_class=RedirectResponse)
async def microsoft_callback(
    request: Request,
    registry: ProviderRegistryDep,
    identity_service: IdentityServiceDep,
    session_service: SessionServiceDep,
) -> RedirectResponse:
    """Microsoft posts the authorization response as a form."""
    return await _finish_oauth("microsoft", request, registry, identity_service, session_service)


@router.post(
    "/refresh-token",
    response_model=Envelope[AccessTokenResponse],
    responses={401: {"description": "Refresh token unknown or expired"}},
)
@limiter.limit("30/minute")
async def refresh_token(
    request: Request, data: RefreshRequest, service: TokenServiceDep
) -> Envelope[AccessTokenResponse]:
    """Exchange a refresh token for a new access token.

    The refresh token is not rotated and stays valid until it expires.
    """
    return success(await service.refresh(data.refresh_token), "Token refreshed")


@router.post("/logout", response_model=MessageEnvelope)
async def logout(
    request: Request,
    response: Response,
    _user_id: SessionUserId,
    token_service: TokenServiceDep,
    session_service: SessionServiceDep,
    data: LogoutRequest | None = None,
) -> MessageEnvelope:
    """Revoke the given refresh token (if any) and end the session."""
    if data is not None and data.refresh_token:
        await token_service.revoke(data.refresh_token)
    await session_service.destroy(request.cookies.get(get_settings().session_cookie_name))
    clear_session_cookie(response)
    return MessageEnvelope(message="Logged out successfully")


@router.get("/me", response_model=Envelope[CurrentUserProfile])
async def get_current_user(
    user_id: CurrentUserId, service: UserServiceDep
) -> Envelope[CurrentUserProfile]:
    return success(await service.get_profile(user_id))
