"""Authorization dependency chain.

Order matters: ``verify_token`` (or ``verify_session``) establishes the user,
``verify_organization_member`` resolves the organization, ``verify_license``
enforces the license and seats, ``verify_team_member`` checks the team named
in the path or body. Each step stores what it resolved on ``request.state``.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, Request

from src.lexora.api.dependencies.services import AuthorizationServiceDep, SessionServiceDep
from src.lexora.core.config import get_settings
from src.lexora.core.exceptions import AuthenticationError, ValidationError
from src.lexora.core.logging import bind_organization_context, bind_user_context
from src.lexora.core.security import decode_token
from src.lexora.core.security.crypto import ACCESS_TOKEN_TYPE
from src.lexora.models import License


def extract_bearer_token(authorization: str | None, x_access_token: str | None) -> str | None:
    """Pick the credential from ``x-access-token`` or ``Authorization``.

    The ``Bearer `` prefix is optional on either header.
    """
    raw = x_access_token or authorization
    if not raw:
        return None
    raw = raw.strip()
    if raw[:7].lower() == "bearer ":
        raw = raw[7:].strip()
    return raw or None


async def verify_token(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    x_access_token: Annotated[str | None, Header()] = None,
) -> UUID:
    """Authenticate the request from its access token and return the user id."""
    token = extract_bearer_token(authorization, x_access_token)
    if token is None:
        raise AuthenticationError("No token provided")

    payload = decode_token(token)
    if payload is None or payload.get("type") != ACCESS_TOKEN_TYPE:
        raise AuthenticationError("Unauthorized")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError as e:
        raise AuthenticationError("Unauthorized") from e

    request.state.user_id = user_id
    bind_user_context(user_id)
    return user_id


async def verify_session(request: Request, session_service: SessionServiceDep) -> UUID:
    """Authenticate the request from its session cookie and return the user id."""
    session_id = request.cookies.get(get_settings().session_cookie_name)
    user = await session_service.resolve(session_id)
    if user is None:
        raise AuthenticationError("No valid session found")

    request.state.user_id = user.id
    bind_user_context(user.id, user.email)
    return user.id


CurrentUserId = Annotated[UUID, Depends(verify_token)]
SessionUserId = Annotated[UUID, Depends(verify_session)]


async def verify_organization_member(
    request: Request,
    user_id: CurrentUserId,
    authorization_service: AuthorizationServiceDep,
) -> UUID:
    organization_id = await authorization_service.require_organization(user_id)
    request.state.organization_id = organization_id
    bind_organization_context(organization_id)
    return organization_id


OrganizationId = Annotated[UUID, Depends(verify_organization_member)]


async def verify_license(
    request: Request,
    organization_id: OrganizationId,
    authorization_service: AuthorizationServiceDep,
) -> License:
    license_ = await authorization_service.require_license(organization_id)
    request.state.license = license_
    return license_


ValidLicense = Annotated[License, Depends(verify_license)]


async def _requested_team_id(request: Request) -> UUID:
    """Team id from the ``team_id`` path parameter, else ``teamId`` in a JSON body."""
    raw = request.path_params.get("team_id")
    if raw is None and request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            raise ValidationError("Team ID is required") from e
        if isinstance(body, dict):
            raw = body.get("teamId", body.get("team_id"))
    if not raw:
        raise ValidationError("Team ID is required")
    try:
        return UUID(str(raw))
    except ValueError as e:
        raise ValidationError("Team ID is not a valid id") from e


async def verify_team_member(
    request: Request,
    user_id: CurrentUserId,
    _license: ValidLicense,
    authorization_service: AuthorizationServiceDep,
) -> UUID:
    """Require the caller to belong to the team named in the path or body."""
    team_id = await _requested_team_id(request)
    await authorization_service.require_team_member(team_id, user_id)
    return team_id


TeamMembership = Annotated[UUID, Depends(verify_team_member)]
