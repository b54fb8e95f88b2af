"""FastAPI dependency injection definitions."""

from src.lexora.api.dependencies.auth import (
    CurrentUserId,
    OrganizationId,
    SessionUserId,
    TeamMembership,
    ValidLicense,
    extract_bearer_token,
    verify_license,
    verify_organization_member,
    verify_session,
    verify_team_member,
    verify_token,
)
from src.lexora.api.dependencies.db import DBSession, get_db_session
from src.lexora.api.dependencies.services import (
    AuthorizationServiceDep,
    IdentityServiceDep,
    MagicLinkServiceDep,
    OrganizationServiceDep,
    ProviderRegistryDep,
    SessionServiceDep,
    TokenServiceDep,
    UserServiceDep,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Authorization chain
    "CurrentUserId",
    "OrganizationId",
    "SessionUserId",
    "TeamMembership",
    "ValidLicense",
    "extract_bearer_token",
    "verify_license",
    "verify_organization_member",
    "verify_session",
    "verify_team_member",
    "verify_token",
    # Services
    "AuthorizationServiceDep",
    "IdentityServiceDep",
    "MagicLinkServiceDep",
    "OrganizationServiceDep",
    "ProviderRegistryDep",
    "SessionServiceDep",
    "TokenServiceDep",
    "UserServiceDep",
]
