"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.lexora.api.dependencies.db import DBSession
from src.lexora.api.dependencies.repositories import (
    MagicLinkRepo,
    OrganizationRepo,
    SessionRepo,
    TeamRepo,
    TokenRepo,
    UserRepo,
)
from src.lexora.auth.providers import ProviderRegistry, get_provider_registry
from src.lexora.core.notifications import Mailer, get_mailer
from src.lexora.services import (
    AuthorizationService,
    IdentityService,
    MagicLinkService,
    OrganizationService,
    SessionService,
    TokenService,
    UserService,
)


def get_token_service(
    token_repo: TokenRepo, user_repo: UserRepo, session: DBSession
) -> TokenService:
    return TokenService(token_repo, user_repo, session)


def get_session_service(
    session_repo: SessionRepo, user_repo: UserRepo, session: DBSession
) -> SessionService:
    return SessionService(session_repo, user_repo, session)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]
ProviderRegistryDep = Annotated[ProviderRegistry, Depends(get_provider_registry)]


def get_magic_link_service(
    user_repo: UserRepo,
    magic_link_repo: MagicLinkRepo,
    token_service: TokenServiceDep,
    session_service: SessionServiceDep,
    mailer: MailerDep,
    session: DBSession,
) -> MagicLinkService:
    """Get magic link service with the configured mailer."""
    return MagicLinkService(
        user_repo,
        magic_link_repo,
        token_service,
        session_service,
        mailer,
        session,
    )


def get_identity_service(user_repo: UserRepo, session: DBSession) -> IdentityService:
    return IdentityService(user_repo, session)


def get_user_service(user_repo: UserRepo, team_repo: TeamRepo, session: DBSession) -> UserService:
    return UserService(user_repo, team_repo, session)


def get_authorization_service(
    user_repo: UserRepo, organization_repo: OrganizationRepo, team_repo: TeamRepo
) -> AuthorizationService:
    return AuthorizationService(user_repo, organization_repo, team_repo)


def get_organization_service(
    organization_repo: OrganizationRepo,
    team_repo: TeamRepo,
    user_repo: UserRepo,
    session: DBSession,
) -> OrganizationService:
    return OrganizationService(organization_repo, team_repo, user_repo, session)


MagicLinkServiceDep = Annotated[MagicLinkService, Depends(get_magic_link_service)]
IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AuthorizationServiceDep = Annotated[AuthorizationService, Depends(get_authorization_service)]
OrganizationServiceDep = Annotated[OrganizationService, Depends(get_organization_service)]
