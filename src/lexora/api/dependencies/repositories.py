"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.lexora.api.dependencies.db import DBSession
from src.lexora.repositories import (
    MagicLinkTokenRepository,
    OrganizationRepository,
    RefreshTokenRepository,
    SessionRepository,
    TeamRepository,
    UserRepository,
)


def get_user_repository(session: DBSession) -> UserRepository:
    return UserRepository(session)


def get_token_repository(session: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


def get_magic_link_repository(session: DBSession) -> MagicLinkTokenRepository:
    return MagicLinkTokenRepository(session)


def get_session_repository(session: DBSession) -> SessionRepository:
    return SessionRepository(session)


def get_organization_repository(session: DBSession) -> OrganizationRepository:
    return OrganizationRepository(session)


def get_team_repository(session: DBSession) -> TeamRepository:
    return TeamRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
TokenRepo = Annotated[RefreshTokenRepository, Depends(get_token_repository)]
MagicLinkRepo = Annotated[MagicLinkTokenRepository, Depends(get_magic_link_repository)]
SessionRepo = Annotated[SessionRepository, Depends(get_session_repository)]
OrganizationRepo = Annotated[OrganizationRepository, Depends(get_organization_repository)]
TeamRepo = Annotated[TeamRepository, Depends(get_team_repository)]
