from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from src.lexora.schemas.common import CamelModel


class MagicLinkRequest(CamelModel):
    email: EmailStr


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1, max_length=255)


class LogoutRequest(CamelModel):
    refresh_token: str | None = Field(default=None, max_length=255)


class UserIdentity(CamelModel):
    """Minimal identity returned with a token pair."""

    id: UUID
    email: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class MagicLinkLogin(TokenPair):
    """Result of a magic-link redemption."""

    user: UserIdentity


class AccessTokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"


class CurrentUserProfile(CamelModel):
    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    organization_id: UUID | None = None
    organization_name: str | None = None
    auth_type: str
    last_login: datetime | None = None
    team_ids: list[UUID] = []
    team_names: list[str] = []


class MagicLinkRedemption(CamelModel):
    """What a redemption produced: the login payload and the session it opened."""

    login: MagicLinkLogin
    session_id: str
