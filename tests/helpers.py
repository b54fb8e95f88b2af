"""Test helper functions for common data creation patterns."""

import secrets
from dataclasses import dataclass, field
from datetime import timedelta
from urllib.parse import parse_qs, urlparse
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlmodel import select

from src.lexora.core.security import create_access_token, hash_token
from src.lexora.models import License, Organization, User
from tests.factories import (
    LicenseFactory,
    MagicLinkTokenFactory,
    OrganizationFactory,
    RefreshTokenFactory,
    TeamFactory,
    TeamMemberFactory,
    UserFactory,
    utc_now,
)


@dataclass
class SentLink:
    to: str
    link: str
    expires_minutes: int

    @property
    def token(self) -> str:
        return parse_qs(urlparse(self.link).query)["token"][0]


@dataclass
class RecordingMailer:
    """Mailer that records links instead of sending them."""

    sent: list[SentLink] = field(default_factory=list)
    fail_with: Exception | None = None

    async def send_magic_link(self, to: str, link: str, expires_minutes: int) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(SentLink(to=to, link=link, expires_minutes=expires_minutes))


def auth_headers(user_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


async def create_user(session: AsyncSession, **user_kwargs) -> User:
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.commit()
    return user


async def create_organization(
    session: AsyncSession,
    seats_limit: int | None = 10,
    license_expired: bool = False,
) -> tuple[Organization, License | None]:
    """Create an organization, optionally with a license.

    Args:
        session: Database session
        seats_limit: Seats on the license; None creates no license
        license_expired: Create the license already expired

    Returns:
        Tuple of (organization, license)
    """
    organization = OrganizationFactory.build()
    session.add(organization)
    await session.flush()

    license_ = None
    if seats_limit is not None:
        factory = LicenseFactory.expired if license_expired else LicenseFactory.build
        license_ = factory(organization_id=organization.id, seats_limit=seats_limit)
        session.add(license_)
    await session.commit()
    return organization, license_


async def create_member(session: AsyncSession, organization: Organization, **user_kwargs) -> User:
    return await create_user(session, organization_id=organization.id, **user_kwargs)


async def create_team(session: AsyncSession, organization: Organization, members=()):
    team = TeamFactory.build(organization_id=organization.id)
    session.add(team)
    await session.flush()
    for member in members:
        session.add(TeamMemberFactory.build(team_id=team.id, user_id=member.id))
    await session.commit()
    return team


async def create_magic_link(session: AsyncSession, user: User, expired: bool = False) -> str:
    """Store a magic link token for the user and return its plaintext."""
    token = secrets.token_urlsafe(32)
    factory = MagicLinkTokenFactory.expired if expired else MagicLinkTokenFactory.build
    session.add(factory(user_id=user.id, token_hash=hash_token(token)))
    await session.commit()
    return token


async def create_refresh_token(session: AsyncSession, user: User, expired: bool = False) -> str:
    token = secrets.token_urlsafe(32)
    if expired:
        row = RefreshTokenFactory.expired(user_id=user.id, token_hash=hash_token(token))
    else:
        row = RefreshTokenFactory.build(
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=utc_now() + timedelta(days=7),
        )
    session.add(row)
    await session.commit()
    return token


async def scalar(engine: AsyncEngine, statement):
    """Run a scalar query in a short-lived session.

    Inspection goes through its own session so no transaction (and no
    SQLite write lock) stays open across API calls.
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        return (await session.execute(statement)).scalar()


async def count_rows(engine: AsyncEngine, model, *criteria) -> int:
    statement = select(func.count()).select_from(model)
    if criteria:
        statement = statement.where(*criteria)
    return int(await scalar(engine, statement) or 0)


async def reload(engine: AsyncEngine, model, *criteria):
    async with AsyncSession(engine, expire_on_commit=False) as session:
        return (await session.execute(select(model).where(*criteria))).scalars().first()
