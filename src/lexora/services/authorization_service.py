"""Entitlement checks behind the authorization dependency chain.

Each check either returns what downstream handlers need or raises
``ForbiddenError``. Licenses are enforced on every request, not only when
a seat is allocated.
"""

from uuid import UUID

from src.lexora.core.exceptions import AuthenticationError, ForbiddenError
from src.lexora.core.logging import get_logger
from src.lexora.models import License
from src.lexora.repositories import OrganizationRepository, TeamRepository, UserRepository

logger = get_logger(__name__)


class AuthorizationService:
    def __init__(
        self,
        user_repo: UserRepository,
        organization_repo: OrganizationRepository,
        team_repo: TeamRepository,
    ):
        self.user_repo = user_repo
        self.organization_repo = organization_repo
        self.team_repo = team_repo

    async def require_organization(self, user_id: UUID) -> UUID:
        """Return the user's organization id."""
        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Unauthorized")
        if user.organization_id is None:
            raise ForbiddenError("User does not belong to any organization")
        return user.organization_id

    async def require_license(self, organization_id: UUID) -> License:
        """Return the current license, checking seat usage against its limit."""
        license_ = await self.organization_repo.get_current_license(organization_id)
        if license_ is None:
            raise ForbiddenError("No valid license found")

        seats_in_use = await self.organization_repo.count_active_members(organization_id)
        if seats_in_use > license_.seats_limit:
            logger.warning(
                "License seat limit exceeded",
                organization_id=str(organization_id),
                seats_in_use=seats_in_use,
                seats_limit=license_.seats_limit,
            )
            raise ForbiddenError("Organization seats limit exceeded")
        return license_

    async def require_team_member(self, team_id: UUID, user_id: UUID) -> None:
        if not await self.team_repo.is_member(team_id, user_id):
            raise ForbiddenError("User is not a member of this team")
