from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.lexora.core.exceptions import NotFoundError
from src.lexora.models import Organization
from src.lexora.repositories import TeamRepository, UserRepository
from src.lexora.schemas import CurrentUserProfile


class UserService:
    """Read-side user queries."""

    def __init__(self, user_repo: UserRepository, team_repo: TeamRepository, session: AsyncSession):
        self.user_repo = user_repo
        self.team_repo = team_repo
        self.session = session

    async def get_profile(self, user_id: UUID) -> CurrentUserProfile:
        """The caller's profile with organization name and team memberships."""
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        organization_name = None
        if user.organization_id is not None:
            organization = await self.session.get(Organization, user.organization_id)
            organization_name = organization.name if organization else None

        teams = await self.team_repo.list_for_user(user.id)
        return CurrentUserProfile(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            organization_id=user.organization_id,
            organization_name=organization_name,
            auth_type=user.auth_type,
            last_login=user.last_login,
            team_ids=[team.id for team in teams],
            team_names=[team.name for team in teams],
        )
