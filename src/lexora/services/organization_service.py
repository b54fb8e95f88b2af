"""Organization and team management."""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lexora.core.exceptions import NotFoundError, ValidationError, translate_integrity_error
from src.lexora.core.logging import get_logger
from src.lexora.models import Organization, Team
from src.lexora.models.base import utc_now
from src.lexora.repositories import OrganizationRepository, TeamRepository, UserRepository
from src.lexora.schemas import (
    MemberRead,
    OrganizationDetail,
    OrganizationRead,
    TeamRead,
    TeamSummary,
)

logger = get_logger(__name__)


class OrganizationService:
    def __init__(
        self,
        organization_repo: OrganizationRepository,
        team_repo: TeamRepository,
        user_repo: UserRepository,
        session: AsyncSession,
    ):
        self.organization_repo = organization_repo
        self.team_repo = team_repo
        self.user_repo = user_repo
        self.session = session

    async def _commit(self) -> None:
        """Commit, translating constraint violations into validation errors."""
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e) from e
        except Exception:
            await self.session.rollback()
            raise

    async def create_for_user(self, user_id: UUID, name: str) -> OrganizationRead:
        """Create an organization and attach the caller, in one transaction."""
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.organization_id is not None:
            raise ValidationError("User already belongs to an organization")

        organization = Organization(name=name)
        self.organization_repo.add(organization)
        try:
            await self.session.flush()
            await self.user_repo.set_organization(user.id, organization.id)
        except Exception:
            await self.session.rollback()
            raise
        await self._commit()

        logger.info("Organization created", organization_id=str(organization.id))
        return OrganizationRead.model_validate(organization)

    async def _get(self, organization_id: UUID) -> Organization:
        organization = await self.organization_repo.get_by_id(organization_id)
        if organization is None:
            raise NotFoundError("Organization not found")
        return organization

    async def get_detail(self, organization_id: UUID) -> OrganizationDetail:
        organization = await self._get(organization_id)
        license_ = await self.organization_repo.get_latest_license(organization_id)
        current_seats = await self.organization_repo.count_active_members(organization_id)
        teams = await self.team_repo.list_for_organization(organization_id)
        return OrganizationDetail(
            id=organization.id,
            name=organization.name,
            created_at=organization.created_at,
            updated_at=organization.updated_at,
            seats_limit=license_.seats_limit if license_ else None,
            valid_until=license_.valid_until if license_ else None,
            current_seats=current_seats,
            teams=[
                TeamSummary(id=team.id, name=team.name, member_count=count)
                for team, count in teams
            ],
        )

    async def rename(self, organization_id: UUID, name: str) -> OrganizationRead:
        organization = await self._get(organization_id)
        organization.name = name
        organization.updated_at = utc_now()
        await self._commit()
        return OrganizationRead.model_validate(organization)

    async def list_members(self, organization_id: UUID) -> list[MemberRead]:
        members = await self.organization_repo.list_members(organization_id)
        team_names = await self.team_repo.list_team_names_by_user([m.id for m in members])
        return [
            MemberRead(
                id=member.id,
                email=member.email,
                first_name=member.first_name,
                last_name=member.last_name,
                last_login=member.last_login,
                teams=team_names.get(member.id, []),
            )
            for member in members
        ]

    async def _get_team(self, organization_id: UUID, team_id: UUID) -> Team:
        team = await self.team_repo.get_in_organization(team_id, organization_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def get_team(self, organization_id: UUID, team_id: UUID) -> TeamRead:
        return TeamRead.model_validate(await self._get_team(organization_id, team_id))

    async def create_team(self, organization_id: UUID, name: str) -> TeamRead:
        team = Team(organization_id=organization_id, name=name)
        self.team_repo.add(team)
        await self._commit()
        logger.info("Team created", team_id=str(team.id))
        return TeamRead.model_validate(team)

    async def rename_team(self, organization_id: UUID, team_id: UUID, name: str) -> TeamRead:
        team = await self._get_team(organization_id, team_id)
        team.name = name
        team.updated_at = utc_now()
        await self._commit()
        return TeamRead.model_validate(team)

    async def delete_team(self, organization_id: UUID, team_id: UUID) -> None:
        team = await self._get_team(organization_id, team_id)
        await self.team_repo.delete(team)
        await self._commit()
        logger.info("Team deleted", team_id=str(team_id))

    async def replace_team_members(
        self, organization_id: UUID, team_id: UUID, user_ids: list[UUID]
    ) -> None:
        """Replace a team's members with users of the same organization."""
        await self._get_team(organization_id, team_id)
        unique_ids = list(dict.fromkeys(user_ids))
        if unique_ids:
            in_org = await self.team_repo.count_users_in_organization(unique_ids, organization_id)
            if in_org != len(unique_ids):
                raise ValidationError("All team members must belong to the organization")
        try:
            await self.team_repo.replace_members(team_id, unique_ids)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e) from e
        except Exception:
            await self.session.rollback()
            raise
        await self._commit()
        logger.info("Team members replaced", team_id=str(team_id), member_count=len(unique_ids))
