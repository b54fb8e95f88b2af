"""Repository for Team and TeamMember entities."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, func
from sqlmodel import select

from src.lexora.models import Team, TeamMember, User
from src.lexora.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    model = Team

    async def get_in_organization(self, team_id: UUID, organization_id: UUID) -> Team | None:
        """Get a team only if it belongs to the organization."""
        result = await self.session.execute(
            select(Team).where(Team.id == team_id, Team.organization_id == organization_id)
        )
        return result.scalar_one_or_none()

    async def list_for_organization(self, organization_id: UUID) -> list[tuple[Team, int]]:
        """List teams with their member counts."""
        member_count = (
            select(func.count())
            .select_from(TeamMember)
            .where(TeamMember.team_id == Team.id)
            .correlate(Team)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(Team, member_count)
            .where(Team.organization_id == organization_id)
            .order_by(Team.name)  # type: ignore[arg-type]
        )
        return [(team, int(count)) for team, count in result.all()]

    async def is_member(self, team_id: UUID, user_id: UUID) -> bool:
        result = await self.session.execute(
            select(TeamMember).where(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        )
        return result.scalar_one_or_none() is not None

    async def list_for_user(self, user_id: UUID) -> list[Team]:
        result = await self.session.execute(
            select(Team)
            .join(TeamMember, TeamMember.team_id == Team.id)  # type: ignore[arg-type]
            .where(TeamMember.user_id == user_id)
            .order_by(Team.name)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())

    async def list_team_names_by_user(self, user_ids: Sequence[UUID]) -> dict[UUID, list[str]]:
        """Map each user id to the names of the teams they belong to."""
        if not user_ids:
            return {}
        result = await self.session.execute(
            select(TeamMember.user_id, Team.name)
            .join(Team, Team.id == TeamMember.team_id)  # type: ignore[arg-type]
            .where(TeamMember.user_id.in_(user_ids))  # type: ignore[attr-defined]
            .order_by(Team.name)  # type: ignore[arg-type]
        )
        names: dict[UUID, list[str]] = {user_id: [] for user_id in user_ids}
        for user_id, name in result.all():
            names[user_id].append(name)
        return names

    async def count_users_in_organization(
        self, user_ids: Sequence[UUID], organization_id: UUID
    ) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(User)
            .where(
                User.id.in_(user_ids),  # type: ignore[attr-defined]
                User.organization_id == organization_id,
            )
        )
        return int(result.scalar_one())

    async def replace_members(self, team_id: UUID, user_ids: Sequence[UUID]) -> None:
        """Replace the team's members (no commit; caller owns the transaction)."""
        await self.session.execute(
            delete(TeamMember).where(TeamMember.team_id == team_id)  # type: ignore[arg-type]
        )
        for user_id in dict.fromkeys(user_ids):
            self.session.add(TeamMember(team_id=team_id, user_id=user_id))
        await self.session.flush()
