"""Repository for Organization and License entities."""

from uuid import UUID

from sqlalchemy import func
from sqlmodel import select

from src.lexora.models import License, Organization, User
from src.lexora.models.base import utc_now
from src.lexora.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    model = Organization

    async def get_current_license(self, organization_id: UUID) -> License | None:
        """Get the unexpired license with the latest valid_until, if any."""
        result = await self.session.execute(
            select(License)
            .where(
                License.organization_id == organization_id,
                License.valid_until > utc_now(),
            )
            .order_by(License.valid_until.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalars().first()

    async def get_latest_license(self, organization_id: UUID) -> License | None:
        """Get the most recent license regardless of expiry (for display)."""
        result = await self.session.execute(
            select(License)
            .where(License.organization_id == organization_id)
            .order_by(License.valid_until.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalars().first()

    async def count_active_members(self, organization_id: UUID) -> int:
        """Count active users attached to the organization (seats in use)."""
        result = await self.session.execute(
            select(func.count())
            .select_from(User)
            .where(
                User.organization_id == organization_id,
                User.is_active == True,  # noqa: E712
            )
        )
        return int(result.scalar_one())

    async def list_members(self, organization_id: UUID) -> list[User]:
        result = await self.session.execute(
            select(User)
            .where(User.organization_id == organization_id)
            .order_by(User.email)  # type: ignore[arg-type]
        )
        return list(result.scalars().all())
