"""Repository for User entity."""

from uuid import UUID

from sqlalchemy import update
from sqlmodel import select

from src.lexora.models import User
from src.lexora.models.base import utc_now
from src.lexora.repositories.base import BaseRepository

# Provider name -> column holding that provider's external id
EXTERNAL_ID_COLUMNS = {
    "google": User.google_id,
    "microsoft": User.microsoft_id,
}


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_external_id(self, provider: str, external_id: str) -> User | None:
        """Get user by a provider-specific external id."""
        column = EXTERNAL_ID_COLUMNS.get(provider)
        if column is None:
            raise ValueError(f"Unknown identity provider: {provider}")
        result = await self.session.execute(select(User).where(column == external_id))
        return result.scalar_one_or_none()

    async def touch_last_login(self, user_id: UUID) -> None:
        """Set last_login to now."""
        now = utc_now()
        await self.session.execute(
            update(User)
            .where(User.id == user_id)  # type: ignore[arg-type]
            .values(last_login=now, updated_at=now)
        )

    async def set_organization(self, user_id: UUID, organization_id: UUID) -> None:
        await self.session.execute(
            update(User)
            .where(User.id == user_id)  # type: ignore[arg-type]
            .values(organization_id=organization_id, updated_at=utc_now())
        )
