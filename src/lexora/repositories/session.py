"""Repository for server-side sessions."""

from sqlalchemy import delete
from sqlmodel import select

from src.lexora.models import UserSession
from src.lexora.models.base import utc_now
from src.lexora.repositories.base import BaseRepository


class SessionRepository(BaseRepository[UserSession]):
    model = UserSession

    async def get_valid_by_hash(self, session_hash: str) -> UserSession | None:
        """Get an unexpired session by the hash of its client-held id."""
        result = await self.session.execute(
            select(UserSession).where(
                UserSession.session_hash == session_hash,
                UserSession.expires_at > utc_now(),
            )
        )
        return result.scalar_one_or_none()

    async def delete_by_hash(self, session_hash: str) -> int:
        result = await self.session.execute(
            delete(UserSession).where(UserSession.session_hash == session_hash)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
