"""Server-side sessions bound to an HttpOnly cookie."""

from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.lexora.core.config import get_settings
from src.lexora.core.security import generate_opaque_token, hash_token
from src.lexora.models import User, UserSession
from src.lexora.models.base import utc_now
from src.lexora.repositories import SessionRepository, UserRepository


class SessionService:
    def __init__(
        self,
        session_repo: SessionRepository,
        user_repo: UserRepository,
        session: AsyncSession,
    ):
        self.session_repo = session_repo
        self.user_repo = user_repo
        self.session = session

    async def create(self, user_id: UUID, *, commit: bool = True) -> str:
        """Open a session for the user and return the client-held session id."""
        settings = get_settings()
        session_id = generate_opaque_token()
        self.session_repo.add(
            UserSession(
                user_id=user_id,
                session_hash=hash_token(session_id),
                expires_at=utc_now() + timedelta(hours=settings.session_ttl_hours),
            )
        )
        try:
            await self.session.flush()
            if commit:
                await self.session.commit()
        except Exception:
            if commit:
                await self.session.rollback()
            raise
        return session_id

    async def resolve(self, session_id: str | None) -> User | None:
        """Return the active user behind a session id, or None."""
        if not session_id:
            return None
        user_session = await self.session_repo.get_valid_by_hash(hash_token(session_id))
        if user_session is None:
            return None
        user = await self.user_repo.get_by_id(user_session.user_id)
        if user is None or not user.is_active:
            return None
        return user

    async def destroy(self, session_id: str | None) -> None:
        """Remove the session if it exists."""
        if not session_id:
            return
        try:
            await self.session_repo.delete_by_hash(hash_token(session_id))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
