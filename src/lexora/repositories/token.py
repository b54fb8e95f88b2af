"""Repository for RefreshToken entity."""

from sqlalchemy import delete
from sqlmodel import select

from src.lexora.models import RefreshToken
from src.lexora.models.base import utc_now
from src.lexora.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    async def get_valid_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Get an unexpired refresh token by hash."""
        result = await self.session.execute(
            select(RefreshToken).where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.expires_at > utc_now(),
            )
        )
        return result.scalar_one_or_none()

    async def delete_by_hash(self, token_hash: str) -> int:
        """Delete the matching token. Returns the number of rows removed."""
        result = await self.session.execute(
            delete(RefreshToken).where(RefreshToken.token_hash == token_hash)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
