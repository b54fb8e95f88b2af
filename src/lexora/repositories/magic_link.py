"""Repository for MagicLinkToken entity."""

from sqlalchemy import delete

from src.lexora.models import MagicLinkToken
from src.lexora.repositories.base import BaseRepository


class MagicLinkTokenRepository(BaseRepository[MagicLinkToken]):
    model = MagicLinkToken

    async def take_by_hash(self, token_hash: str) -> MagicLinkToken | None:
        """Delete the token and return the removed row, in one statement.

        Concurrent callers racing on the same token serialize on the row:
        exactly one receives it, the others get None.
        """
        result = await self.session.execute(
            delete(MagicLinkToken)
            .where(MagicLinkToken.token_hash == token_hash)  # type: ignore[arg-type]
            .returning(MagicLinkToken)
        )
        return result.scalars().first()
