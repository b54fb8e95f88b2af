"""Token issuer - access/refresh pairs, refresh exchange, revocation."""

from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.lexora.core.config import get_settings
from src.lexora.core.exceptions import AuthenticationError
from src.lexora.core.logging import get_logger
from src.lexora.core.security import (
    create_access_token,
    generate_opaque_token,
    hash_token,
)
from src.lexora.models import RefreshToken
from src.lexora.models.base import utc_now
from src.lexora.repositories import RefreshTokenRepository, UserRepository
from src.lexora.schemas import AccessTokenResponse, TokenPair

logger = get_logger(__name__)


class TokenService:
    """Issues and exchanges credentials.

    Access tokens are stateless JWTs. Refresh tokens are opaque and only
    valid while their digest is in the store; they are not rotated on use.
    """

    def __init__(
        self,
        token_repo: RefreshTokenRepository,
        user_repo: UserRepository,
        session: AsyncSession,
    ):
        self.token_repo = token_repo
        self.user_repo = user_repo
        self.session = session

    async def issue_token_pair(self, user_id: UUID, *, commit: bool = True) -> TokenPair:
        """Mint an access token and persist a new refresh token.

        With ``commit=False`` the refresh token is only flushed so a caller
        can make issuance part of a larger transaction. A persistence failure
        fails the whole issuance.
        """
        settings = get_settings()
        access_token = create_access_token(user_id)
        refresh_token = generate_opaque_token()

        self.token_repo.add(
            RefreshToken(
                user_id=user_id,
                token_hash=hash_token(refresh_token),
                expires_at=utc_now() + timedelta(days=settings.refresh_token_expire_days),
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

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def refresh(self, refresh_token: str) -> AccessTokenResponse:
        """Exchange a stored, unexpired refresh token for a new access token.

        The refresh token itself stays valid; nothing is written.
        """
        token_hash = hash_token(refresh_token)
        db_token = await self.token_repo.get_valid_by_hash(token_hash)
        if db_token is None:
            raise AuthenticationError("Invalid or expired refresh token")

        user = await self.user_repo.get_by_id(db_token.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Invalid or expired refresh token")

        return AccessTokenResponse(access_token=create_access_token(user.id))

    async def revoke(self, refresh_token: str) -> bool:
        """Delete a refresh token. Idempotent: unknown tokens are not an error.

        Returns True if a stored token was removed.
        """
        try:
            removed = await self.token_repo.delete_by_hash(hash_token(refresh_token))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        if removed:
            logger.info("Refresh token revoked")
        return removed > 0
