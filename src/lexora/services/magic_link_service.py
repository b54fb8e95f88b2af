"""Magic-link sign-in.

Token lifecycle: ISSUED -> REDEEMED (row deleted) or ISSUED -> EXPIRED
(detected at verification, never swept). A user may hold several unredeemed
links at once; requesting a new one does not invalidate the others.
"""

from datetime import timedelta
from urllib.parse import urlencode
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lexora.core.cache import recall_redemption, remember_redemption
from src.lexora.core.config import get_settings
from src.lexora.core.exceptions import AuthenticationError, ValidationError
from src.lexora.core.logging import get_logger
from src.lexora.core.notifications import Mailer
from src.lexora.core.security import generate_opaque_token, hash_token
from src.lexora.models import AuthType, MagicLinkToken, User
from src.lexora.models.base import utc_now
from src.lexora.repositories import MagicLinkTokenRepository, UserRepository
from src.lexora.schemas import MagicLinkLogin, MagicLinkRedemption, UserIdentity
from src.lexora.services.session_service import SessionService
from src.lexora.services.token_service import TokenService

logger = get_logger(__name__)

MAGIC_LINK_SENT_MESSAGE = "If the address is valid, a sign-in link has been sent"


def build_magic_link(token: str) -> str:
    settings = get_settings()
    query = urlencode({"token": token})
    return f"{settings.api_base_url.rstrip('/')}/api/auth/verify-magic-link?{query}"


class MagicLinkService:
    """Issues and redeems magic links."""

    def __init__(
        self,
        user_repo: UserRepository,
        magic_link_repo: MagicLinkTokenRepository,
        token_service: TokenService,
        session_service: SessionService,
        mailer: Mailer,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.magic_link_repo = magic_link_repo
        self.token_service = token_service
        self.session_service = session_service
        self.mailer = mailer
        self.session = session

    async def request_link(self, email: str) -> str:
        """Create (if needed) the user, persist a fresh token and email it.

        Returns the same confirmation whether or not the account existed.
        Delivery failures propagate; the stored token is then simply never
        delivered.
        """
        settings = get_settings()
        email = email.strip().lower()

        try:
            user = await self._get_or_create_user(email)
            if not user.is_active:
                logger.info("Magic link requested for inactive account", user_id=str(user.id))
                return MAGIC_LINK_SENT_MESSAGE

            token = generate_opaque_token()
            self.magic_link_repo.add(
                MagicLinkToken(
                    user_id=user.id,
                    token_hash=hash_token(token),
                    expires_at=utc_now()
                    + timedelta(minutes=settings.magic_link_expire_minutes),
                )
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.mailer.send_magic_link(
            to=email,
            link=build_magic_link(token),
            expires_minutes=settings.magic_link_expire_minutes,
        )
        logger.info("Magic link issued", user_id=str(user.id))
        return MAGIC_LINK_SENT_MESSAGE

    async def _get_or_create_user(self, email: str) -> User:
        user = await self.user_repo.get_by_email(email)
        if user is not None:
            return user

        # Two first-time requests for the same address may race on the unique
        # email; the loser picks up the winner's row.
        try:
            async with self.session.begin_nested():
                user = User(email=email, auth_type=AuthType.MAGIC_LINK.value)
                self.user_repo.add(user)
            logger.info("User created from magic link request", user_id=str(user.id))
            return user
        except IntegrityError:
            existing = await self.user_repo.get_by_email(email)
            if existing is None:
                raise
            return existing

    async def verify_link(self, token: str | None) -> MagicLinkRedemption:
        """Redeem a magic link for a token pair and a server-side session.

        A link redeemed within the replay window returns the same result
        again. Otherwise the row is deleted and returned in one statement,
        so concurrent redemptions of one token yield exactly one success.
        """
        if not token:
            raise ValidationError("Token is required")

        token_hash = hash_token(token)
        cached = await recall_redemption(token_hash)
        if cached is not None:
            logger.info("Magic link replay served from cache")
            return MagicLinkRedemption.model_validate(cached)

        try:
            db_token = await self.magic_link_repo.take_by_hash(token_hash)
            if db_token is None:
                raise AuthenticationError("Invalid or already used magic link")
            if db_token.expires_at <= utc_now():
                # Rollback restores the row; it stays expired for later attempts
                raise AuthenticationError(
                    f"Magic link expired at {db_token.expires_at.isoformat()}Z"
                )

            user = await self.user_repo.get_by_id(db_token.user_id)
            if user is None or not user.is_active:
                raise AuthenticationError("Invalid or already used magic link")
            # A failed savepoint below expires the instance
            identity = UserIdentity(id=user.id, email=user.email)

            pair = await self.token_service.issue_token_pair(identity.id, commit=False)
            session_id = await self.session_service.create(identity.id, commit=False)
            await self._touch_last_login(identity.id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        redemption = MagicLinkRedemption(
            login=MagicLinkLogin(
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
                user=identity,
            ),
            session_id=session_id,
        )
        await remember_redemption(token_hash, redemption.model_dump(mode="json"))
        logger.info("Magic link redeemed", user_id=str(identity.id))
        return redemption

    async def _touch_last_login(self, user_id: UUID) -> None:
        """Best effort: a failure is logged and rolled back to a savepoint."""
        try:
            async with self.session.begin_nested():
                await self.user_repo.touch_last_login(user_id)
        except Exception as e:
            logger.warning("Failed to update last login", user_id=str(user_id), error=str(e))
