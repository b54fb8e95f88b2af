"""Links external identity-provider profiles to local users."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.lexora.auth.providers import ExternalProfile
from src.lexora.core.exceptions import AuthenticationError, ForbiddenError
from src.lexora.core.logging import get_logger
from src.lexora.models import User
from src.lexora.models.base import utc_now
from src.lexora.repositories import UserRepository
from src.lexora.repositories.user import EXTERNAL_ID_COLUMNS

logger = get_logger(__name__)


class IdentityService:
    def __init__(self, user_repo: UserRepository, session: AsyncSession):
        self.user_repo = user_repo
        self.session = session

    async def link(self, profile: ExternalProfile) -> User:
        """Resolve the local user for a verified provider profile.

        Lookup is by the provider's external id. An unseen identity creates a
        user, unless its email already belongs to another account: that
        account is linked only when the provider vouches for the address.
        """
        if profile.provider not in EXTERNAL_ID_COLUMNS:
            raise AuthenticationError(f"Unsupported identity provider: {profile.provider}")
        id_field = f"{profile.provider}_id"

        try:
            user = await self.user_repo.get_by_external_id(profile.provider, profile.external_id)
            if user is not None:
                if not user.is_active:
                    raise AuthenticationError("Account is disabled")
                user.last_login = utc_now()
                user.updated_at = user.last_login
                await self.session.commit()
                return user

            user = await self.user_repo.get_by_email(profile.email)
            if user is not None:
                if not profile.email_verified or getattr(user, id_field) is not None:
                    raise ForbiddenError("An account with this email already exists")
                if not user.is_active:
                    raise AuthenticationError("Account is disabled")
                setattr(user, id_field, profile.external_id)
                user.last_login = utc_now()
                user.updated_at = user.last_login
                await self.session.commit()
                logger.info(
                    "External identity linked to existing user",
                    user_id=str(user.id),
                    provider=profile.provider,
                )
                return user

            user = await self._create_from_profile(profile, id_field)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return user

    async def _create_from_profile(self, profile: ExternalProfile, id_field: str) -> User:
        # Two first-time callbacks for the same identity may race on its unique
        # column; the loser picks up the winner's row.
        try:
            async with self.session.begin_nested():
                user = User(
                    email=profile.email,
                    first_name=profile.first_name,
                    last_name=profile.last_name,
                    auth_type=profile.provider,
                    last_login=utc_now(),
                )
                setattr(user, id_field, profile.external_id)
                self.user_repo.add(user)
        except IntegrityError:
            existing = await self.user_repo.get_by_external_id(
                profile.provider, profile.external_id
            )
            if existing is None:
                # Lost the race on the email instead
                raise ForbiddenError("An account with this email already exists") from None
            if not existing.is_active:
                raise AuthenticationError("Account is disabled") from None
            return existing

        logger.info(
            "User created from external identity",
            user_id=str(user.id),
            provider=profile.provider,
        )
        return user
