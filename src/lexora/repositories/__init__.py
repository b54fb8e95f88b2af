"""Repository layer - data access abstraction."""

from src.lexora.repositories.base import BaseRepository
from src.lexora.repositories.magic_link import MagicLinkTokenRepository
from src.lexora.repositories.organization import OrganizationRepository
from src.lexora.repositories.session import SessionRepository
from src.lexora.repositories.team import TeamRepository
from src.lexora.repositories.token import RefreshTokenRepository
from src.lexora.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "MagicLinkTokenRepository",
    "OrganizationRepository",
    "RefreshTokenRepository",
    "SessionRepository",
    "TeamRepository",
    "UserRepository",
]
