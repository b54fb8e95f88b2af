"""Model exports.

Import from here: `from src.lexora.models import User, MagicLinkToken`
"""

from src.lexora.models.auth import MagicLinkToken, RefreshToken, UserSession
from src.lexora.models.enums import AuthType
from src.lexora.models.organization import License, Organization, Team, TeamMember
from src.lexora.models.user import User

__all__ = [
    # Enums
    "AuthType",
    # Identity
    "User",
    # Auth state
    "MagicLinkToken",
    "RefreshToken",
    "UserSession",
    # Entitlement context
    "License",
    "Organization",
    "Team",
    "TeamMember",
]
