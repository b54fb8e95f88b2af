from src.lexora.schemas.auth import (
    AccessTokenResponse,
    CurrentUserProfile,
    LogoutRequest,
    MagicLinkLogin,
    MagicLinkRedemption,
    MagicLinkRequest,
    RefreshRequest,
    TokenPair,
    UserIdentity,
)
from src.lexora.schemas.common import CamelModel, Envelope, MessageEnvelope, success
from src.lexora.schemas.organization import (
    MemberRead,
    OrganizationCreate,
    OrganizationDetail,
    OrganizationRead,
    OrganizationUpdate,
    TeamCreate,
    TeamMembersUpdate,
    TeamRead,
    TeamSummary,
    TeamUpdate,
)

__all__ = [
    # Common
    "CamelModel",
    "Envelope",
    "MessageEnvelope",
    "success",
    # Auth
    "AccessTokenResponse",
    "CurrentUserProfile",
    "LogoutRequest",
    "MagicLinkLogin",
    "MagicLinkRedemption",
    "MagicLinkRequest",
    "RefreshRequest",
    "TokenPair",
    "UserIdentity",
    # Organization
    "MemberRead",
    "OrganizationCreate",
    "OrganizationDetail",
    "OrganizationRead",
    "OrganizationUpdate",
    "TeamCreate",
    "TeamMembersUpdate",
    "TeamRead",
    "TeamSummary",
    "TeamUpdate",
]
