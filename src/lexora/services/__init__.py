from src.lexora.services.authorization_service import AuthorizationService
from src.lexora.services.identity_service import IdentityService
from src.lexora.services.magic_link_service import MagicLinkService
from src.lexora.services.organization_service import OrganizationService
from src.lexora.services.session_service import SessionService
from src.lexora.services.token_service import TokenService
from src.lexora.services.user_service import UserService

__all__ = [
    "AuthorizationService",
    "IdentityService",
    "MagicLinkService",
    "OrganizationService",
    "SessionService",
    "TokenService",
    "UserService",
]
