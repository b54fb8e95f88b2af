"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import UserFactory, LicenseFactory, ...
"""

from tests.factories.auth import (
    MagicLinkTokenFactory,
    RefreshTokenFactory,
    UserSessionFactory,
    generate_token_hash,
)
from tests.factories.base import BaseFactory, generate_uuid7, utc_now
from tests.factories.organization import (
    LicenseFactory,
    OrganizationFactory,
    TeamFactory,
    TeamMemberFactory,
)
from tests.factories.user import UserFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid7",
    "utc_now",
    # User
    "UserFactory",
    # Organization
    "LicenseFactory",
    "OrganizationFactory",
    "TeamFactory",
    "TeamMemberFactory",
    # Auth
    "MagicLinkTokenFactory",
    "RefreshTokenFactory",
    "UserSessionFactory",
    "generate_token_hash",
]
