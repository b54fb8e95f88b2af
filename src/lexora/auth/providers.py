"""External identity providers.

Providers are declared as data: which settings they need, how authlib
registers them, and how their claims map onto a local profile. Google is
always listed; Microsoft only when client id, secret and tenant are all set.
A listed provider whose settings are incomplete is skipped with a warning
rather than failing startup.

The OAuth handshake keeps its state and nonce in the Starlette session
(``SessionMiddleware``), which authlib reads during the callback.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from authlib.integrations.starlette_client import OAuth, StarletteOAuth2App
from starlette.requests import Request

from src.lexora.core.config import Settings, get_settings
from src.lexora.core.exceptions import AuthenticationError, NotFoundError
from src.lexora.core.logging import get_logger
from src.lexora.models import AuthType

logger = get_logger(__name__)

GOOGLE_DISCOVERY_URL = "https://accounts.google.com/.well-known/openid-configuration"
MICROSOFT_DISCOVERY_URL = (
    "https://login.microsoftonline.com/{tenant}/v2.0/.well-known/openid-configuration"
)


@dataclass(frozen=True)
class ExternalProfile:
    """Provider claims normalized for account linking."""

    provider: str
    external_id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    email_verified: bool = False


def _google_profile(claims: dict[str, Any]) -> ExternalProfile:
    if not claims.get("sub") or not claims.get("email"):
        raise AuthenticationError("Google profile is missing required claims")
    return ExternalProfile(
        provider=AuthType.GOOGLE.value,
        external_id=str(claims["sub"]),
        email=str(claims["email"]).lower(),
        first_name=claims.get("given_name"),
        last_name=claims.get("family_name"),
        email_verified=bool(claims.get("email_verified", False)),
    )


def _microsoft_profile(claims: dict[str, Any]) -> ExternalProfile:
    external_id = claims.get("oid") or claims.get("sub")
    email = claims.get("email") or claims.get("preferred_username") or claims.get("upn")
    if not external_id or not email:
        raise AuthenticationError("Microsoft profile is missing required claims")
    first_name = claims.get("given_name")
    last_name = claims.get("family_name")
    if first_name is None and claims.get("name"):
        first_name, _, rest = str(claims["name"]).partition(" ")
        last_name = rest or None
    return ExternalProfile(
        provider=AuthType.MICROSOFT.value,
        external_id=str(external_id),
        email=str(email).lower(),
        first_name=first_name,
        last_name=last_name,
        # Entra ID only issues tokens for addresses the tenant owns
        email_verified=bool(claims.get("email_verified", True)),
    )


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str
    required_settings: tuple[str, ...]
    registration: Callable[[Settings], dict[str, Any]]
    normalize: Callable[[dict[str, Any]], ExternalProfile]
    # Extra arguments for the authorization redirect
    authorize_params: dict[str, str] = field(default_factory=dict)

    def is_configured(self, settings: Settings) -> bool:
        return all(getattr(settings, key, None) for key in self.required_settings)


GOOGLE = ProviderDescriptor(
    name=AuthType.GOOGLE.value,
    required_settings=("google_client_id", "google_client_secret"),
    registration=lambda s: {
        "client_id": s.google_client_id,
        "client_secret": s.google_client_secret,
        "server_metadata_url": GOOGLE_DISCOVERY_URL,
        "client_kwargs": {"scope": "openid email profile", "code_challenge_method": "S256"},
    },
    normalize=_google_profile,
)

MICROSOFT = ProviderDescriptor(
    name=AuthType.MICROSOFT.value,
    required_settings=("microsoft_client_id", "microsoft_client_secret", "microsoft_tenant_id"),
    registration=lambda s: {
        "client_id": s.microsoft_client_id,
        "client_secret": s.microsoft_client_secret,
        "server_metadata_url": MICROSOFT_DISCOVERY_URL.format(tenant=s.microsoft_tenant_id),
        "client_kwargs": {"scope": "openid email profile"},
    },
    normalize=_microsoft_profile,
    # The Microsoft callback arrives as a form POST
    authorize_params={"response_mode": "form_post"},
)


def provider_descriptors(settings: Settings) -> list[ProviderDescriptor]:
    """Providers to offer for the given configuration."""
    descriptors = [GOOGLE]
    if MICROSOFT.is_configured(settings):
        descriptors.append(MICROSOFT)
    return descriptors


class ProviderRegistry:
    """Authlib clients for the configured providers."""

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.oauth = OAuth()
        self.descriptors: dict[str, ProviderDescriptor] = {}

        for descriptor in provider_descriptors(settings):
            if not descriptor.is_configured(settings):
                logger.warning(
                    "Identity provider not configured, skipping",
                    provider=descriptor.name,
                    required=list(descriptor.required_settings),
                )
                continue
            self.oauth.register(name=descriptor.name, **descriptor.registration(settings))
            self.descriptors[descriptor.name] = descriptor
            logger.info("Identity provider registered", provider=descriptor.name)

    def __contains__(self, name: str) -> bool:
        return name in self.descriptors

    def get(self, name: str) -> tuple[ProviderDescriptor, StarletteOAuth2App]:
        descriptor = self.descriptors.get(name)
        if descriptor is None:
            raise NotFoundError(f"Identity provider '{name}' is not available")
        return descriptor, self.oauth.create_client(name)

    async def authorize_redirect(self, name: str, request: Request, redirect_uri: str) -> Any:
        descriptor, client = self.get(name)
        return await client.authorize_redirect(
            request, redirect_uri, **descriptor.authorize_params
        )

    async def fetch_profile(self, name: str, request: Request) -> ExternalProfile:
        """Complete the handshake and return the normalized profile.

        Authlib validates state, nonce and the ID token signature; failures
        raise ``authlib.integrations.starlette_client.OAuthError``.
        """
        descriptor, client = self.get(name)
        token = await client.authorize_access_token(request)
        claims = token.get("userinfo")
        if not claims:
            claims = await client.userinfo(token=token)
        return descriptor.normalize(dict(claims))


_registry: ProviderRegistry | None = None


def get_provider_registry() -> ProviderRegistry:
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


def reset_provider_registry() -> None:
    """Drop the cached registry (testing)."""
    global _registry
    _registry = None
