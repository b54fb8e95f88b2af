"""External identity providers."""

from src.lexora.auth.providers import (
    ExternalProfile,
    ProviderDescriptor,
    ProviderRegistry,
    get_provider_registry,
    provider_descriptors,
    reset_provider_registry,
)

__all__ = [
    "ExternalProfile",
    "ProviderDescriptor",
    "ProviderRegistry",
    "get_provider_registry",
    "provider_descriptors",
    "reset_provider_registry",
]
