"""Security utilities - tokens and response headers.

Re-exports all security-related helpers for convenience.
"""

from src.lexora.core.security.crypto import (
    create_access_token,
    decode_token,
    generate_opaque_token,
    hash_token,
)
from src.lexora.core.security.headers import SecurityHeadersMiddleware

__all__ = [
    # Crypto
    "create_access_token",
    "decode_token",
    "generate_opaque_token",
    "hash_token",
    # Headers
    "SecurityHeadersMiddleware",
]
