"""Cryptographic utilities - JWT access tokens and opaque token handling."""

import secrets
from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from src.lexora.core.config import get_settings

ACCESS_TOKEN_TYPE = "access"

# 32 bytes of entropy -> 43 url-safe characters
OPAQUE_TOKEN_BYTES = 32


def generate_opaque_token() -> str:
    """Generate a high-entropy opaque token (refresh, magic link, session)."""
    return secrets.token_urlsafe(OPAQUE_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for storage. Lookups match on the digest."""
    return sha256(token.encode()).hexdigest()


def create_access_token(
    subject: str | UUID,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token asserting the user id."""
    settings = get_settings()

    issued_at = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(subject),
        "exp": issued_at + expires_delta,
        "iat": issued_at,
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT (signature and expiry). Returns None on any error."""
    settings = get_settings()
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
