"""Authentication state - magic-link tokens, refresh tokens, sessions.

Opaque credentials are stored as SHA-256 digests; the plaintext only ever
exists in the response or email that delivers it.
"""

from datetime import datetime
from uuid import UUID, uuid7

from sqlmodel import Field, SQLModel

from src.lexora.models.base import utc_now


class MagicLinkToken(SQLModel, table=True):
    """Single-use sign-in credential. Deleted on redemption."""

    __tablename__ = "magic_link_tokens"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)


class RefreshToken(SQLModel, table=True):
    """Long-lived credential exchanged for new access tokens. Not rotated on use."""

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)


class UserSession(SQLModel, table=True):
    """Server-side session bound to a client-held session id."""

    __tablename__ = "user_sessions"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    session_hash: str = Field(max_length=255, unique=True, index=True)
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)
