"""User identity model."""

from datetime import datetime
from uuid import UUID, uuid7

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from src.lexora.models.base import utc_now
from src.lexora.models.enums import AuthType


class User(SQLModel, table=True):
    """A person who can sign in. Email is globally unique."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("google_id", name="uq_users_google_id"),
        UniqueConstraint("microsoft_id", name="uq_users_microsoft_id"),
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    email: str = Field(max_length=255, index=True)
    password_hash: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    organization_id: UUID | None = Field(
        default=None, foreign_key="organizations.id", ondelete="SET NULL", index=True
    )
    auth_type: str = Field(default=AuthType.MAGIC_LINK.value, max_length=50)
    google_id: str | None = Field(default=None, max_length=255, index=True)
    microsoft_id: str | None = Field(default=None, max_length=255, index=True)
    is_active: bool = Field(default=True)
    last_login: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
