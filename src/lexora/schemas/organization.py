from datetime import datetime
from uuid import UUID

from pydantic import Field

from src.lexora.schemas.common import CamelModel


class OrganizationCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)


class OrganizationUpdate(CamelModel):
    name: str = Field(min_length=1, max_length=255)


class OrganizationRead(CamelModel):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TeamSummary(CamelModel):
    id: UUID
    name: str
    member_count: int


class OrganizationDetail(OrganizationRead):
    """Organization with license and seat usage."""

    seats_limit: int | None = None
    valid_until: datetime | None = None
    current_seats: int
    teams: list[TeamSummary] = []


class MemberRead(CamelModel):
    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    last_login: datetime | None = None
    teams: list[str] = []


class TeamCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)


class TeamUpdate(CamelModel):
    name: str = Field(min_length=1, max_length=255)


class TeamRead(CamelModel):
    id: UUID
    organization_id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TeamMembersUpdate(CamelModel):
    user_ids: list[UUID] = Field(default_factory=list, max_length=1000)
