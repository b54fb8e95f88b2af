"""Organization and team endpoints, guarded by the authorization chain."""

from uuid import UUID

from fastapi import APIRouter, status

from src.lexora.api.dependencies import (
    CurrentUserId,
    OrganizationId,
    OrganizationServiceDep,
    TeamMembership,
    ValidLicense,
)
from src.lexora.schemas import (
    Envelope,
    MemberRead,
    MessageEnvelope,
    OrganizationCreate,
    OrganizationDetail,
    OrganizationRead,
    OrganizationUpdate,
    TeamCreate,
    TeamMembersUpdate,
    TeamRead,
    TeamUpdate,
    success,
)

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post(
    "",
    response_model=Envelope[OrganizationRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_organization(
    data: OrganizationCreate, user_id: CurrentUserId, service: OrganizationServiceDep
) -> Envelope[OrganizationRead]:
    """Create an organization and attach the caller to it."""
    organization = await service.create_for_user(user_id, data.name)
    return success(organization, "Organization created")


@router.get("/current", response_model=Envelope[OrganizationDetail])
async def get_current_organization(
    organization_id: OrganizationId, service: OrganizationServiceDep
) -> Envelope[OrganizationDetail]:
    """The caller's organization with license, seat usage and teams."""
    return success(await service.get_detail(organization_id))


@router.put("/current", response_model=Envelope[OrganizationRead])
async def update_current_organization(
    data: OrganizationUpdate, organization_id: OrganizationId, service: OrganizationServiceDep
) -> Envelope[OrganizationRead]:
    return success(await service.rename(organization_id, data.name), "Organization updated")


@router.get("/current/members", response_model=Envelope[list[MemberRead]])
async def list_members(
    organization_id: OrganizationId, _license: ValidLicense, service: OrganizationServiceDep
) -> Envelope[list[MemberRead]]:
    return success(await service.list_members(organization_id))


@router.post(
    "/teams",
    response_model=Envelope[TeamRead],
    status_code=status.HTTP_201_CREATED,
)
async def create_team(
    data: TeamCreate,
    organization_id: OrganizationId,
    _license: ValidLicense,
    service: OrganizationServiceDep,
) -> Envelope[TeamRead]:
    return success(await service.create_team(organization_id, data.name), "Team created")


@router.get("/teams/{team_id}", response_model=Envelope[TeamRead])
async def get_team(
    team_id: TeamMembership, organization_id: OrganizationId, service: OrganizationServiceDep
) -> Envelope[TeamRead]:
    """Team details; only visible to its members."""
    return success(await service.get_team(organization_id, team_id))


@router.put("/teams/{team_id}", response_model=Envelope[TeamRead])
async def update_team(
    team_id: UUID,
    data: TeamUpdate,
    organization_id: OrganizationId,
    _license: ValidLicense,
    service: OrganizationServiceDep,
) -> Envelope[TeamRead]:
    team = await service.rename_team(organization_id, team_id, data.name)
    return success(team, "Team updated")


@router.delete("/teams/{team_id}", response_model=MessageEnvelope)
async def delete_team(
    team_id: UUID,
    organization_id: OrganizationId,
    _license: ValidLicense,
    service: OrganizationServiceDep,
) -> MessageEnvelope:
    await service.delete_team(organization_id, team_id)
    return MessageEnvelope(message="Team deleted")


@router.put("/teams/{team_id}/members", response_model=MessageEnvelope)
async def replace_team_members(
    team_id: UUID,
    data: TeamMembersUpdate,
    organization_id: OrganizationId,
    _license: ValidLicense,
    service: OrganizationServiceDep,
) -> MessageEnvelope:
    """Replace the team's members; every user must belong to the organization."""
    await service.replace_team_members(organization_id, team_id, data.user_ids)
    return MessageEnvelope(message="Team members updated")
