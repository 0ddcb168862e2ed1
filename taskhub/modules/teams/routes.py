from fastapi import APIRouter, Depends, HTTPException
from taskhub.core.dependencies import get_current_user, get_user_supabase, require_manager
from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamMemberAdd, TeamMemberResponse
)
from taskhub.modules.teams.service import TeamService
from supabase import Client
from typing import List

router = APIRouter(prefix="/teams", tags=["teams"])


def get_team_service(supabase: Client = Depends(get_user_supabase)) -> TeamService:
    return TeamService(supabase)


@router.get("", response_model=List[TeamResponse])
async def list_teams(
    current_user: Profile = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """List teams"""
    return service.list_teams()


@router.post("", response_model=TeamResponse, status_code=201)
async def create_team(
    team_data: TeamCreate,
    current_user: Profile = Depends(require_manager),
    service: TeamService = Depends(get_team_service)
):
    """Create a team (admins and managers)"""
    return service.create_team(team_data, current_user.id)


@router.put("/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: str,
    team_data: TeamUpdate,
    current_user: Profile = Depends(require_manager),
    service: TeamService = Depends(get_team_service)
):
    """Update a team"""
    return service.update_team(team_id, team_data)


@router.delete("/{team_id}", status_code=204)
async def delete_team(
    team_id: str,
    current_user: Profile = Depends(require_manager),
    service: TeamService = Depends(get_team_service)
):
    """Delete a team"""
    if not service.delete_team(team_id):
        raise HTTPException(status_code=404, detail="Team not found")
    return None


@router.get("/{team_id}/members", response_model=List[TeamMemberResponse])
async def list_members(
    team_id: str,
    current_user: Profile = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """List team members"""
    return service.list_members(team_id)


@router.post("/{team_id}/members", response_model=TeamMemberResponse, status_code=201)
async def add_member(
    team_id: str,
    member_data: TeamMemberAdd,
    current_user: Profile = Depends(require_manager),
    service: TeamService = Depends(get_team_service)
):
    """Add a member to the team"""
    return service.add_member(team_id, member_data.user_id)


@router.delete("/{team_id}/members/{user_id}", status_code=204)
async def remove_member(
    team_id: str,
    user_id: str,
    current_user: Profile = Depends(require_manager),
    service: TeamService = Depends(get_team_service)
):
    """Remove a member from the team"""
    if not service.remove_member(team_id, user_id):
        raise HTTPException(status_code=404, detail="Member not found")
    return None
