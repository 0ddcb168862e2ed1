import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.teams.schemas import (
    TeamCreate, TeamUpdate, TeamResponse, TeamMemberResponse
)

logger = logging.getLogger(__name__)

TEAM_SELECT = "*, created_by_profile:profiles!teams_created_by_fkey(full_name)"


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Team name is required")
    return name


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _member_count(self, team_id: str) -> int:
        try:
            result = self.supabase.table("team_members")\
                .select("*", count="exact", head=True)\
                .eq("team_id", team_id)\
                .execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error fetching team member count for {team_id}: {e}")
            return 0

    def list_teams(self) -> List[TeamResponse]:
        """Teams with creator name and member count"""
        try:
            result = self.supabase.table("teams")\
                .select(TEAM_SELECT)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching teams: {e}")
            raise HTTPException(status_code=500, detail="Failed to load teams")

        return [
            TeamResponse(**{**team, "member_count": self._member_count(team["id"])})
            for team in result.data or []
        ]

    def list_members(self, team_id: str) -> List[TeamMemberResponse]:
        """Members of a team with their profiles"""
        try:
            result = self.supabase.table("team_members")\
                .select("*, profile:profiles(*)")\
                .eq("team_id", team_id)\
                .execute()
            return [TeamMemberResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching team members for {team_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load team members")

    def create_team(self, team_data: TeamCreate, user_id: str) -> TeamResponse:
        """Create a team; selected users join as members and the creator as admin"""
        name = _clean_name(team_data.name)
        try:
            result = self.supabase.table("teams").insert({
                "name": name,
                "description": (team_data.description or "").strip() or None,
                "created_by": user_id,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create team")

            team = result.data[0]
            member_ids = [m for m in dict.fromkeys(team_data.member_ids) if m != user_id]
            if member_ids:
                self.supabase.table("team_members").insert([
                    {"team_id": team["id"], "user_id": member_id, "role": "member"}
                    for member_id in member_ids
                ]).execute()

            # Add creator as admin
            self.supabase.table("team_members").insert({
                "team_id": team["id"],
                "user_id": user_id,
                "role": "admin",
            }).execute()

            return TeamResponse(**{**team, "member_count": len(member_ids) + 1})
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating team: {e}")
            raise HTTPException(status_code=500, detail="Failed to create team")

    def update_team(self, team_id: str, team_data: TeamUpdate) -> TeamResponse:
        """Rename a team or change its description"""
        name = _clean_name(team_data.name)
        try:
            result = self.supabase.table("teams")\
                .update({
                    "name": name,
                    "description": (team_data.description or "").strip() or None,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })\
                .eq("id", team_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Team not found")

            return TeamResponse(**{**result.data[0], "member_count": self._member_count(team_id)})
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating team {team_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update team")

    def delete_team(self, team_id: str) -> bool:
        """Delete a team (members cascade)"""
        try:
            result = self.supabase.table("teams")\
                .delete()\
                .eq("id", team_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting team {team_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete team")

    def add_member(self, team_id: str, user_id: str) -> TeamMemberResponse:
        """Add a user to the team as member"""
        try:
            result = self.supabase.table("team_members").insert({
                "team_id": team_id,
                "user_id": user_id,
                "role": "member",
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add team member")

            return TeamMemberResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding member {user_id} to team {team_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add team member")

    def remove_member(self, team_id: str, user_id: str) -> bool:
        """Remove a user from the team"""
        try:
            result = self.supabase.table("team_members")\
                .delete()\
                .eq("team_id", team_id)\
                .eq("user_id", user_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error removing member {user_id} from team {team_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to remove team member")
