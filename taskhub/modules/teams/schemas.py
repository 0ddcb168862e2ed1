from pydantic import BaseModel
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime
from taskhub.modules.profiles.schemas import Profile

TeamRole = Literal["admin", "member"]


class TeamCreate(BaseModel):
    name: str
    description: Optional[str] = None
    member_ids: List[str] = []


class TeamUpdate(BaseModel):
    name: str
    description: Optional[str] = None


class TeamResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by_profile: Optional[Dict[str, Any]] = None
    member_count: int = 0

    class Config:
        from_attributes = True


class TeamMemberAdd(BaseModel):
    user_id: str


class TeamMemberResponse(BaseModel):
    id: str
    team_id: str
    user_id: str
    role: TeamRole
    created_at: Optional[datetime] = None
    profile: Optional[Profile] = None

    class Config:
        from_attributes = True
