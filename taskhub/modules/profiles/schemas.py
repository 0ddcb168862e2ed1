from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

UserRole = Literal["admin", "manager", "worker"]
MANAGER_ROLES = ("admin", "manager")


class Profile(BaseModel):
    id: str
    full_name: Optional[str] = None
    role: UserRole = "worker"
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None


class RoleUpdate(BaseModel):
    role: UserRole
