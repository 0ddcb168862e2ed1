from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime
from taskhub.modules.profiles.schemas import Profile

TaskStatus = Literal["pending", "in_progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]
SortField = Literal["created_at", "due_date", "title", "priority", "status"]
SortDirection = Literal["asc", "desc"]


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    priority: TaskPriority = "medium"
    assigned_to: Optional[str] = None
    team_id: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """Only fields explicitly sent are considered; assigned_to=None unassigns."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    created_by: str
    assigned_to: Optional[str] = None
    team_id: Optional[str] = None
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assigned_to_profile: Optional[Profile] = None
    created_by_profile: Optional[Profile] = None
    comment_count: int = 0
    attachment_count: int = 0
    unread_notifications: int = 0

    class Config:
        from_attributes = True


class TaskHistoryResponse(BaseModel):
    id: str
    task_id: str
    user_id: str
    field_changed: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime
    user_profile: Optional[Profile] = None

    class Config:
        from_attributes = True
