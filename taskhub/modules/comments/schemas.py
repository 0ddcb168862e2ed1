from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from taskhub.modules.profiles.schemas import Profile


class CommentCreate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    id: str
    task_id: str
    user_id: str
    content: str
    created_at: Optional[datetime] = None
    user_profile: Optional[Profile] = None

    class Config:
        from_attributes = True
