from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from taskhub.modules.profiles.schemas import Profile


class ChatMessageCreate(BaseModel):
    content: str


class ChatMessageResponse(BaseModel):
    id: str
    task_id: str
    sender_id: str
    content: str
    created_at: Optional[datetime] = None
    sender_profile: Optional[Profile] = None

    class Config:
        from_attributes = True
