from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from taskhub.modules.profiles.schemas import Profile


class MessageCreate(BaseModel):
    receiver_id: str
    content: str


class MessageResponse(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    read: bool = False
    created_at: Optional[datetime] = None
    sender_profile: Optional[Profile] = None
    receiver_profile: Optional[Profile] = None

    class Config:
        from_attributes = True


class UnreadCount(BaseModel):
    count: int
