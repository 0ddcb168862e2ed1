from pydantic import BaseModel
from typing import Optional, Literal, Dict, Any
from datetime import datetime

NotificationType = Literal["comment", "status", "priority", "assignment", "message"]


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    task_id: Optional[str] = None
    message_id: Optional[str] = None
    type: NotificationType
    content: str
    read: bool = False
    created_at: Optional[datetime] = None
    task: Optional[Dict[str, Any]] = None
    message: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True
