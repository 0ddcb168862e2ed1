from dataclasses import dataclass
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from taskhub.modules.profiles.schemas import Profile


@dataclass
class AttachmentUpload:
    """A file read from the request, ready to be stored."""
    file_name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class AttachmentResponse(BaseModel):
    id: str
    task_id: str
    user_id: str
    file_name: str
    file_type: str
    file_url: str
    file_size: Optional[int] = None
    created_at: Optional[datetime] = None
    user_profile: Optional[Profile] = None

    class Config:
        from_attributes = True
