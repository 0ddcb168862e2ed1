import logging
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.chat.schemas import ChatMessageResponse
from taskhub.modules.profiles.schemas import Profile

logger = logging.getLogger(__name__)

CHAT_SELECT = "*, sender_profile:profiles(*)"


class TaskChatService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_messages(self, task_id: str) -> List[ChatMessageResponse]:
        """Chat history of a task in send order"""
        try:
            result = self.supabase.table("task_chat_messages")\
                .select(CHAT_SELECT)\
                .eq("task_id", task_id)\
                .order("created_at")\
                .execute()
            return [ChatMessageResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching task chat messages for {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load chat messages")

    def get_message_with_sender(self, message_id: str) -> ChatMessageResponse:
        """Single message with its sender profile, used for realtime inserts"""
        try:
            result = self.supabase.table("task_chat_messages")\
                .select(CHAT_SELECT)\
                .eq("id", message_id)\
                .single()\
                .execute()
            return ChatMessageResponse(**result.data)
        except Exception as e:
            logger.error(f"Error fetching chat message {message_id}: {e}")
            raise HTTPException(status_code=404, detail="Message not found")

    def send_message(self, task_id: str, sender_id: str, content: str) -> ChatMessageResponse:
        """Post a message to the task chat"""
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=400, detail="Message cannot be empty")
        try:
            result = self.supabase.table("task_chat_messages").insert({
                "task_id": task_id,
                "sender_id": sender_id,
                "content": content,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to send message")

            return ChatMessageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error sending chat message to task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send message")

    def list_participants(self, creator_id: str, assignee_id: Optional[str] = None) -> List[Profile]:
        """Profiles of the task creator and assignee"""
        ids = list(dict.fromkeys(i for i in (creator_id, assignee_id) if i))
        if not ids:
            return []
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .in_("id", ids)\
                .execute()
            return [Profile(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching participants: {e}")
            raise HTTPException(status_code=500, detail="Failed to load participants")
