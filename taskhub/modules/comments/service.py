import logging
from typing import List

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.comments.schemas import CommentResponse

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_comments(self, task_id: str) -> List[CommentResponse]:
        """Comments of a task, oldest first, with author profile"""
        try:
            result = self.supabase.table("comments")\
                .select("*, user_profile:profiles(*)")\
                .eq("task_id", task_id)\
                .order("created_at")\
                .execute()
            return [CommentResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching comments for task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load comments")

    def create_comment(self, task_id: str, user_id: str, content: str) -> CommentResponse:
        """Add a comment to a task"""
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=400, detail="Comment cannot be empty")
        try:
            result = self.supabase.table("comments").insert({
                "task_id": task_id,
                "user_id": user_id,
                "content": content,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add comment")

            return CommentResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding comment to task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add comment")

    def delete_comment(self, comment_id: str) -> bool:
        """Delete a comment"""
        try:
            result = self.supabase.table("comments")\
                .delete()\
                .eq("id", comment_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting comment {comment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete comment")
