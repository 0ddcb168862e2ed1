import logging
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.notifications.schemas import NotificationResponse

logger = logging.getLogger(__name__)

NOTIFICATION_LIMIT = 10


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_notifications(self, user_id: str, limit: Optional[int] = None) -> List[NotificationResponse]:
        """Latest notifications with the related task and message joined"""
        try:
            result = self.supabase.table("notifications")\
                .select("*, task:tasks(*), message:messages(*)")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit or NOTIFICATION_LIMIT)\
                .execute()
            return [NotificationResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching notifications: {e}")
            raise HTTPException(status_code=500, detail="Failed to load notifications")

    def unread_count(self, user_id: str) -> int:
        try:
            result = self.supabase.table("notifications")\
                .select("*", count="exact", head=True)\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error fetching unread notifications count: {e}")
            raise HTTPException(status_code=500, detail="Failed to load notifications")

    def mark_as_read(self, notification_id: str) -> bool:
        """Mark exactly one notification read"""
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("id", notification_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} as read: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notification")

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark the user's unread notifications read; returns how many changed"""
        try:
            result = self.supabase.table("notifications")\
                .update({"read": True})\
                .eq("user_id", user_id)\
                .eq("read", False)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            logger.error(f"Error marking all notifications as read: {e}")
            raise HTTPException(status_code=500, detail="Failed to update notifications")

    def delete_notification(self, notification_id: str) -> bool:
        try:
            result = self.supabase.table("notifications")\
                .delete()\
                .eq("id", notification_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting notification {notification_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete notification")
