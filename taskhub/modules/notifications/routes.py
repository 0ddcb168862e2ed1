from fastapi import APIRouter, Depends, HTTPException
from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.modules.messages.schemas import UnreadCount
from taskhub.modules.notifications.schemas import NotificationResponse
from taskhub.modules.notifications.service import NotificationService
from taskhub.modules.profiles.schemas import Profile
from supabase import Client
from typing import List

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_user_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: Profile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Latest notifications for the current user"""
    return service.list_notifications(current_user.id)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    current_user: Profile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return UnreadCount(count=service.unread_count(current_user.id))


@router.post("/read-all")
async def mark_all_as_read(
    current_user: Profile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark all notifications as read"""
    return {"updated": service.mark_all_as_read(current_user.id)}


@router.post("/{notification_id}/read", status_code=204)
async def mark_as_read(
    notification_id: str,
    current_user: Profile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark one notification as read"""
    if not service.mark_as_read(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return None


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: str,
    current_user: Profile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Delete a notification"""
    if not service.delete_notification(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return None
