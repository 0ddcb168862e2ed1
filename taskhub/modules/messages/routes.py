from fastapi import APIRouter, Depends
from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.modules.messages.schemas import MessageCreate, MessageResponse, UnreadCount
from taskhub.modules.messages.service import MessageService
from taskhub.modules.profiles.schemas import Profile
from supabase import Client
from typing import List

router = APIRouter(prefix="/messages", tags=["messages"])


def get_message_service(supabase: Client = Depends(get_user_supabase)) -> MessageService:
    return MessageService(supabase)


@router.get("/contacts", response_model=List[Profile])
async def list_contacts(
    current_user: Profile = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    """List conversation partners"""
    return service.list_contacts(current_user.id)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    current_user: Profile = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    """Number of unread messages"""
    return UnreadCount(count=service.unread_count(current_user.id))


@router.get("/{contact_id}", response_model=List[MessageResponse])
async def get_conversation(
    contact_id: str,
    current_user: Profile = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    """Conversation with a contact (marks their messages read)"""
    return service.get_conversation(current_user.id, contact_id)


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    message_data: MessageCreate,
    current_user: Profile = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    """Send a direct message"""
    return service.send_message(current_user.id, message_data.receiver_id, message_data.content)
