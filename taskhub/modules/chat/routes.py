from fastapi import APIRouter, Depends
from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.modules.chat.schemas import ChatMessageCreate, ChatMessageResponse
from taskhub.modules.chat.service import TaskChatService
from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.tasks.service import TaskService
from supabase import Client
from typing import List

router = APIRouter(prefix="/tasks/{task_id}/chat", tags=["chat"])


def get_chat_service(supabase: Client = Depends(get_user_supabase)) -> TaskChatService:
    return TaskChatService(supabase)


@router.get("", response_model=List[ChatMessageResponse])
async def list_messages(
    task_id: str,
    current_user: Profile = Depends(get_current_user),
    service: TaskChatService = Depends(get_chat_service)
):
    """List chat messages of a task"""
    return service.list_messages(task_id)


@router.post("", response_model=ChatMessageResponse, status_code=201)
async def send_message(
    task_id: str,
    message_data: ChatMessageCreate,
    current_user: Profile = Depends(get_current_user),
    service: TaskChatService = Depends(get_chat_service)
):
    """Send a message to the task chat"""
    return service.send_message(task_id, current_user.id, message_data.content)


@router.get("/participants", response_model=List[Profile])
async def list_participants(
    task_id: str,
    current_user: Profile = Depends(get_current_user),
    supabase: Client = Depends(get_user_supabase)
):
    """Creator and assignee of the task"""
    task = TaskService(supabase).get_task(task_id)
    return TaskChatService(supabase).list_participants(task.created_by, task.assigned_to)
