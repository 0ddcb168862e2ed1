from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.modules.attachments.routes import read_uploads
from taskhub.modules.attachments.service import AttachmentService
from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.tasks.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, TaskHistoryResponse,
    TaskPriority, SortField, SortDirection
)
from taskhub.modules.tasks.service import TaskService, filter_and_sort_tasks
from supabase import Client
from datetime import datetime
from typing import List, Optional

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_service(supabase: Client = Depends(get_user_supabase)) -> TaskService:
    return TaskService(supabase)


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    search: Optional[str] = None,
    status: str = "all",
    priority: str = "all",
    sort_field: SortField = "created_at",
    sort_direction: SortDirection = "desc",
    current_user: Profile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """List visible tasks with search, filters and sorting applied"""
    tasks = service.list_tasks(current_user)
    return filter_and_sort_tasks(tasks, search, status, priority, sort_field, sort_direction)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    current_user: Profile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Get task by ID"""
    return service.get_task(task_id)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    task_data: TaskCreate,
    current_user: Profile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Create a new task"""
    return service.create_task(task_data, current_user.id)


@router.post("/with-files", response_model=TaskResponse, status_code=201)
async def create_task_with_files(
    title: str = Form(...),
    description: Optional[str] = Form(None),
    priority: TaskPriority = Form("medium"),
    assigned_to: Optional[str] = Form(None),
    team_id: Optional[str] = Form(None),
    due_date: Optional[datetime] = Form(None),
    files: List[UploadFile] = File(default=[]),
    current_user: Profile = Depends(get_current_user),
    supabase: Client = Depends(get_user_supabase)
):
    """Create a task and upload its attachments in one request.

    The task row is kept even when some uploads fail.
    """
    service = TaskService(supabase)
    task = service.create_task(
        TaskCreate(
            title=title,
            description=description,
            priority=priority,
            assigned_to=assigned_to,
            team_id=team_id,
            due_date=due_date,
        ),
        current_user.id,
    )
    uploads = await read_uploads(files)
    if uploads:
        AttachmentService(supabase).upload_attachments(task.id, current_user.id, uploads)
        task = task.model_copy(update={"attachment_count": len(uploads)})
    return task


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    changes: TaskUpdate,
    current_user: Profile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Update a task (status for everyone, other fields for managers)"""
    return service.update_task(task_id, changes, current_user)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    current_user: Profile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Delete a task"""
    if not service.delete_task(task_id, current_user):
        raise HTTPException(status_code=404, detail="Task not found")
    return None


@router.get("/{task_id}/history", response_model=List[TaskHistoryResponse])
async def get_task_history(
    task_id: str,
    current_user: Profile = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Get the change history of a task"""
    return service.list_history(task_id)
