from fastapi import APIRouter, Depends, HTTPException
from taskhub.core.dependencies import get_current_user, get_user_supabase
from taskhub.modules.comments.schemas import CommentCreate, CommentResponse
from taskhub.modules.comments.service import CommentService
from taskhub.modules.profiles.schemas import Profile
from supabase import Client
from typing import List

router = APIRouter(tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_user_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("/tasks/{task_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    task_id: str,
    current_user: Profile = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    """List comments of a task"""
    return service.list_comments(task_id)


@router.post("/tasks/{task_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    task_id: str,
    comment_data: CommentCreate,
    current_user: Profile = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    """Add a comment to a task"""
    return service.create_comment(task_id, current_user.id, comment_data.content)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    current_user: Profile = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    """Delete a comment"""
    if not service.delete_comment(comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
    return None
